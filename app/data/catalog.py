"""Built-in extension dataset served when no catalog file is configured."""

from __future__ import annotations

from typing import Any

DEFAULT_EXTENSIONS: list[dict[str, Any]] = [
    {
        "id": "dark-reader",
        "name": "Dark Reader",
        "description": "Dark mode for every website.",
        "author": "Dark Reader Ltd",
        "version": "4.9.86",
        "category": "accessibility",
        "url": "https://darkreader.org/",
    },
    {
        "id": "ublock-origin",
        "name": "uBlock Origin",
        "description": "Efficient wide-spectrum content blocker.",
        "author": "Raymond Hill",
        "version": "1.57.2",
        "category": "privacy",
        "url": "https://github.com/gorhill/uBlock",
    },
    {
        "id": "json-formatter",
        "name": "JSON Formatter",
        "description": "Pretty-prints JSON documents opened in the browser.",
        "author": "Callum Locke",
        "version": "0.7.1",
        "category": "developer-tools",
        "url": "https://github.com/callumlocke/json-formatter",
    },
    {
        "id": "react-devtools",
        "name": "React Developer Tools",
        "description": "Inspect the React component hierarchy.",
        "author": "Meta",
        "version": "5.2.0",
        "category": "developer-tools",
        "url": "https://react.dev/learn/react-developer-tools",
    },
    {
        "id": "bitwarden",
        "name": "Bitwarden Password Manager",
        "description": "Open source password manager.",
        "author": "Bitwarden Inc.",
        "version": "2024.6.2",
        "category": "security",
        "url": "https://bitwarden.com/",
    },
    {
        "id": "grammarly",
        "name": "Grammarly",
        "description": "Writing assistant for grammar and tone.",
        "author": "Grammarly Inc.",
        "version": "14.1180.0",
        "category": "productivity",
        "url": "https://www.grammarly.com/",
    },
    {
        "id": "wappalyzer",
        "name": "Wappalyzer",
        "description": "Identifies technologies used on websites.",
        "author": "Wappalyzer",
        "version": "6.10.74",
        "category": "developer-tools",
        "url": "https://www.wappalyzer.com/",
    },
    {
        "id": "onetab",
        "name": "OneTab",
        "description": "Collapses open tabs into a single list.",
        "author": "OneTab",
        "version": "1.83",
        "category": "productivity",
        "url": "https://www.one-tab.com/",
    },
]
