"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Tags metadata
- The 403/429 responses produced by middleware, which FastAPI cannot see
  from the route signatures

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_MIDDLEWARE_RESPONSES: Dict[str, Dict[str, Any]] = {
    "403": {
        "description": "Automated client rejected by the security filter",
        "content": {
            "application/json": {"example": {"error": "automated_access_denied"}}
        },
    },
    "429": {
        "description": "Client exceeded its request budget",
        "content": {
            "application/json": {
                "example": {
                    "error": "rate_limit_exceeded",
                    "message": "Maximum 10 requests per minute",
                }
            }
        },
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and middleware responses.

    - Adds tags metadata if not present
    - Documents 403/429 on every /api operation
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Extensions",
                "description": "Read-only access to the extension catalog.",
            },
            {
                "name": "Health",
                "description": "Liveness checks (not rate limited).",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        paths = schema.get("paths", {})
        for path, methods in paths.items():
            if not path.startswith("/api/"):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    responses = method_obj.setdefault("responses", {})
                    for status_code, body in _MIDDLEWARE_RESPONSES.items():
                        responses.setdefault(status_code, body)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
