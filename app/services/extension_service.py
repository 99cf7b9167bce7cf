"""Extension catalog loading and lookup.

The catalog is immutable after startup, so lookups need no locking. Records
come from the built-in dataset unless APP_EXTENSIONS_FILE points at a JSON
file containing a list of records.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from app.core.errors import NotFoundAppError, ValidationAppError
from app.data.catalog import DEFAULT_EXTENSIONS
from app.schemas.extension import Extension

logger = logging.getLogger(__name__)

_EXTENSION_LIST = TypeAdapter(list[Extension])


def load_extensions(path: str | Path | None = None) -> list[Extension]:
    """Load and validate catalog records.

    Args:
        path: Optional JSON file; the built-in dataset is used when None.

    Returns:
        Validated records in file order.

    Raises:
        ValidationAppError: If the file is missing, malformed, or repeats an id.
    """
    source = str(path) if path else "builtin"

    try:
        if path:
            raw = Path(path).read_bytes()
            extensions = _EXTENSION_LIST.validate_json(raw)
        else:
            extensions = _EXTENSION_LIST.validate_python(DEFAULT_EXTENSIONS)
    except OSError as exc:
        raise ValidationAppError(
            code="catalog_unreadable",
            message=f"Cannot read extension catalog: {exc}",
            details={"hint": "Check APP_EXTENSIONS_FILE"},
        ) from exc
    except ValidationError as exc:
        raise ValidationAppError(
            code="catalog_invalid",
            message="Extension catalog does not match the expected schema",
            details={"context": {"errors": exc.error_count()}},
        ) from exc

    seen: set[str] = set()
    for extension in extensions:
        if extension.id in seen:
            raise ValidationAppError(
                code="catalog_duplicate_id",
                message=f"Duplicate extension id in catalog: {extension.id}",
                details={"extension_id": extension.id},
            )
        seen.add(extension.id)

    logger.info("catalog.loaded", extra={"source": source, "count": len(extensions)})
    return extensions


class ExtensionService:
    """Read-only queries over the extension catalog."""

    def __init__(self, extensions: list[Extension]) -> None:
        self._extensions = list(extensions)
        self._by_id = {extension.id: extension for extension in self._extensions}

    def __len__(self) -> int:
        return len(self._extensions)

    def list_all(self) -> list[Extension]:
        return list(self._extensions)

    def get(self, extension_id: str) -> Extension:
        """Return the record with ``extension_id``.

        Raises:
            NotFoundAppError: If no record has that id.
        """
        extension = self._by_id.get(extension_id)
        if extension is None:
            raise NotFoundAppError(code="extension_not_found")
        return extension

    def search(self, query: str) -> list[Extension]:
        """Case-insensitive substring match on the extension name."""
        needle = query.lower()
        return [extension for extension in self._extensions if needle in extension.name.lower()]
