from __future__ import annotations

from app.api.routes.extensions import router as extensions_router
from app.api.routes.health import router as health_router

__all__ = ["extensions_router", "health_router"]
