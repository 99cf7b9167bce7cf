"""Application factory for FastAPI app.

Centralizes app construction (state, middleware, handlers, routers) so every
app instance owns its own catalog and rate limiter registry. Tests build a
fresh app per case instead of sharing process-wide limiter state.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.api.routes import extensions_router, health_router
from app.core.config import Settings, settings as default_settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_rate_limiter, rate_limit_middleware
from app.core.security import security_middleware
from app.services.extension_service import ExtensionService, load_extensions

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    extension_service: ExtensionService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings to use; the global settings when omitted.
        rate_limiter: Registry to inject; built from settings when omitted.
        extension_service: Catalog to inject; loaded from settings when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    app = FastAPI(
        title="Extensions API",
        description=(
            "Read-only API over a catalog of browser extensions. Requests are "
            "rate limited per client IP with a token bucket and automated "
            "user agents are rejected."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.state.settings = cfg
    app.state.rate_limiter = rate_limiter or build_rate_limiter(cfg.rate_limit)
    app.state.extension_service = extension_service or ExtensionService(
        load_extensions(cfg.app.extensions_file)
    )

    # Middleware: the last registered runs first, so the request pipeline is
    # request id -> security filter -> rate limiter -> route.
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(security_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(extensions_router, prefix="/api")
    app.include_router(health_router)

    # OpenAPI customizations (tags, middleware responses)
    apply_openapi_customizations(app)

    logger.info(
        "app.created",
        extra={
            "app_env": cfg.app_env,
            "rate_limit_enabled": cfg.rate_limit.enabled,
            "requests_per_minute": cfg.rate_limit.requests_per_minute,
            "burst": cfg.rate_limit.burst,
        },
    )
    return app
