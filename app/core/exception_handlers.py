"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return consistent JSON responses with proper
HTTP status codes.

Design:
- AppError subclasses → their declared HTTP status (400, 403, 404, 429)
- Unexpected Exception → generic 500 (safety net)
- Bodies are flat: {"error": code} plus "message"/"details" when present
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.errors import AppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def build_error_response(
    status_code: int,
    code: str,
    message: str | None = None,
    *,
    details: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Render an error body in the shape every endpoint and middleware uses.

    Middlewares run outside FastAPI's exception handling, so they call this
    directly instead of raising; domain errors go through
    ``render_app_error``.

    Args:
        status_code: HTTP status to return.
        code: Machine-readable error code.
        message: Optional human-readable message.
        details: Optional structured context.
        headers: Optional extra response headers.

    Returns:
        JSONResponse with the error payload.
    """
    content: dict[str, Any] = {"error": code}
    if message:
        content["message"] = message
    if details:
        content["details"] = dict(details)

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=dict(headers) if headers else None,
    )


def render_app_error(exc: AppError, *, headers: Mapping[str, str] | None = None) -> JSONResponse:
    """Render an AppError with the status declared by its type."""
    return build_error_response(
        exc.status_code,
        exc.code,
        exc.message,
        details=exc.details,
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the status code declared by the error type.
    """
    status_code = exc.status_code

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    return render_app_error(exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic message.
    No stack traces or exception text reach the client.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return build_error_response(
        500,
        "internal_server_error",
        "An unexpected error occurred. Please try again later.",
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.

    Example:
        >>> from fastapi import FastAPI
        >>> from app.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
