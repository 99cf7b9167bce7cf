"""Application-level exception types.

This module defines domain errors used across services and the HTTP layer,
enabling consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep error shapes consistent across the codebase
    without forcing every error to fill all of them.
    """

    hint: str
    extension_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message (optional in responses).
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str = ""
    details: ErrorDetails | None = None

    status_code = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message or self.code)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""

    status_code = 404


class AccessDeniedAppError(AppError):
    """Raised when a request is refused by the security filter."""

    status_code = 403


class RateLimitAppError(AppError):
    """Raised when a client exhausted its request budget."""

    status_code = 429
