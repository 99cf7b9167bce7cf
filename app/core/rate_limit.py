"""Per-client-IP rate limiting middleware.

This module wires the token bucket registry into the HTTP layer.

Design goals:
- No module globals: the registry is built once by the app factory, stored on
  ``app.state.rate_limiter`` and looked up through the request.
- Swap-friendly: the middleware depends only on AbstractRateLimiter.
- Throttled requests get a 429 with a machine-readable body; retrying is the
  client's job.
"""

from __future__ import annotations

import logging

from fastapi import Request, Response

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitConfig
from app.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter
from app.core.config import RateLimitSettings
from app.core.errors import RateLimitAppError
from app.core.exception_handlers import render_app_error
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

# Paths that never consume tokens
EXEMPT_PATHS = frozenset({"/health"})


def build_rate_limiter(rate_limit_settings: RateLimitSettings) -> AbstractRateLimiter:
    """Build the process-local rate limiter from settings.

    Args:
        rate_limit_settings: Resolved rate limit settings.

    Returns:
        AbstractRateLimiter: A fresh, empty registry.
    """

    config = RateLimitConfig(
        requests_per_minute=rate_limit_settings.requests_per_minute,
        burst=rate_limit_settings.burst,
        idle_ttl_seconds=rate_limit_settings.idle_ttl_seconds,
        max_clients=rate_limit_settings.max_clients,
        sweep_interval_seconds=rate_limit_settings.sweep_interval_seconds,
    )
    return InMemoryTokenBucketRateLimiter(config)


def resolve_client_identifier(request: Request, *, trust_forwarded_for: bool = False) -> str:
    """Return the identifier the request is rate limited under.

    Args:
        request: Incoming request.
        trust_forwarded_for: Use the first X-Forwarded-For hop when present.
            Only enable behind a proxy that overwrites the header.

    Returns:
        str: Client IP address, or "unknown" when the transport has none.
    """

    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def rate_limit_message(requests_per_minute: int) -> str:
    return f"Maximum {requests_per_minute} requests per minute"


async def rate_limit_middleware(request: Request, call_next) -> Response:
    """HTTP middleware admitting or throttling each request by client IP.

    Consumes one token from the client's bucket. When the bucket is empty the
    request never reaches the route and a 429 is returned instead.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response, or a 429 error response.
    """

    rl_settings: RateLimitSettings = request.app.state.settings.rate_limit
    if not rl_settings.enabled or request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    limiter: AbstractRateLimiter = request.app.state.rate_limiter
    identifier = resolve_client_identifier(
        request, trust_forwarded_for=rl_settings.trust_forwarded_for
    )

    result = limiter.consume(identifier)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "client_hash": hash_identifier(identifier),
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return await call_next(request)

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_hash": hash_identifier(identifier),
            "limit": result.limit,
            "remaining": result.remaining,
            "requests_per_minute": rl_settings.requests_per_minute,
            "retry_after_s": retry_after,
            "request_path": request.url.path,
        },
    )

    headers: dict[str, str] = {}
    if rl_settings.include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)

    error = RateLimitAppError(
        code="rate_limit_exceeded",
        message=rate_limit_message(rl_settings.requests_per_minute),
    )
    return render_app_error(error, headers=headers)
