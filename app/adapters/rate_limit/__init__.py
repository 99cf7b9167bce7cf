"""Rate limiting adapters.

This package provides a small abstraction layer so the API can start with an
in-memory token bucket registry and later migrate to a shared store without
changing the HTTP layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitConfig, RateLimitResult
from app.adapters.rate_limit.in_memory import ClientBucket, InMemoryTokenBucketRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "ClientBucket",
    "InMemoryTokenBucketRateLimiter",
    "RateLimitConfig",
    "RateLimitResult",
]
