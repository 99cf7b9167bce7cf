"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the storage backend can be swapped later with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitConfig:
    """Token bucket parameters shared by every client bucket.

    Attributes:
        requests_per_minute: Tokens added to a bucket per minute.
        burst: Bucket capacity, the largest number of back-to-back requests.
        idle_ttl_seconds: Buckets untouched for longer are dropped. Raised to
            the full-refill time when configured lower, so dropping a bucket
            never changes a decision.
        max_clients: Upper bound on tracked clients, None for unbounded.
        sweep_interval_seconds: Minimum spacing between idle sweeps.
    """

    requests_per_minute: int = 10
    burst: int = 5
    idle_ttl_seconds: float = 600.0
    max_clients: int | None = 10000
    sweep_interval_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.requests_per_minute < 1:
            raise ValueError("requests_per_minute must be >= 1")
        if self.burst < 1:
            raise ValueError("burst must be >= 1")
        if self.idle_ttl_seconds <= 0:
            raise ValueError("idle_ttl_seconds must be > 0")
        if self.max_clients is not None and self.max_clients < 1:
            raise ValueError("max_clients must be >= 1 or None")
        if self.sweep_interval_seconds < 0:
            raise ValueError("sweep_interval_seconds must be >= 0")

    @property
    def refill_rate(self) -> float:
        """Tokens added per second."""
        return self.requests_per_minute / 60.0

    @property
    def full_refill_seconds(self) -> float:
        """Time for an empty bucket to refill completely."""
        return self.burst / self.refill_rate

    @property
    def effective_idle_ttl(self) -> float:
        return max(self.idle_ttl_seconds, self.full_refill_seconds)


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Bucket capacity (burst).
        remaining: Whole tokens left after this decision.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, identifier: str, now: float | None = None) -> RateLimitResult:
        """Consume one unit of budget for a given identifier.

        Args:
            identifier: Client identifier (e.g., IP address).
            now: Current timestamp; the limiter's clock when omitted.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    def allow(self, identifier: str, now: float | None = None) -> bool:
        """Return True if the request is admitted."""
        return self.consume(identifier, now).allowed
