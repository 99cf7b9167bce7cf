"""In-memory token bucket rate limiter keyed by client identifier.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: one lock guards the bucket map and all bucket arithmetic.
- Bounded: idle buckets expire lazily and the map is capped with LRU eviction.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitConfig, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class ClientBucket:
    """Token bucket state for a single client.

    Tokens are kept as exact fractions: refills telescope to exactly the
    tokens earned between two timestamps, so the whole-token check never
    drifts however the elapsed time is split across calls.

    Attributes:
        identifier: Client key, typically an IP address.
        capacity: Maximum tokens the bucket holds.
        tokens: Tokens currently available, within [0, capacity].
        last_refill: Timestamp of the last replenishment.
    """

    identifier: str
    capacity: int
    tokens: Fraction
    last_refill: float

    def __post_init__(self) -> None:
        self.tokens = Fraction(self.tokens)

    def refill(self, now: float, requests_per_minute: int) -> None:
        """Add the tokens earned since last_refill, capped at capacity.

        A timestamp older than last_refill counts as zero elapsed time and
        does not move last_refill backwards.
        """
        elapsed = Fraction(now) - Fraction(self.last_refill)
        if elapsed <= 0:
            return
        earned = elapsed * requests_per_minute / 60
        self.tokens = min(Fraction(self.capacity), self.tokens + earned)
        self.last_refill = now

    def take(self) -> bool:
        if self.tokens >= 1:
            self.tokens -= 1
            return True
        return False


class InMemoryTokenBucketRateLimiter(AbstractRateLimiter):
    """Registry of per-client token buckets.

    Buckets are created full on first sighting of an identifier. Every call
    refills the bucket for the elapsed time, then admits the request if at
    least one whole token is available. Rejected requests consume nothing.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty registry.

        Args:
            config: Bucket parameters; defaults to 10 requests/minute, burst 5.
            clock: Time source in seconds, used when callers omit ``now``.
        """
        self._config = config or RateLimitConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._buckets: OrderedDict[str, ClientBucket] = OrderedDict()
        self._last_sweep: float | None = None
        self._evictions = 0
        self._allowed = 0
        self._rejected = 0

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._buckets

    def __repr__(self) -> str:
        return (
            f"InMemoryTokenBucketRateLimiter(requests_per_minute={self._config.requests_per_minute}, "
            f"burst={self._config.burst}, clients={len(self)})"
        )

    def consume(self, identifier: str, now: float | None = None) -> RateLimitResult:
        """Decide whether ``identifier`` may make a request at ``now``.

        Lookup-or-create, refill, and take happen under one lock, so calls
        for the same identifier are linearizable and never over-admit.

        Args:
            identifier: Non-empty client identifier.
            now: Current timestamp in seconds; the clock when omitted.

        Returns:
            RateLimitResult with the decision and bucket metadata.

        Raises:
            ValueError: If identifier is empty.
        """
        if not identifier:
            raise ValueError("identifier must be a non-empty string")

        if now is None:
            now = self._clock()

        with self._lock:
            self._maybe_sweep_locked(now)

            bucket = self._get_or_create_locked(identifier, now)
            bucket.refill(now, self._config.requests_per_minute)

            if bucket.take():
                self._allowed += 1
                return RateLimitResult(
                    allowed=True,
                    limit=bucket.capacity,
                    remaining=int(bucket.tokens),
                )

            self._rejected += 1
            return RateLimitResult(
                allowed=False,
                limit=bucket.capacity,
                remaining=0,
                retry_after_seconds=self._retry_after(bucket),
            )

    def sweep(self, now: float | None = None) -> int:
        """Drop buckets idle for longer than the idle TTL.

        Args:
            now: Current timestamp in seconds; the clock when omitted.

        Returns:
            Number of buckets removed.
        """
        if now is None:
            now = self._clock()
        with self._lock:
            return self._sweep_locked(now)

    def stats(self) -> dict[str, int]:
        """Return lightweight counters without exposing identifiers."""
        with self._lock:
            return {
                "clients": len(self._buckets),
                "evictions": self._evictions,
                "allowed": self._allowed,
                "rejected": self._rejected,
            }

    def _get_or_create_locked(self, identifier: str, now: float) -> ClientBucket:
        bucket = self._buckets.get(identifier)
        if bucket is not None:
            self._buckets.move_to_end(identifier)
            return bucket

        bucket = ClientBucket(
            identifier=identifier,
            capacity=self._config.burst,
            tokens=Fraction(self._config.burst),
            last_refill=now,
        )
        self._buckets[identifier] = bucket
        self._evict_if_over_capacity_locked()
        return bucket

    def _evict_if_over_capacity_locked(self) -> None:
        max_clients = self._config.max_clients
        if max_clients is None:
            return

        while len(self._buckets) > max_clients:
            # popitem(last=False) removes the least recently used bucket
            self._buckets.popitem(last=False)
            self._evictions += 1

    def _maybe_sweep_locked(self, now: float) -> None:
        if self._last_sweep is None:
            self._last_sweep = now
            return
        if now - self._last_sweep >= self._config.sweep_interval_seconds:
            self._sweep_locked(now)

    def _sweep_locked(self, now: float) -> int:
        ttl = self._config.effective_idle_ttl
        idle = [key for key, bucket in self._buckets.items() if now - bucket.last_refill > ttl]
        for key in idle:
            del self._buckets[key]
        self._evictions += len(idle)
        self._last_sweep = now

        if idle:
            logger.debug(
                "rate_limit.sweep",
                extra={"evicted": len(idle), "clients": len(self._buckets)},
            )
        return len(idle)

    def _retry_after(self, bucket: ClientBucket) -> int:
        missing = max(Fraction(0), 1 - bucket.tokens)
        return max(1, math.ceil(missing * 60 / self._config.requests_per_minute))
