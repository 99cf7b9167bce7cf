"""Tests for the per-client-IP rate limiting middleware."""

from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import Response

from app.adapters.rate_limit.base import RateLimitConfig
from app.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter
from app.core.rate_limit import (
    build_rate_limiter,
    rate_limit_middleware,
    resolve_client_identifier,
)
from app.core.config import RateLimitSettings, Settings
from app.core.errors import RateLimitAppError


def test_burst_then_429_with_machine_readable_body(make_client) -> None:
    client = make_client(rate_limit={"burst": 2, "requests_per_minute": 10})

    assert client.get("/api/extensions").status_code == 200
    assert client.get("/api/extensions").status_code == 200

    resp = client.get("/api/extensions")

    assert resp.status_code == 429
    assert resp.json() == {
        "error": "rate_limit_exceeded",
        "message": "Maximum 10 requests per minute",
    }
    assert resp.headers["X-RateLimit-Limit"] == "2"
    assert resp.headers["X-RateLimit-Remaining"] == "0"
    assert int(resp.headers["Retry-After"]) >= 1


def test_throttled_status_comes_from_error_type(make_client, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(RateLimitAppError, "status_code", 503)
    client = make_client(rate_limit={"burst": 1})
    client.get("/api/extensions")

    resp = client.get("/api/extensions")

    assert resp.status_code == 503
    assert resp.json()["error"] == "rate_limit_exceeded"
    assert "Retry-After" in resp.headers


def test_throttled_response_still_carries_cors_and_request_id(make_client) -> None:
    client = make_client(rate_limit={"burst": 1})
    client.get("/api/extensions")

    resp = client.get("/api/extensions", headers={"X-Request-ID": "req-429"})

    assert resp.status_code == 429
    assert resp.headers["Access-Control-Allow-Origin"] == "https://localhost:4321"
    assert resp.headers["X-Request-ID"] == "req-429"


def test_headers_can_be_disabled(make_client) -> None:
    client = make_client(rate_limit={"burst": 1, "include_headers": False})
    client.get("/api/extensions")

    resp = client.get("/api/extensions")

    assert resp.status_code == 429
    assert "Retry-After" not in resp.headers
    assert "X-RateLimit-Limit" not in resp.headers


def test_token_regenerates_after_refill_period(make_client, clock: Mock) -> None:
    limiter = InMemoryTokenBucketRateLimiter(
        RateLimitConfig(requests_per_minute=10, burst=5), clock=clock
    )
    client = make_client(rate_limiter=limiter)

    statuses = [client.get("/api/extensions").status_code for _ in range(6)]
    assert statuses == [200, 200, 200, 200, 200, 429]

    clock.return_value = 6.0
    assert client.get("/api/extensions").status_code == 200
    assert client.get("/api/extensions").status_code == 429


def test_all_routes_share_one_bucket_per_client(make_client) -> None:
    client = make_client(rate_limit={"burst": 2})

    assert client.get("/api/extensions/dark-reader").status_code == 200
    assert client.get("/api/extensions/search/dark").status_code == 200
    assert client.get("/api/extensions/missing").status_code == 429


def test_not_found_responses_consume_tokens(make_client) -> None:
    client = make_client(rate_limit={"burst": 1})

    assert client.get("/api/extensions/missing").status_code == 404
    assert client.get("/api/extensions/missing").status_code == 429


def test_health_is_exempt(make_client) -> None:
    client = make_client(rate_limit={"burst": 1})

    statuses = [client.get("/health").status_code for _ in range(5)]

    assert statuses == [200] * 5
    assert client.get("/api/extensions").status_code == 200


def test_disabled_rate_limit_admits_everything(make_client) -> None:
    client = make_client(rate_limit={"burst": 1, "enabled": False})

    statuses = [client.get("/api/extensions").status_code for _ in range(10)]

    assert statuses == [200] * 10


def test_forwarded_for_identifies_clients_when_trusted(make_client) -> None:
    client = make_client(rate_limit={"burst": 1, "trust_forwarded_for": True})

    first = {"X-Forwarded-For": "1.1.1.1, 10.0.0.1"}
    assert client.get("/api/extensions", headers=first).status_code == 200
    assert client.get("/api/extensions", headers=first).status_code == 429
    assert client.get("/api/extensions", headers={"X-Forwarded-For": "2.2.2.2"}).status_code == 200


def test_forwarded_for_ignored_by_default(make_client) -> None:
    client = make_client(rate_limit={"burst": 1})

    assert client.get("/api/extensions", headers={"X-Forwarded-For": "1.1.1.1"}).status_code == 200
    assert client.get("/api/extensions", headers={"X-Forwarded-For": "2.2.2.2"}).status_code == 429


def test_each_app_owns_its_registry(make_client) -> None:
    first = make_client(rate_limit={"burst": 1})
    second = make_client(rate_limit={"burst": 1})

    assert first.get("/api/extensions").status_code == 200
    assert first.get("/api/extensions").status_code == 429
    assert second.get("/api/extensions").status_code == 200


class TestResolveClientIdentifier:
    """Client identifier extraction."""

    def _request(self, host: str | None, headers: dict[str, str] | None = None) -> Mock:
        request = Mock()
        request.client = Mock(host=host) if host is not None else None
        request.headers = headers or {}
        return request

    def test_uses_transport_address(self) -> None:
        assert resolve_client_identifier(self._request("1.2.3.4")) == "1.2.3.4"

    def test_unknown_when_no_client(self) -> None:
        assert resolve_client_identifier(self._request(None)) == "unknown"

    def test_forwarded_for_first_hop(self) -> None:
        request = self._request("10.0.0.1", {"X-Forwarded-For": " 5.6.7.8 , 10.0.0.1"})
        assert resolve_client_identifier(request, trust_forwarded_for=True) == "5.6.7.8"

    def test_empty_forwarded_for_falls_back(self) -> None:
        request = self._request("10.0.0.1", {"X-Forwarded-For": ""})
        assert resolve_client_identifier(request, trust_forwarded_for=True) == "10.0.0.1"


def test_build_rate_limiter_maps_settings() -> None:
    limiter = build_rate_limiter(
        RateLimitSettings(requests_per_minute=30, burst=3, max_clients=None, idle_ttl_seconds=120)
    )

    assert isinstance(limiter, InMemoryTokenBucketRateLimiter)
    assert limiter.config.requests_per_minute == 30
    assert limiter.config.burst == 3
    assert limiter.config.max_clients is None
    assert limiter.config.idle_ttl_seconds == 120


@pytest.mark.asyncio
async def test_throttled_request_never_reaches_route() -> None:
    request = Mock()
    request.app.state.settings = Settings(rate_limit=RateLimitSettings(burst=1))
    request.app.state.rate_limiter = InMemoryTokenBucketRateLimiter(
        RateLimitConfig(burst=1), clock=lambda: 0.0
    )
    request.url.path = "/api/extensions"
    request.client.host = "1.2.3.4"
    request.headers = {}
    call_next = AsyncMock(return_value=Response(status_code=200))

    first = await rate_limit_middleware(request, call_next)
    second = await rate_limit_middleware(request, call_next)

    assert first.status_code == 200
    assert second.status_code == 429
    call_next.assert_awaited_once()
