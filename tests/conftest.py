"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any app import so the global settings
pick them up.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, Callable
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from app.adapters.rate_limit.base import RateLimitConfig
from app.adapters.rate_limit.in_memory import InMemoryTokenBucketRateLimiter
from app.core.app_factory import create_app
from app.core.config import AppSettings, RateLimitSettings, Settings


def build_settings(
    *,
    app: dict[str, Any] | None = None,
    rate_limit: dict[str, Any] | None = None,
) -> Settings:
    """Build isolated settings with optional per-section overrides."""
    return Settings(
        app=AppSettings(**(app or {})),
        rate_limit=RateLimitSettings(**(rate_limit or {})),
    )


@pytest.fixture
def make_client() -> Callable[..., TestClient]:
    """Factory for test clients backed by a fresh app and an empty registry."""

    def _make(
        *,
        app: dict[str, Any] | None = None,
        rate_limit: dict[str, Any] | None = None,
        rate_limiter: InMemoryTokenBucketRateLimiter | None = None,
    ) -> TestClient:
        settings = build_settings(app=app, rate_limit=rate_limit)
        return TestClient(create_app(settings, rate_limiter=rate_limiter))

    return _make


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    """Client with a budget large enough that routes are never throttled."""
    return make_client(rate_limit={"burst": 1000, "requests_per_minute": 1000})


@pytest.fixture
def clock() -> Mock:
    """Controllable time source starting at t=0."""
    return Mock(return_value=0.0)


@pytest.fixture
def make_limiter(clock: Mock) -> Callable[..., InMemoryTokenBucketRateLimiter]:
    def _make(**config: Any) -> InMemoryTokenBucketRateLimiter:
        return InMemoryTokenBucketRateLimiter(RateLimitConfig(**config), clock=clock)

    return _make
