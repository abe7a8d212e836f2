"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any app import so the settings object
is built with test values and no .env file is required.
"""

import os
from unittest.mock import Mock

import pytest

# CRITICAL: Set these before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "INFO")

from fastapi.testclient import TestClient  # noqa: E402

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter  # noqa: E402
from app.core.app_factory import create_app  # noqa: E402


@pytest.fixture
def clock() -> Mock:
    """Controllable millisecond clock starting at 0."""
    return Mock(return_value=0)


@pytest.fixture
def limiter(clock: Mock) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(limit=3, window_ms=60_000, clock=clock)


@pytest.fixture
def client(limiter: InMemorySlidingWindowRateLimiter) -> TestClient:
    """Test client for a fresh app using the small test limiter."""
    return TestClient(create_app(rate_limiter=limiter))


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key-123"}
