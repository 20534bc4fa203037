"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before anything imports ``app.core.config``.
The document stores are replaced with in-memory fakes through
``app.dependency_overrides`` so no MongoDB server is needed.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("RECAPTCHA_SECRET_KEY", "")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_ENSURE_INDEXES", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.api.deps import (
    get_captcha_verifier,
    get_settings_store,
    get_waitlist_store,
)
from app.core.rate_limit import get_rate_limiter
from app.main import app
from tests.fakes import FakeClock, FakeSettingsStore, FakeWaitlistStore, StubCaptchaVerifier


@pytest.fixture
def waitlist_store() -> FakeWaitlistStore:
    return FakeWaitlistStore()


@pytest.fixture
def settings_store() -> FakeSettingsStore:
    # Captcha off by default so most tests can join without a token
    return FakeSettingsStore({"recaptcha_enabled": False})


@pytest.fixture
def captcha_verifier() -> StubCaptchaVerifier:
    return StubCaptchaVerifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(limit=5, window_seconds=3600, clock=clock)


@pytest.fixture
def client(
    waitlist_store: FakeWaitlistStore,
    settings_store: FakeSettingsStore,
    captcha_verifier: StubCaptchaVerifier,
    rate_limiter: InMemorySlidingWindowRateLimiter,
) -> Iterator[TestClient]:
    """Test client wired to the in-memory fakes."""
    app.dependency_overrides[get_waitlist_store] = lambda: waitlist_store
    app.dependency_overrides[get_settings_store] = lambda: settings_store
    app.dependency_overrides[get_captcha_verifier] = lambda: captcha_verifier
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
