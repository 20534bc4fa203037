"""Unit tests for the in-memory sliding-window rate limiter."""

from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter


def test_fifth_request_allowed_sixth_denied() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_seconds=3600, clock=clock)

    for _ in range(4):
        assert limiter.allow("1.2.3.4") is True

    fifth = limiter.consume("1.2.3.4")
    assert fifth.allowed is True
    assert fifth.remaining == 0

    sixth = limiter.consume("1.2.3.4")
    assert sixth.allowed is False
    assert sixth.retry_after_seconds == 3600


def test_window_slides_instead_of_resetting_on_boundaries() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    assert limiter.allow("k") is True
    clock.return_value = 1030.0
    assert limiter.allow("k") is True
    assert limiter.allow("k") is False

    # First hit expires, second one still counts
    clock.return_value = 1060.0
    assert limiter.allow("k") is True
    assert limiter.allow("k") is False

    blocked = limiter.consume("k")
    assert blocked.retry_after_seconds == 30


def test_count_resets_after_window_elapses() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=5, window_seconds=3600, clock=clock)

    for _ in range(5):
        assert limiter.allow("k") is True
    assert limiter.allow("k") is False

    clock.return_value = 1000.0 + 3600
    for _ in range(5):
        assert limiter.allow("k") is True


def test_denied_requests_do_not_extend_the_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    assert limiter.allow("k") is True
    clock.return_value = 1009.0
    assert limiter.allow("k") is False

    clock.return_value = 1010.0
    assert limiter.allow("k") is True


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.allow("k1") is True
    assert limiter.allow("k1") is False

    assert limiter.allow("k2") is True


def test_reset_forgets_history() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=lambda: 5.0)

    assert limiter.allow("k") is True
    limiter.reset()
    assert limiter.allow("k") is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemorySlidingWindowRateLimiter(**kwargs)


def test_empty_key_rejected() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60)

    with pytest.raises(ValueError):
        limiter.consume("")
