"""Rate limiting wiring for the signup flow.

The limiter is consulted from inside the join operation (after captcha
verification), so it is exposed as a provider plus a checking helper rather
than a route-level dependency.

Strategy: sliding window per client IP, process-local.
"""

from __future__ import annotations

import hashlib
import logging

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import settings
from app.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return a process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemorySlidingWindowRateLimiter(
            limit=settings.app.rate_limit_requests,
            window_seconds=settings.app.rate_limit_window_seconds,
        )
        _limiter_config = config

    return _limiter


def _hash_limiter_key(key: str) -> str:
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def enforce_rate_limit(limiter: AbstractRateLimiter, client_ip: str) -> None:
    """Consume one unit of the client's budget or fail.

    Args:
        limiter: Limiter holding the per-client state.
        client_ip: Identifier of the caller.

    Raises:
        RateLimitAppError: When the client already used its budget for the
            current window.
    """

    if not settings.app.rate_limit_enabled:
        return

    key = f"ip:{client_ip or 'unknown'}"
    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "key_hash": _hash_limiter_key(key),
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": _hash_limiter_key(key),
            "limit": result.limit,
            "window_s": settings.app.rate_limit_window_seconds,
            "retry_after_s": retry_after,
        },
    )
    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message="Too many requests. Please try again later.",
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
            "retry_after": retry_after,
        },
    )
