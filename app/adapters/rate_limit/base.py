"""Rate limiter interfaces.

Handlers depend on this abstraction so the per-process store can later be
replaced by a shared one (e.g., Redis) without touching signup logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check/consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Requests still available in the trailing window.
        reset_at: UNIX epoch seconds when the oldest counted request expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Record one request for ``key`` if it fits in the budget.

        Args:
            key: Unique identifier (e.g., client IP address).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    def allow(self, key: str) -> bool:
        """Shorthand for ``consume(key).allowed``."""
        return self.consume(key).allowed
