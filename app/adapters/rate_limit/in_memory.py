"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests inside a trailing time window per key.

    Every key keeps the timestamps of its accepted requests. Timestamps that
    fell out of the window are pruned lazily on the next check for that key.
    A denied request leaves the state untouched.

    Important:
        This limiter is per-process only. Separate instances behind a load
        balancer each enforce their own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of requests per trailing window.
            window_seconds: Size of the window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._hits_by_key: dict[str, deque[float]] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _prune(self, hits: deque[float], now: float) -> None:
        cutoff = now - self._window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def consume(self, key: str) -> RateLimitResult:
        """Check the trailing window for ``key`` and record the request if allowed.

        Args:
            key: Unique identifier for rate limiting (e.g., client IP).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            hits = self._hits_by_key.get(key)
            if hits is None:
                hits = deque()
                self._hits_by_key[key] = hits
            self._prune(hits, now)

            if len(hits) >= self._limit:
                reset_at = hits[0] + self._window_seconds
                return RateLimitResult(
                    allowed=False,
                    limit=self._limit,
                    remaining=0,
                    reset_at=int(math.ceil(reset_at)),
                    retry_after_seconds=max(0, int(math.ceil(reset_at - now))),
                )

            hits.append(now)
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - len(hits),
                reset_at=int(math.ceil(hits[0] + self._window_seconds)),
                retry_after_seconds=None,
            )

    def reset(self) -> None:
        """Forget all recorded requests."""
        with self._lock:
            self._hits_by_key.clear()
