"""Rate limiting adapters.

Signups are throttled through a small abstraction so the per-process
limiter can later move to Redis or another shared store without changing
the API layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemorySlidingWindowRateLimiter",
    "RateLimitResult",
]
