"""Application-level exception types.

Each error maps to one HTTP status in ``app.core.exception_handlers`` so
services can fail with domain errors and stay unaware of the web layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    field: str
    hint: str
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message, safe to show to clients.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input is missing or malformed."""


class ConflictAppError(AppError):
    """Raised when an entry with the same unique key already exists."""


class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget."""


class StorageAppError(AppError):
    """Raised when the document store fails."""
