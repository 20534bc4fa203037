"""Document store interfaces for waitlist entries and feature settings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from app.schemas.waitlist import WaitlistEntry


class AbstractWaitlistStore(ABC):
    """Append-only collection of waitlist signups keyed by lowercase email."""

    @abstractmethod
    async def count(self) -> int:
        """Return the total number of entries."""
        raise NotImplementedError

    @abstractmethod
    async def exists(self, email: str) -> bool:
        """Return True when an entry with this (already normalized) email exists."""
        raise NotImplementedError

    @abstractmethod
    async def insert(self, entry: WaitlistEntry) -> str:
        """Persist a new entry and return its id.

        Raises:
            ConflictAppError: If the email is already taken.
            StorageAppError: On any store failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def list_recent(self, limit: int) -> list[WaitlistEntry]:
        """Return up to ``limit`` entries, newest ``createdAt`` first."""
        raise NotImplementedError


class AbstractSettingsStore(ABC):
    """Key/value documents holding feature flags."""

    @abstractmethod
    async def get_value(self, key: str) -> Any | None:
        """Return the stored value, or None when the key is absent."""
        raise NotImplementedError

    @abstractmethod
    async def set_value(self, key: str, value: Any) -> None:
        """Upsert ``value`` under ``key`` and stamp ``updatedAt``."""
        raise NotImplementedError
