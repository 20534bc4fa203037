"""Storage adapters for the waitlist and settings collections."""

from app.adapters.storage.base import AbstractSettingsStore, AbstractWaitlistStore
from app.adapters.storage.mongo import MongoSettingsStore, MongoWaitlistStore

__all__ = [
    "AbstractSettingsStore",
    "AbstractWaitlistStore",
    "MongoSettingsStore",
    "MongoWaitlistStore",
]
