"""Tests for the Motor-backed stores against mocked collections."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from app.adapters.storage.mongo import MongoSettingsStore, MongoWaitlistStore
from app.core.errors import ConflictAppError, StorageAppError
from app.schemas.waitlist import WaitlistEntry

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def _entry(email: str = "user@example.com", **overrides) -> WaitlistEntry:
    data = {
        "email": email,
        "wallet": None,
        "ip": "10.0.0.1",
        "user_agent": "pytest",
        "referer": "https://example.com/",
        "accept_language": "en-US",
        "created_at": NOW,
        "updated_at": NOW,
    }
    data.update(overrides)
    return WaitlistEntry(**data)


@pytest.fixture
def collection() -> MagicMock:
    return MagicMock()


class TestMongoWaitlistStore:
    def test_count_counts_all_documents(self, collection: MagicMock) -> None:
        collection.count_documents = AsyncMock(return_value=42)
        store = MongoWaitlistStore(collection)

        assert asyncio.run(store.count()) == 42
        collection.count_documents.assert_awaited_once_with({})

    def test_exists_queries_by_email(self, collection: MagicMock) -> None:
        collection.find_one = AsyncMock(return_value={"_id": ObjectId()})
        store = MongoWaitlistStore(collection)

        assert asyncio.run(store.exists("user@example.com")) is True
        collection.find_one.assert_awaited_once_with(
            {"email": "user@example.com"}, projection={"_id": 1}
        )

    def test_exists_false_when_missing(self, collection: MagicMock) -> None:
        collection.find_one = AsyncMock(return_value=None)
        store = MongoWaitlistStore(collection)

        assert asyncio.run(store.exists("nobody@example.com")) is False

    def test_insert_writes_camel_case_document(self, collection: MagicMock) -> None:
        inserted_id = ObjectId()
        collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=inserted_id))
        store = MongoWaitlistStore(collection)

        result = asyncio.run(store.insert(_entry(wallet="0x" + "a" * 40)))

        assert result == str(inserted_id)
        document = collection.insert_one.await_args.args[0]
        assert document == {
            "email": "user@example.com",
            "wallet": "0x" + "a" * 40,
            "ip": "10.0.0.1",
            "userAgent": "pytest",
            "referer": "https://example.com/",
            "acceptLanguage": "en-US",
            "createdAt": NOW,
            "updatedAt": NOW,
        }

    def test_insert_duplicate_key_is_conflict(self, collection: MagicMock) -> None:
        collection.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key"))
        store = MongoWaitlistStore(collection)

        with pytest.raises(ConflictAppError):
            asyncio.run(store.insert(_entry()))

    def test_driver_errors_become_storage_errors(self, collection: MagicMock) -> None:
        collection.count_documents = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        store = MongoWaitlistStore(collection)

        with pytest.raises(StorageAppError) as exc_info:
            asyncio.run(store.count())
        assert "down" not in exc_info.value.message

    def test_list_recent_sorts_and_limits(self, collection: MagicMock) -> None:
        newer_id, older_id = ObjectId(), ObjectId()
        docs = [
            {
                "_id": newer_id,
                "email": "new@example.com",
                "wallet": None,
                "ip": "1.1.1.1",
                "userAgent": "ua",
                "referer": None,
                "acceptLanguage": None,
                "createdAt": NOW,
                "updatedAt": NOW,
            },
            {
                "_id": older_id,
                "email": "old@example.com",
                "ip": "2.2.2.2",
                "createdAt": NOW - timedelta(days=1),
                "updatedAt": NOW - timedelta(days=1),
            },
        ]
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.to_list = AsyncMock(return_value=docs)
        collection.find.return_value = cursor
        store = MongoWaitlistStore(collection)

        entries = asyncio.run(store.list_recent(1000))

        collection.find.assert_called_once_with({})
        cursor.sort.assert_called_once_with("createdAt", DESCENDING)
        cursor.limit.assert_called_once_with(1000)
        cursor.to_list.assert_awaited_once_with(length=1000)
        assert [e.email for e in entries] == ["new@example.com", "old@example.com"]
        assert entries[0].id == str(newer_id)
        assert entries[0].user_agent == "ua"
        assert entries[1].wallet is None

    def test_list_recent_tolerates_missing_timestamps(self, collection: MagicMock) -> None:
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.to_list = AsyncMock(
            return_value=[
                {"_id": "a", "email": "x@example.com", "createdAt": datetime(2025, 1, 1)},
                {"_id": "b", "email": "y@example.com"},
            ]
        )
        collection.find.return_value = cursor
        store = MongoWaitlistStore(collection)

        entries = asyncio.run(store.list_recent(1000))

        assert [e.email for e in entries] == ["x@example.com", "y@example.com"]
        assert entries[0].updated_at is None
        assert entries[1].created_at is None

    def test_list_recent_unreadable_document_is_storage_error(self, collection: MagicMock) -> None:
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.to_list = AsyncMock(return_value=[{"_id": "a", "createdAt": "not a date"}])
        collection.find.return_value = cursor
        store = MongoWaitlistStore(collection)

        with pytest.raises(StorageAppError):
            asyncio.run(store.list_recent(1000))


class TestMongoSettingsStore:
    def test_get_value_returns_stored_value(self, collection: MagicMock) -> None:
        collection.find_one = AsyncMock(return_value={"key": "recaptcha_enabled", "value": False})
        store = MongoSettingsStore(collection)

        assert asyncio.run(store.get_value("recaptcha_enabled")) is False
        collection.find_one.assert_awaited_once_with({"key": "recaptcha_enabled"})

    def test_get_value_none_when_absent(self, collection: MagicMock) -> None:
        collection.find_one = AsyncMock(return_value=None)
        store = MongoSettingsStore(collection)

        assert asyncio.run(store.get_value("recaptcha_enabled")) is None

    def test_set_value_upserts_with_timestamp(self, collection: MagicMock) -> None:
        collection.update_one = AsyncMock()
        store = MongoSettingsStore(collection)

        asyncio.run(store.set_value("recaptcha_enabled", True))

        args, kwargs = collection.update_one.await_args
        assert args[0] == {"key": "recaptcha_enabled"}
        assert args[1]["$set"]["value"] is True
        assert isinstance(args[1]["$set"]["updatedAt"], datetime)
        assert kwargs == {"upsert": True}

    def test_read_failure_raises_storage_error(self, collection: MagicMock) -> None:
        collection.find_one = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        store = MongoSettingsStore(collection)

        with pytest.raises(StorageAppError):
            asyncio.run(store.get_value("recaptcha_enabled"))
