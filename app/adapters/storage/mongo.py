"""MongoDB (Motor) implementations of the document stores."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.adapters.storage.base import AbstractSettingsStore, AbstractWaitlistStore
from app.core.config import MongoSettings, settings
from app.core.errors import ConflictAppError, StorageAppError
from app.schemas.waitlist import WaitlistEntry

logger = logging.getLogger(__name__)

WAITLIST_COLLECTION = "waitlist"
SETTINGS_COLLECTION = "settings"

_client: AsyncIOMotorClient | None = None


def get_mongo_client(mongo_settings: MongoSettings | None = None) -> AsyncIOMotorClient:
    """Return the process-wide Motor client, creating it on first use."""

    global _client

    if _client is None:
        cfg = mongo_settings or settings.mongo
        _client = AsyncIOMotorClient(
            cfg.uri,
            serverSelectionTimeoutMS=cfg.server_selection_timeout_ms,
        )
    return _client


def get_database() -> AsyncIOMotorDatabase:
    return get_mongo_client()[settings.mongo.database]


def close_mongo_client() -> None:
    global _client

    if _client is not None:
        _client.close()
        _client = None


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create the unique indexes the stores rely on."""

    await db[WAITLIST_COLLECTION].create_index([("email", ASCENDING)], unique=True)
    await db[WAITLIST_COLLECTION].create_index([("createdAt", DESCENDING)])
    await db[SETTINGS_COLLECTION].create_index([("key", ASCENDING)], unique=True)
    logger.info("mongo.indexes_ready", extra={"database": db.name})


def _storage_error(operation: str, exc: Exception) -> StorageAppError:
    logger.error(
        "mongo.operation_failed",
        extra={
            "operation": operation,
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
        },
    )
    return StorageAppError(
        code="storage_error",
        message="Storage operation failed",
        details={"context": {"operation": operation}},
    )


class MongoWaitlistStore(AbstractWaitlistStore):
    """Waitlist entries in a Mongo collection."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self.collection = collection

    async def count(self) -> int:
        try:
            return await self.collection.count_documents({})
        except PyMongoError as exc:
            raise _storage_error("waitlist.count", exc) from exc

    async def exists(self, email: str) -> bool:
        try:
            doc = await self.collection.find_one({"email": email}, projection={"_id": 1})
        except PyMongoError as exc:
            raise _storage_error("waitlist.exists", exc) from exc
        return doc is not None

    async def insert(self, entry: WaitlistEntry) -> str:
        try:
            result = await self.collection.insert_one(entry.to_document())
        except DuplicateKeyError as exc:
            # Lost a race against a concurrent signup with the same email
            raise ConflictAppError(
                code="email_already_registered",
                message="Email already registered",
            ) from exc
        except PyMongoError as exc:
            raise _storage_error("waitlist.insert", exc) from exc
        return str(result.inserted_id)

    async def list_recent(self, limit: int) -> list[WaitlistEntry]:
        try:
            cursor = self.collection.find({}).sort("createdAt", DESCENDING).limit(limit)
            docs = await cursor.to_list(length=limit)
        except PyMongoError as exc:
            raise _storage_error("waitlist.list_recent", exc) from exc
        try:
            return [WaitlistEntry.model_validate(doc) for doc in docs]
        except ValidationError as exc:
            # str(exc) echoes the offending values, so only the shape is logged
            logger.error(
                "mongo.document_invalid",
                extra={
                    "operation": "waitlist.list_recent",
                    "error_count": exc.error_count(),
                    "fields": [".".join(map(str, err["loc"])) for err in exc.errors()],
                },
            )
            raise StorageAppError(
                code="storage_error",
                message="Stored document could not be read",
                details={"context": {"operation": "waitlist.list_recent"}},
            ) from exc


class MongoSettingsStore(AbstractSettingsStore):
    """Feature flags as ``{key, value, updatedAt}`` documents."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self.collection = collection

    async def get_value(self, key: str) -> Any | None:
        try:
            doc = await self.collection.find_one({"key": key})
        except PyMongoError as exc:
            raise _storage_error("settings.get", exc) from exc
        if doc is None:
            return None
        return doc.get("value")

    async def set_value(self, key: str, value: Any) -> None:
        try:
            await self.collection.update_one(
                {"key": key},
                {"$set": {"value": value, "updatedAt": datetime.now(timezone.utc)}},
                upsert=True,
            )
        except PyMongoError as exc:
            raise _storage_error("settings.set", exc) from exc
