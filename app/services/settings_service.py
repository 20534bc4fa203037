"""Feature flag access on top of the settings store."""

from __future__ import annotations

import logging
from typing import Any

from app.adapters.storage.base import AbstractSettingsStore
from app.core.errors import StorageAppError

logger = logging.getLogger(__name__)

RECAPTCHA_ENABLED_KEY = "recaptcha_enabled"


class SettingsService:
    """Read and write feature flags.

    Reads fail safe: an absent flag or a store failure yields ``True`` so the
    signup flow keeps demanding captcha verification when in doubt.
    """

    def __init__(self, store: AbstractSettingsStore) -> None:
        self.store = store

    async def get(self, key: str, default: Any = True) -> Any:
        try:
            value = await self.store.get_value(key)
        except StorageAppError:
            logger.error(
                "settings.read_failed",
                extra={"setting_key": key, "fallback": default},
            )
            return default
        return default if value is None else value

    async def set(self, key: str, value: Any) -> None:
        await self.store.set_value(key, value)
        logger.info("settings.updated", extra={"setting_key": key, "value": value})

    async def is_recaptcha_enabled(self) -> bool:
        return bool(await self.get(RECAPTCHA_ENABLED_KEY, default=True))

    async def set_recaptcha_enabled(self, enabled: bool) -> None:
        await self.set(RECAPTCHA_ENABLED_KEY, enabled)
