"""Waitlist bookkeeping: signups, counts and the admin export.

The join operation runs a fixed sequence of checks and stops at the first
failure:

1. email format
2. wallet format (only when a wallet was sent)
3. captcha, when the ``recaptcha_enabled`` flag is on
4. per-IP rate limit
5. uniqueness of the lowercased email
6. insert
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from app.adapters.captcha.base import AbstractCaptchaVerifier
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.storage.base import AbstractWaitlistStore
from app.core.config import settings
from app.core.errors import ConflictAppError, ValidationAppError
from app.core.rate_limit import enforce_rate_limit
from app.schemas.waitlist import WaitlistEntry
from app.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
WALLET_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


@dataclass(frozen=True)
class ClientMetadata:
    """Request details stored alongside a signup."""

    ip: str
    user_agent: str | None = None
    referer: str | None = None
    accept_language: str | None = None


@dataclass(frozen=True)
class WaitlistSummary:
    count: int
    recaptcha_enabled: bool


def _hash_email(email: str) -> str:
    return hashlib.sha256(email.encode()).hexdigest()[:16]


def normalize_email(email: str | None) -> str:
    """Validate and lowercase an email address.

    Raises:
        ValidationAppError: If the email is missing or malformed.
    """
    candidate = (email or "").strip()
    if not candidate or not EMAIL_PATTERN.match(candidate):
        raise ValidationAppError(
            code="invalid_email",
            message="Valid email is required",
            details={"field": "email"},
        )
    return candidate.lower()


def normalize_wallet(wallet: str | None) -> str | None:
    """Validate an optional wallet address; empty values mean "no wallet"."""
    candidate = (wallet or "").strip()
    if not candidate:
        return None
    if not WALLET_PATTERN.match(candidate):
        raise ValidationAppError(
            code="invalid_wallet",
            message="Invalid wallet address format",
            details={"field": "wallet", "hint": "Expected 0x followed by 40 hex characters"},
        )
    return candidate


class WaitlistService:
    """Compose the stores, captcha verifier and rate limiter per operation."""

    def __init__(
        self,
        *,
        store: AbstractWaitlistStore,
        settings_service: SettingsService,
        captcha: AbstractCaptchaVerifier,
        rate_limiter: AbstractRateLimiter,
    ) -> None:
        self.store = store
        self.settings_service = settings_service
        self.captcha = captcha
        self.rate_limiter = rate_limiter

    async def _check_captcha(self, token: str | None, client_ip: str) -> None:
        if not await self.settings_service.is_recaptcha_enabled():
            return

        if not token:
            raise ValidationAppError(
                code="recaptcha_required",
                message="reCAPTCHA verification required",
                details={"field": "recaptchaToken"},
            )

        if not await self.captcha.verify(token, remote_ip=client_ip):
            raise ValidationAppError(
                code="recaptcha_failed",
                message="reCAPTCHA verification failed. Please try again.",
            )

    async def join(
        self,
        *,
        email: str | None,
        wallet: str | None,
        recaptcha_token: str | None,
        client: ClientMetadata,
    ) -> int:
        """Register a new signup and return the updated total.

        Raises:
            ValidationAppError: Bad email/wallet, missing or rejected captcha.
            RateLimitAppError: Too many signups from this IP.
            ConflictAppError: Email already on the list.
            StorageAppError: Store failure.
        """
        normalized_email = normalize_email(email)
        normalized_wallet = normalize_wallet(wallet)

        await self._check_captcha(recaptcha_token, client.ip)

        enforce_rate_limit(self.rate_limiter, client.ip)

        if await self.store.exists(normalized_email):
            logger.info(
                "waitlist.duplicate",
                extra={"email_hash": _hash_email(normalized_email)},
            )
            raise ConflictAppError(
                code="email_already_registered",
                message="Email already registered",
            )

        now = datetime.now(timezone.utc)
        entry = WaitlistEntry(
            email=normalized_email,
            wallet=normalized_wallet,
            ip=client.ip,
            user_agent=client.user_agent,
            referer=client.referer,
            accept_language=client.accept_language,
            created_at=now,
            updated_at=now,
        )
        entry_id = await self.store.insert(entry)
        count = await self.store.count()

        logger.info(
            "waitlist.joined",
            extra={
                "entry_id": entry_id,
                "email_hash": _hash_email(normalized_email),
                "has_wallet": normalized_wallet is not None,
                "count": count,
            },
        )
        return count

    async def summary(self) -> WaitlistSummary:
        count = await self.store.count()
        recaptcha_enabled = await self.settings_service.is_recaptcha_enabled()
        return WaitlistSummary(count=count, recaptcha_enabled=recaptcha_enabled)

    async def list_entries(self, limit: int | None = None) -> list[WaitlistEntry]:
        """Newest-first export for the admin page, capped at the configured limit."""
        cap = settings.app.admin_list_limit
        effective = cap if limit is None else min(limit, cap)
        return await self.store.list_recent(effective)
