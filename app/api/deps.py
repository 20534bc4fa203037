"""FastAPI dependency providers.

Routes receive their collaborators through ``Depends`` so tests can swap any
of them with ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.adapters.captcha.base import AbstractCaptchaVerifier
from app.adapters.captcha.factory import create_captcha_verifier
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.storage.base import AbstractSettingsStore, AbstractWaitlistStore
from app.adapters.storage.mongo import (
    SETTINGS_COLLECTION,
    WAITLIST_COLLECTION,
    MongoSettingsStore,
    MongoWaitlistStore,
    get_database,
)
from app.core.config import settings
from app.core.rate_limit import get_rate_limiter
from app.services.settings_service import SettingsService
from app.services.waitlist_service import ClientMetadata, WaitlistService

_captcha_verifier: AbstractCaptchaVerifier | None = None


def get_waitlist_store() -> AbstractWaitlistStore:
    return MongoWaitlistStore(get_database()[WAITLIST_COLLECTION])


def get_settings_store() -> AbstractSettingsStore:
    return MongoSettingsStore(get_database()[SETTINGS_COLLECTION])


def get_captcha_verifier() -> AbstractCaptchaVerifier:
    global _captcha_verifier

    if _captcha_verifier is None:
        _captcha_verifier = create_captcha_verifier()
    return _captcha_verifier


def get_settings_service(
    store: Annotated[AbstractSettingsStore, Depends(get_settings_store)],
) -> SettingsService:
    return SettingsService(store)


def get_waitlist_service(
    store: Annotated[AbstractWaitlistStore, Depends(get_waitlist_store)],
    settings_service: Annotated[SettingsService, Depends(get_settings_service)],
    captcha: Annotated[AbstractCaptchaVerifier, Depends(get_captcha_verifier)],
    rate_limiter: Annotated[AbstractRateLimiter, Depends(get_rate_limiter)],
) -> WaitlistService:
    return WaitlistService(
        store=store,
        settings_service=settings_service,
        captcha=captcha,
        rate_limiter=rate_limiter,
    )


def get_client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when the proxy is trusted, else the socket peer."""
    if settings.app.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def get_client_metadata(request: Request) -> ClientMetadata:
    return ClientMetadata(
        ip=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        referer=request.headers.get("referer"),
        accept_language=request.headers.get("accept-language"),
    )
