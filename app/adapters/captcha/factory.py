"""Factory for the captcha verifier used by the signup flow."""

import logging

from app.adapters.captcha.base import AbstractCaptchaVerifier
from app.adapters.captcha.recaptcha import RecaptchaVerifier
from app.core.config import settings

logger = logging.getLogger(__name__)


def create_captcha_verifier() -> AbstractCaptchaVerifier:
    """Build the verifier from ``settings.recaptcha``.

    A missing secret still produces a verifier; it simply accepts every
    token, which is what non-production deployments rely on.
    """
    cfg = settings.recaptcha
    if not cfg.secret_key:
        logger.warning(
            "captcha.secret_missing",
            extra={"hint": "Set RECAPTCHA_SECRET_KEY to enable server-side verification"},
        )

    return RecaptchaVerifier(
        secret_key=cfg.secret_key,
        verify_url=cfg.verify_url,
        min_score=cfg.min_score,
        timeout_seconds=cfg.timeout_seconds,
    )
