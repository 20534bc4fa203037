"""Google reCAPTCHA v3 verifier adapter."""

import logging
from typing import Any

import httpx

from app.adapters.captcha.base import AbstractCaptchaVerifier

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class RecaptchaVerifier(AbstractCaptchaVerifier):
    """Verify tokens against the reCAPTCHA ``siteverify`` endpoint.

    Without a secret the verifier accepts every token, so environments that
    have no reCAPTCHA keys keep working. With a secret, any failure to reach
    or understand the provider counts as a rejection.
    """

    def __init__(
        self,
        secret_key: str | None,
        *,
        verify_url: str = DEFAULT_VERIFY_URL,
        min_score: float = 0.5,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Configure the verifier.

        Args:
            secret_key: Server-side reCAPTCHA secret; falsy disables checks.
            verify_url: Verification endpoint.
            min_score: Scores must be strictly greater than this value.
            timeout_seconds: Request timeout; None waits indefinitely.
            transport: Optional httpx transport (used by tests).
        """
        self.secret_key = secret_key
        self.verify_url = verify_url
        self.min_score = min_score
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    async def _post(self, data: dict[str, str]) -> dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(self.verify_url, data=data)
            response.raise_for_status()
            payload = response.json()

        if not isinstance(payload, dict):
            raise ValueError("siteverify returned a non-object payload")
        return payload

    async def verify(self, token: str, *, remote_ip: str | None = None) -> bool:
        if not self.enabled:
            logger.debug("captcha.skipped", extra={"reason": "secret_not_configured"})
            return True

        data = {"secret": self.secret_key or "", "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        try:
            payload = await self._post(data)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "captcha.verification_error",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            return False

        success = payload.get("success") is True
        score = payload.get("score")
        # bool is an int subclass and never a valid score
        numeric = isinstance(score, (int, float)) and not isinstance(score, bool)
        passed = success and numeric and score > self.min_score

        if not passed:
            logger.warning(
                "captcha.rejected",
                extra={
                    "success": success,
                    "score": score,
                    "min_score": self.min_score,
                    "error_codes": payload.get("error-codes", []),
                },
            )
        return passed
