"""Captcha adapter layer - abstracts over human verification providers."""

from app.adapters.captcha.base import AbstractCaptchaVerifier
from app.adapters.captcha.factory import create_captcha_verifier
from app.adapters.captcha.recaptcha import RecaptchaVerifier

__all__ = [
    "AbstractCaptchaVerifier",
    "RecaptchaVerifier",
    "create_captcha_verifier",
]
