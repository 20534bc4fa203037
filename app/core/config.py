"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_ENV = os.getenv("APP_ENV", "development")

PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Production may inject everything through real env vars
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated list of allowed CORS origins ('*' for any)",
    )
    admin_list_limit: int = Field(
        1000,
        description="Maximum number of entries returned by the admin listing",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-IP rate limiting on waitlist signups",
    )
    rate_limit_requests: int = Field(
        5,
        description="Maximum number of signups allowed per window (per client IP)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        3600,
        description="Sliding window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    trust_forwarded_for: bool = Field(
        True,
        description=(
            "Take the client IP from the first X-Forwarded-For hop. Only safe "
            "behind a proxy that overwrites the header; disable otherwise"
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class MongoSettings(BaseSettings):
    """Document store connection settings."""

    uri: str = Field(
        "mongodb://localhost:27017",
        description="MongoDB connection string",
    )
    database: str = Field(
        "bloodcraft",
        description="Database holding the waitlist and settings collections",
    )
    server_selection_timeout_ms: int = Field(
        5000,
        description="How long the driver waits to find a usable server",
        ge=1,
    )
    ensure_indexes: bool = Field(
        True,
        description="Create the unique indexes on startup",
    )

    model_config = SettingsConfigDict(
        env_prefix="MONGODB_",
        case_sensitive=False,
    )


class RecaptchaSettings(BaseSettings):
    """reCAPTCHA verification settings.

    Leaving ``secret_key`` unset disables server-side verification entirely,
    which is how local and preview deployments run.
    """

    secret_key: str | None = Field(
        None,
        description="Server secret for the reCAPTCHA siteverify API",
    )
    verify_url: str = Field(
        "https://www.google.com/recaptcha/api/siteverify",
        description="Verification endpoint",
    )
    min_score: float = Field(
        0.5,
        description="Scores must be strictly greater than this to pass",
        ge=0.0,
        le=1.0,
    )
    timeout_seconds: float | None = Field(
        None,
        description="Timeout for the verification call; unset means no timeout",
    )

    model_config = SettingsConfigDict(
        env_prefix="RECAPTCHA_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="'json' or 'plain'")
    output: str = Field("stdout", description="'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(10 * 1024 * 1024, description="Rotate after this many bytes (0 disables)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


def _build_app_settings() -> AppSettings:
    return AppSettings()  # type: ignore[call-arg]


def _build_mongo_settings() -> MongoSettings:
    return MongoSettings()  # type: ignore[call-arg]


def _build_recaptcha_settings() -> RecaptchaSettings:
    return RecaptchaSettings()  # type: ignore[call-arg]


def _build_log_settings() -> LogSettings:
    return LogSettings()  # type: ignore[call-arg]


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=_build_app_settings)
    mongo: MongoSettings = Field(default_factory=_build_mongo_settings)
    recaptcha: RecaptchaSettings = Field(default_factory=_build_recaptcha_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Nested settings are created via default_factory so env loading works.
settings = Settings()
