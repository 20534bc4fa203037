"""Pydantic schemas for waitlist documents and endpoint payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel


class WaitlistEntry(BaseModel):
    """A single signup as stored in the ``waitlist`` collection.

    Field names are camelCase on the wire and in the database.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = Field(
        default=None,
        alias="_id",
        description="Document id (string form of the store's identifier).",
    )
    email: str = Field(..., description="Lowercased email address, unique.")
    wallet: str | None = Field(default=None, description="Optional 0x-prefixed wallet address.")
    ip: str | None = Field(default=None, description="Client IP at signup time.")
    user_agent: str | None = None
    referer: str | None = None
    accept_language: str | None = None
    # Older or hand-edited documents may lack timestamps
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def to_document(self) -> dict[str, Any]:
        """Dump for insertion, letting the store assign ``_id``."""
        return self.model_dump(by_alias=True, exclude={"id"})


class JoinWaitlistRequest(BaseModel):
    """Body of ``POST /api/waitlist``.

    Everything is optional here; format rules are applied by the service so
    each failure gets its own message.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    wallet: str | None = None
    recaptcha_token: str | None = Field(default=None, alias="recaptchaToken")


class JoinWaitlistResponse(BaseModel):
    success: bool = True
    message: str
    count: int


class WaitlistSummaryResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    count: int
    recaptcha_enabled: bool


class AdminListResponse(BaseModel):
    success: bool = True
    data: list[WaitlistEntry] = Field(default_factory=list)
    count: int


class ToggleRecaptchaRequest(BaseModel):
    """Body of ``POST /api/admin/toggle-recaptcha``; only real booleans pass."""

    enabled: StrictBool


class ToggleRecaptchaResponse(BaseModel):
    success: bool = True
    message: str
    enabled: bool
