"""Admin endpoints: data export and the reCAPTCHA switch.

These routes carry no authentication; deployments are expected to restrict
access to ``/api/admin*`` at the edge.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_settings_service, get_waitlist_service
from app.core.errors import StorageAppError
from app.schemas.waitlist import (
    AdminListResponse,
    ToggleRecaptchaRequest,
    ToggleRecaptchaResponse,
)
from app.services.settings_service import SettingsService
from app.services.waitlist_service import WaitlistService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.options("", include_in_schema=False)
@router.options("/toggle-recaptcha", include_in_schema=False)
async def admin_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@router.get("", response_model=AdminListResponse)
async def list_waitlist_entries(
    service: Annotated[WaitlistService, Depends(get_waitlist_service)],
) -> AdminListResponse:
    """Export the most recent signups, newest first."""
    try:
        entries = await service.list_entries()
    except StorageAppError as exc:
        raise StorageAppError(
            code="admin_list_failed",
            message="Failed to fetch data",
        ) from exc
    return AdminListResponse(data=entries, count=len(entries))


@router.post("/toggle-recaptcha", response_model=ToggleRecaptchaResponse)
async def toggle_recaptcha(
    payload: ToggleRecaptchaRequest,
    settings_service: Annotated[SettingsService, Depends(get_settings_service)],
) -> ToggleRecaptchaResponse:
    """Turn reCAPTCHA verification on the signup form on or off."""
    try:
        await settings_service.set_recaptcha_enabled(payload.enabled)
    except StorageAppError as exc:
        raise StorageAppError(
            code="toggle_recaptcha_failed",
            message="Failed to update setting",
        ) from exc
    return ToggleRecaptchaResponse(
        message=f"reCAPTCHA {'enabled' if payload.enabled else 'disabled'}",
        enabled=payload.enabled,
    )
