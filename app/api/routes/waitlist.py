from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_client_metadata, get_waitlist_service
from app.core.errors import StorageAppError
from app.schemas.waitlist import (
    JoinWaitlistRequest,
    JoinWaitlistResponse,
    WaitlistSummaryResponse,
)
from app.services.waitlist_service import ClientMetadata, WaitlistService

router = APIRouter(tags=["Waitlist"])


@router.options("/waitlist", include_in_schema=False)
async def waitlist_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@router.get("/waitlist", response_model=WaitlistSummaryResponse)
async def get_waitlist_summary(
    service: Annotated[WaitlistService, Depends(get_waitlist_service)],
) -> WaitlistSummaryResponse:
    """Return the number of signups and whether reCAPTCHA is required.

    The signup form calls this on load to render the counter and decide
    whether to run the reCAPTCHA widget.
    """
    try:
        summary = await service.summary()
    except StorageAppError as exc:
        raise StorageAppError(
            code="waitlist_count_failed",
            message="Failed to fetch waitlist count",
        ) from exc
    return WaitlistSummaryResponse(
        count=summary.count,
        recaptcha_enabled=summary.recaptcha_enabled,
    )


@router.post(
    "/waitlist",
    response_model=JoinWaitlistResponse,
    status_code=status.HTTP_201_CREATED,
)
async def join_waitlist(
    payload: JoinWaitlistRequest,
    service: Annotated[WaitlistService, Depends(get_waitlist_service)],
    client: Annotated[ClientMetadata, Depends(get_client_metadata)],
) -> JoinWaitlistResponse:
    """Add an email (and optional wallet) to the waitlist.

    Raises:
        ValidationAppError: 400 for bad input or failed captcha.
        RateLimitAppError: 429 when the client IP exceeded its quota.
        ConflictAppError: 409 when the email is already registered.
        StorageAppError: 500 on store failures.
    """
    try:
        count = await service.join(
            email=payload.email,
            wallet=payload.wallet,
            recaptcha_token=payload.recaptcha_token,
            client=client,
        )
    except StorageAppError as exc:
        raise StorageAppError(
            code="waitlist_join_failed",
            message="Failed to join waitlist. Please try again later.",
        ) from exc
    return JoinWaitlistResponse(
        message="Successfully joined the waitlist!",
        count=count,
    )
