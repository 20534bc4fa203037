"""Global exception handlers for consistent error responses.

Every failure leaves the API with the same envelope::

    {"success": false, "message": "...", "error": {"code": "...", "request_id": "..."}}

Design:
- AppError subclasses → their mapped HTTP status (400, 409, 429, 500)
- Framework HTTP errors (404, 405) → their own status in the same envelope
- Body validation errors → 400
- Unexpected Exception → generic 500 (safety net)
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import (
    AppError,
    ConflictAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[AppError], int]] = [
    (ValidationAppError, 400),
    (ConflictAppError, 409),
    (RateLimitAppError, 429),
    (StorageAppError, 500),
]

_HTTP_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}

_VALIDATION_PHRASES = {
    "bool_type": "must be boolean",
    "string_type": "must be a string",
    "missing": "is required",
}


def _error_body(message: str, code: str, details: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "request_id": get_request_id()}
    if details:
        error["details"] = details
    return {"success": False, "message": message, "error": error}


def _status_for(exc: AppError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _rate_limit_headers(exc: RateLimitAppError) -> dict[str, str]:
    if not settings.app.rate_limit_include_headers or not exc.details:
        return {}
    details = exc.details
    return {
        "Retry-After": str(details.get("retry_after", 0)),
        "X-RateLimit-Limit": str(details.get("limit", "")),
        "X-RateLimit-Remaining": str(details.get("remaining", 0)),
        "X-RateLimit-Reset": str(details.get("reset_at", "")),
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    Server-side failures (500) never echo their details to the client; the
    detail stays in the logs.
    """
    status_code = _status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitAppError):
        headers = _rate_limit_headers(exc)

    details = exc.details if status_code < 500 else None
    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.message, exc.code, details),
        headers=headers or None,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap routing errors (unknown path, wrong method) in the standard envelope."""
    message = _HTTP_MESSAGES.get(exc.status_code) or str(exc.detail)
    code = message.lower().replace(" ", "_")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message, code),
        headers=getattr(exc, "headers", None),
    )


def _describe_validation_error(error: dict[str, Any]) -> str:
    if error.get("type") == "json_invalid":
        return "Invalid JSON body"
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = ".".join(loc)
    if not field:
        return "Invalid request body"
    phrase = _VALIDATION_PHRASES.get(error.get("type", ""), error.get("msg", "is invalid"))
    return f"Invalid parameter: {field} {phrase}"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map body/query validation failures to 400 instead of FastAPI's 422."""
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request body"
    logger.warning(
        "request_validation_failed",
        extra={
            "request_path": request.url.path,
            "error_count": len(errors),
            "validation_message": message,
        },
    )
    return JSONResponse(
        status_code=400,
        content=_error_body(message, "invalid_request"),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic message.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body(
            "An unexpected error occurred. Please try again later.",
            "internal_server_error",
        ),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
