"""HTTP middleware for request correlation, access logging and pre-flights.

- Accepts an incoming X-Request-ID header or generates a UUID
- Keeps the id in contextvars so every log line of the request carries it
- Echoes the id and the request duration in response headers
- Emits one ``request.completed`` log line per request
- Answers browser CORS pre-flights with an empty 200

Usage:
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(preflight_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.exception_handlers import general_exception_handler
from app.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST", "OPTIONS")
PREFLIGHT_MAX_AGE_SECONDS = 600


def parse_origins(raw: str) -> list[str]:
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate a correlation id through the request and its response.

    Unexpected exceptions are turned into the generic 500 body here, while
    the id is still bound, so the error response carries it and still
    passes back through the CORS middleware.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with ``X-Request-ID`` and
            ``X-Request-Duration-ms`` headers added.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            response = await general_exception_handler(request, exc)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request.completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


def _is_preflight(request: Request) -> bool:
    return (
        request.method == "OPTIONS"
        and "origin" in request.headers
        and "access-control-request-method" in request.headers
    )


def _preflight_headers(request: Request) -> dict[str, str]:
    origin = request.headers["origin"]
    allowed = parse_origins(settings.app.cors_allow_origins)
    headers = {
        "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
        "Access-Control-Allow-Headers": request.headers.get(
            "access-control-request-headers", "Content-Type"
        ),
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE_SECONDS),
        "Vary": "Origin",
    }
    # Credentials rule out a literal "*", so the origin is echoed instead
    if "*" in allowed or origin in allowed:
        headers["Access-Control-Allow-Origin"] = origin
    return headers


async def preflight_middleware(request: Request, call_next) -> Response:
    """Answer browser pre-flights with 200 and an empty body.

    Requested headers are always allowed; the origin is only echoed back
    when it is configured, so the browser still enforces the origin list.
    Bare ``OPTIONS`` requests fall through to the routes.
    """
    if not _is_preflight(request):
        return await call_next(request)
    return Response(status_code=200, headers=_preflight_headers(request))
