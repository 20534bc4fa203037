"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers,
lifespan) so tests and the ASGI entrypoint build the same thing.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.storage.mongo import close_mongo_client, ensure_indexes, get_database
from app.api.routes import admin_router, health_router, waitlist_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import (
    ALLOWED_METHODS,
    parse_origins,
    preflight_middleware,
    request_id_middleware,
)
from app.core.openapi import TAGS_METADATA, apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.mongo.ensure_indexes:
        await ensure_indexes(get_database())
    logger.info(
        "app.started",
        extra={
            "app_env": settings.app_env,
            "database": settings.mongo.database,
            "recaptcha_secret_configured": bool(settings.recaptcha.secret_key),
            "rate_limit_enabled": settings.app.rate_limit_enabled,
        },
    )
    try:
        yield
    finally:
        close_mongo_client()
        logger.info("app.stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Waitlist API",
        description=(
            "Backend for the waitlist signup form: email/wallet registration "
            "with optional reCAPTCHA v3, per-IP rate limiting, signup counter "
            "and an admin export."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan,
    )

    # Middleware (the last one added runs first)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_origins(settings.app.cors_allow_origins),
        allow_credentials=True,
        allow_methods=list(ALLOWED_METHODS),
        allow_headers=["*"],
    )
    app.middleware("http")(preflight_middleware)

    setup_exception_handlers(app)

    app.include_router(waitlist_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
