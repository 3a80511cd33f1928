# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the expert chat API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from expertchat import __version__
from expertchat.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from expertchat.api.middleware.request_context import RequestContextMiddleware
from expertchat.api.routes import health
from expertchat.api.v1 import router as v1_router
from expertchat.core.config import get_settings
from expertchat.domains.moderation.redaction import Redactor
from expertchat.infrastructure.background import setup_dramatiq, shutdown_dramatiq
from expertchat.infrastructure.database.connection import (
    DatabaseError,
    close_database,
    init_database,
)
from expertchat.infrastructure.similarity import SimilarityResolver
from expertchat.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes and cleans up:
    - Logging
    - Database connections
    - Dramatiq broker and the alert dispatcher
    - Similarity resolver HTTP client
    - Redactor (blocklist)

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting expert chat API (environment=%s, debug=%s)",
        settings.environment,
        settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================

    try:
        await init_database(settings)
        logger.info("Database connection initialized")
    except DatabaseError as e:
        logger.warning("Failed to initialize database connection: %s", str(e))

    # A broken blocklist is a configuration error: refuse to start.
    app.state.redactor = Redactor.from_settings(settings.moderation)
    logger.info("Redactor loaded with %d blocklisted words", len(app.state.redactor.words))

    app.state.similarity_resolver = SimilarityResolver(settings.similarity)

    try:
        setup_dramatiq()
        from expertchat.infrastructure.background.tasks import create_alert_dispatcher

        app.state.alert_dispatcher = create_alert_dispatcher()
        logger.info("Dramatiq broker initialized")
    except Exception as e:
        app.state.alert_dispatcher = None
        logger.warning("Failed to setup Dramatiq, moderation alerts disabled: %s", str(e))

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    await app.state.similarity_resolver.aclose()

    try:
        shutdown_dramatiq()
        logger.info("Dramatiq broker shutdown")
    except Exception as e:
        logger.warning("Error shutting down Dramatiq: %s", str(e))

    await close_database()
    logger.info("Shutting down expert chat API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Expert Chat API",
        description="Routes questions to experts and moderates their chats",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.limiter = limiter

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
