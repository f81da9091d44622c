"""FastAPI application factory"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from streamboard.core.config import get_settings
from streamboard.core.dependencies import close_roster_context, get_roster_context
from streamboard.core.errors import ConfigError
from streamboard.core.logging import setup_logging
from streamboard.routers import streamers_router

logger = logging.getLogger(__name__)

# Track server start time
_start_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle startup and shutdown"""
    global _start_time
    _start_time = time.time()

    settings = get_settings()

    # Startup
    logger.info("Starting streamboard")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Player embed parent: {settings.base_addr}")

    try:
        settings.require_credentials()
    except ConfigError as e:
        # Every roster request will fail until this is fixed
        logger.error(f"Misconfigured: {e}")

    context = get_roster_context()
    logger.info(
        f"Roster: {len(context.service.channels)} channels, "
        f"users ttl={settings.users_cache_ttl:.0f}s, streams ttl={settings.streams_cache_ttl:.0f}s"
    )

    yield

    # Shutdown
    logger.info("Shutting down streamboard")
    await close_roster_context()


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    app = FastAPI(
        title="streamboard",
        description="Twitch channel roster for the streamboard page",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.include_router(streamers_router.router)

    @app.get("/")
    async def root():
        """Root endpoint - minimal service info"""
        return {"service": "streamboard", "status": "running"}

    # Liveness probe, no upstream dependency
    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "uptime_seconds": int(time.time() - _start_time),
        }

    logger.info("FastAPI application configured")

    return app
