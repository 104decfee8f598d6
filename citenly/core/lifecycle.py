"""
Application lifecycle management using modern FastAPI lifespan pattern.

This module follows SRP by handling only application startup/shutdown logic.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from citenly.config.settings import get_settings
from citenly.core.background_services import get_background_service_manager

logger = logging.getLogger(__name__)


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self) -> None:
        """Initialize lifecycle manager."""
        self._background_service_manager = get_background_service_manager()
        self._initialized = False

    async def startup(self) -> None:
        """
        Execute startup tasks.

        Called when the application starts.
        """
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting application lifecycle...")

        self._verify_configurations()

        # Start background services (hourly reminder scheduler)
        await self._background_service_manager.start()

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        """
        Execute shutdown tasks.

        Called when the application stops.
        """
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")

        await self._background_service_manager.stop()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        """Verify critical application configurations."""
        settings = get_settings()

        if not settings.google_oauth_configured:
            logger.warning("GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET not configured - calendar token refresh disabled")

        if not settings.CRON_SECRET:
            logger.warning("CRON_SECRET not configured - reminder trigger endpoint is unauthenticated")

        if not settings.REMINDER_SCHEDULER_ENABLED:
            logger.info("In-process reminder scheduler disabled; relying on external cron trigger")


# Global lifecycle manager instance
_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Get or create the global lifecycle manager instance."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Modern FastAPI lifespan context manager.

    Usage:
        app = FastAPI(lifespan=lifespan)
    """
    lifecycle = get_lifecycle_manager()

    # Startup
    await lifecycle.startup()

    yield  # Application runs here

    # Shutdown
    await lifecycle.shutdown()
