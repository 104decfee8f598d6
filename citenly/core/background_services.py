"""
Background services management for the application.

This module follows SRP by handling only background task orchestration:
the hourly reminder scheduler and reminder runs that outlive the HTTP
request that triggered them.
"""

import asyncio
import logging
from typing import Any

from citenly.config.settings import get_settings
from citenly.core.container import get_container

logger = logging.getLogger(__name__)


class BackgroundServiceManager:
    """
    Manages background services lifecycle.

    Handles starting, stopping, and monitoring of background tasks
    like the hourly reminder scheduler.
    """

    def __init__(self) -> None:
        """Initialize background service manager."""
        self._background_tasks: set[asyncio.Task[Any]] = set()
        self._reminder_scheduler: Any = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if background services are running."""
        return self._running

    async def start(self) -> None:
        """Start all background services."""
        if self._running:
            logger.warning("Background services already running")
            return

        logger.info("Starting background services...")

        if get_settings().REMINDER_SCHEDULER_ENABLED:
            await self._start_reminder_scheduler()
        else:
            logger.info("Hourly reminder scheduler disabled (REMINDER_SCHEDULER_ENABLED=False)")

        self._running = True
        logger.info("Background services started")

    async def stop(self) -> None:
        """Stop all background services gracefully."""
        if not self._running:
            logger.warning("Background services not running")
            return

        logger.info("Stopping background services...")

        for task in list(self._background_tasks):
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self._background_tasks.clear()

        if self._reminder_scheduler:
            await self._stop_reminder_scheduler()

        self._running = False
        logger.info("Background services stopped")

    def track(self, task: asyncio.Task[Any]) -> None:
        """Keep a reference to a detached task until it finishes."""
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _start_reminder_scheduler(self) -> None:
        try:
            self._reminder_scheduler = get_container().get_hourly_scheduler()
            await self._reminder_scheduler.start()
            logger.info(f"Hourly reminder scheduler started - Jobs: {self._reminder_scheduler.get_jobs_info()}")
        except Exception as e:
            logger.error(f"Failed to start hourly reminder scheduler: {e}", exc_info=True)
            self._reminder_scheduler = None

    async def _stop_reminder_scheduler(self) -> None:
        try:
            await self._reminder_scheduler.stop()
            logger.info("Hourly reminder scheduler stopped")
        except Exception as e:
            logger.error(f"Error stopping hourly reminder scheduler: {e}", exc_info=True)
        finally:
            self._reminder_scheduler = None

    def get_status(self) -> dict[str, Any]:
        """
        Get status of background services.

        Returns:
            Dictionary with service status information.
        """
        scheduler = self._reminder_scheduler
        return {
            "running": self._running,
            "active_tasks": len(self._background_tasks),
            "reminder_scheduler_running": bool(scheduler and scheduler.is_running),
            "reminder_jobs": scheduler.get_jobs_info() if scheduler else [],
        }


# Global instance for singleton pattern
_background_service_manager: BackgroundServiceManager | None = None


def get_background_service_manager() -> BackgroundServiceManager:
    """Get or create the global background service manager."""
    global _background_service_manager
    if _background_service_manager is None:
        _background_service_manager = BackgroundServiceManager()
    return _background_service_manager
