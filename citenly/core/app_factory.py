"""
Builds the reminders API: the cron trigger and calendar routers under
API_V1_STR, domain error handlers and a /health endpoint that reports the
hourly scheduler.
"""

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from citenly.api.exception_handlers import register_exception_handlers
from citenly.api.middleware.logging_middleware import RequestLoggingMiddleware
from citenly.api.router import api_router
from citenly.config.settings import Settings, get_settings
from citenly.core.background_services import get_background_service_manager
from citenly.core.lifecycle import lifespan

logger = logging.getLogger(__name__)


class AppFactory:
    """Assembles the FastAPI app from a Settings instance (tests pass their own)."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_app(self) -> FastAPI:
        app = self._create_base_app()

        self._configure_middleware(app)
        self._configure_exception_handlers(app)
        self._configure_routes(app)
        self._configure_health_endpoint(app)

        logger.info(f"Application created: {self._settings.PROJECT_NAME}")
        return app

    def _create_base_app(self) -> FastAPI:
        return FastAPI(
            title=self._settings.PROJECT_NAME,
            description=self._settings.PROJECT_DESCRIPTION,
            version=self._settings.VERSION,
            docs_url=f"{self._settings.API_V1_STR}/docs" if self._settings.DEBUG else None,
            redoc_url=f"{self._settings.API_V1_STR}/redoc" if self._settings.DEBUG else None,
            lifespan=lifespan,
        )

    def _configure_middleware(self, app: FastAPI) -> None:
        # CORS stays open only in DEBUG; the cron and calendar callers are server-side
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self._settings.DEBUG else [],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        app.add_middleware(RequestLoggingMiddleware)

        logger.info("Middleware configured")

    def _configure_exception_handlers(self, app: FastAPI) -> None:
        register_exception_handlers(app)

    def _configure_routes(self, app: FastAPI) -> None:
        app.include_router(api_router, prefix=self._settings.API_V1_STR)
        logger.info("Routes configured")

    def _configure_health_endpoint(self, app: FastAPI) -> None:
        @app.get("/health", tags=["health"])
        async def health_check() -> dict[str, Any]:
            """Liveness plus background scheduler status."""
            return {
                "status": "ok",
                "environment": self._settings.ENVIRONMENT,
                "version": self._settings.VERSION,
                "background": get_background_service_manager().get_status(),
            }


def create_app(settings: Settings | None = None) -> FastAPI:
    return AppFactory(settings).create_app()
