# ============================================================================
# SCOPE: GLOBAL
# Description: Contenedor base con singletons compartidos (session factory,
#              clientes HTTP, refresher de credenciales).
# Tenant-Aware: No - instancias compartidas por todas las clínicas.
# ============================================================================
"""
Base Container - Shared Singletons.

Single Responsibility: Create and cache shared resources.
"""

import logging
from typing import TYPE_CHECKING

from citenly.config.settings import Settings, get_settings
from citenly.integrations.google import GoogleCalendarClient, GoogleOAuthClient
from citenly.integrations.ycloud import YCloudHttpClient

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


class BaseContainer:
    """
    Base container for shared singletons.

    Single Responsibility: Create and cache shared resources.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        session_factory: "async_sessionmaker[AsyncSession] | None" = None,
    ):
        """
        Initialize base container.

        Args:
            settings: Optional settings (defaults to the global Settings)
            session_factory: Optional session factory (defaults to AsyncSessionLocal)
        """
        self.settings = settings or get_settings()
        self._session_factory = session_factory

        self._ycloud_client: YCloudHttpClient | None = None
        self._oauth_client: GoogleOAuthClient | None = None
        self._calendar_client: GoogleCalendarClient | None = None

        logger.info("BaseContainer initialized")

    def get_session_factory(self) -> "async_sessionmaker[AsyncSession]":
        """Get the async session factory (engine is created on first use)."""
        if self._session_factory is None:
            from citenly.database.async_db import AsyncSessionLocal

            self._session_factory = AsyncSessionLocal
        return self._session_factory

    def get_ycloud_client(self) -> YCloudHttpClient:
        if self._ycloud_client is None:
            self._ycloud_client = YCloudHttpClient(
                base_url=self.settings.YCLOUD_API_BASE,
                timeout=self.settings.EXTERNAL_API_TIMEOUT,
            )
        return self._ycloud_client

    def get_oauth_client(self) -> GoogleOAuthClient:
        if self._oauth_client is None:
            if not self.settings.google_oauth_configured:
                logger.warning("Google OAuth client credentials not configured; token refresh will fail")
            self._oauth_client = GoogleOAuthClient(
                client_id=self.settings.GOOGLE_CLIENT_ID,
                client_secret=self.settings.GOOGLE_CLIENT_SECRET,
                token_endpoint=self.settings.GOOGLE_TOKEN_ENDPOINT,
                timeout=self.settings.EXTERNAL_API_TIMEOUT,
            )
        return self._oauth_client

    def get_calendar_client(self) -> GoogleCalendarClient:
        if self._calendar_client is None:
            self._calendar_client = GoogleCalendarClient(
                base_url=self.settings.GOOGLE_CALENDAR_API_BASE,
                calendar_id=self.settings.GOOGLE_CALENDAR_ID,
                timeout=self.settings.EXTERNAL_API_TIMEOUT,
            )
        return self._calendar_client
