# ============================================================================
# SCOPE: APPLICATION LAYER (Calendar)
# Description: Ports for the credential store, the OAuth provider and the
#              calendar API.
# ============================================================================
"""Calendar Application Ports."""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ...domain.credentials import CredentialRecord


@runtime_checkable
class ICredentialRepository(Protocol):
    """Per-user OAuth credential storage.

    Implementations: SQLAlchemyCredentialRepository
    """

    async def get(self, user_id: str) -> "CredentialRecord | None": ...

    async def save_refreshed(
        self,
        user_id: str,
        access_token: str,
        expires_at: datetime,
        refresh_token: str | None = None,
        scope: str | None = None,
    ) -> None:
        """Persist a refreshed token; a None refresh_token keeps the stored one."""
        ...

    async def upsert(
        self,
        user_id: str,
        access_token: str,
        expires_at: datetime,
        refresh_token: str | None = None,
        scope: str | None = None,
    ) -> "CredentialRecord":
        """Create or replace the grant; a None refresh_token keeps the stored one."""
        ...


@runtime_checkable
class ITokenProvider(Protocol):
    """OAuth token endpoint. Implementations: GoogleOAuthClient"""

    async def refresh_access_token(self, refresh_token: str) -> dict[str, Any]: ...


@runtime_checkable
class ICalendarClient(Protocol):
    """Calendar REST API. Implementations: GoogleCalendarClient

    Every call returns a dict with ``success`` and ``status_code``.
    """

    async def create_event(self, access_token: str, event: dict[str, Any]) -> dict[str, Any]: ...

    async def list_events(self, access_token: str, params: dict[str, Any]) -> dict[str, Any]: ...

    async def delete_event(self, access_token: str, event_id: str) -> dict[str, Any]: ...


__all__ = [
    "ICalendarClient",
    "ICredentialRepository",
    "ITokenProvider",
]
