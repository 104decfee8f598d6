"""Calendar Credential Model.

A CredentialRecord is one user's OAuth grant. Its lifecycle:

    VALID (expires more than the leeway away)
      -> EXPIRING (within the leeway, or already past)
        -> REFRESHING
          -> VALID (new token persisted) | REFRESH_FAILED

REFRESH_FAILED caused by the provider rejecting the refresh token is
terminal until the user reconnects (stores a new grant).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

DEFAULT_REFRESH_LEEWAY = timedelta(minutes=5)


class CredentialState(str, Enum):
    VALID = "valid"
    EXPIRING = "expiring"
    REFRESHING = "refreshing"
    REFRESH_FAILED = "refresh_failed"


class CredentialErrorCode(str, Enum):
    """Codes surfaced to callers as soft errors."""

    NOT_CONNECTED = "NOT_CONNECTED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    REFRESH_FAILED = "REFRESH_FAILED"
    ACCESS_REVOKED = "ACCESS_REVOKED"
    CALENDAR_ERROR = "CALENDAR_ERROR"
    STORE_ERROR = "STORE_ERROR"

    @property
    def display_name(self) -> str:
        """Mensaje para mostrar en español."""
        names = {
            "NOT_CONNECTED": "Google Calendar no está conectado",
            "TOKEN_EXPIRED": "La sesión de Google expiró, vuelve a conectar tu calendario",
            "REFRESH_FAILED": "No se pudo renovar el acceso a Google Calendar",
            "ACCESS_REVOKED": "El acceso a Google Calendar fue revocado",
            "CALENDAR_ERROR": "Error al comunicarse con Google Calendar",
            "STORE_ERROR": "Error al leer las credenciales del calendario",
        }
        return names.get(self.value, self.value)


@dataclass
class CredentialRecord:
    user_id: str
    access_token: str
    expires_at: datetime
    refresh_token: str | None = None
    scope: str | None = None
    updated_at: datetime | None = None

    def state_at(self, now: datetime, leeway: timedelta = DEFAULT_REFRESH_LEEWAY) -> CredentialState:
        if self.expires_at - now > leeway:
            return CredentialState.VALID
        return CredentialState.EXPIRING


@dataclass(frozen=True)
class TokenResult:
    """Outcome of asking for a usable access token."""

    success: bool
    access_token: str | None = None
    expires_at: datetime | None = None
    code: CredentialErrorCode | None = None
    error: str | None = None
    refreshed: bool = False

    @classmethod
    def ok(cls, access_token: str, expires_at: datetime, refreshed: bool = False) -> "TokenResult":
        return cls(success=True, access_token=access_token, expires_at=expires_at, refreshed=refreshed)

    @classmethod
    def failure(cls, code: CredentialErrorCode, error: str | None = None) -> "TokenResult":
        return cls(success=False, code=code, error=error or code.display_name)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "expires_at": self.expires_at.isoformat() if self.expires_at else None}
        return {"success": False, "code": self.code.value if self.code else None, "error": self.error}
