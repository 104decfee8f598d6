"""
Google OAuth Client.

Single Responsibility: exchange a refresh token for a new access token.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class GoogleOAuthClient:
    """
    Client for Google's OAuth token endpoint (grant_type=refresh_token).

    Returns dicts with success/error status; never raises for HTTP or
    network failures.
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        token_endpoint: str = "https://oauth2.googleapis.com/token",
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize OAuth client.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            token_endpoint: Token endpoint URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_endpoint = token_endpoint
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    async def refresh_access_token(self, refresh_token: str) -> dict[str, Any]:
        """
        Request a new access token.

        Args:
            refresh_token: Stored refresh token

        Returns:
            {"success": True, "data": {...token payload...}} or
            {"success": False, "error": str, "error_code": str | None, "status_code": int | None}
        """
        if not self.is_configured:
            return {
                "success": False,
                "error": "Google OAuth client credentials not configured",
                "error_code": "client_not_configured",
                "status_code": None,
            }

        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._token_endpoint, data=data)
        except httpx.TimeoutException:
            return self._transport_error("Timeout refreshing Google token")
        except httpx.HTTPError as e:
            return self._transport_error(f"Connection error refreshing token: {e}")

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.is_success and payload.get("access_token"):
            logger.info("Google access token refreshed")
            return {"success": True, "data": payload, "status_code": response.status_code}

        error_code = payload.get("error")
        error_message = payload.get("error_description") or error_code or response.text
        logger.error(f"Google token refresh failed ({response.status_code}): {error_message}")
        return {
            "success": False,
            "error": f"HTTP {response.status_code}: {error_message}",
            "error_code": error_code,
            "status_code": response.status_code,
        }

    @staticmethod
    def _transport_error(message: str) -> dict[str, Any]:
        logger.error(message)
        return {"success": False, "error": message, "error_code": None, "status_code": None}
