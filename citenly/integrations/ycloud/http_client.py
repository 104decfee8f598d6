"""
YCloud HTTP Client.

Single Responsibility: Handle HTTP communication with the YCloud WhatsApp API.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class YCloudHttpClient:
    """
    HTTP client for the YCloud API.

    API keys are per clinic, so each request carries its own key. Failures
    (non-2xx, timeout, network) are returned as dicts, never raised.
    """

    def __init__(
        self,
        base_url: str = "https://api.ycloud.com/v2",
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: YCloud API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def message_url(self) -> str:
        """Get URL for sending WhatsApp messages."""
        return f"{self._base_url}/whatsapp/messages"

    def headers(self, api_key: str) -> dict[str, str]:
        """Get standard headers for requests."""
        return {
            "X-API-Key": api_key,
            "Content-Type": "application/json",
        }

    async def post(self, payload: dict[str, Any], api_key: str) -> dict[str, Any]:
        """
        Execute POST request to the messages endpoint.

        Args:
            payload: Request payload
            api_key: Clinic's YCloud API key

        Returns:
            Response dictionary with success/error status
        """
        try:
            logger.debug(f"POST {self.message_url}")

            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self.message_url, json=payload, headers=self.headers(api_key))

                logger.info(f"YCloud API Response: {response.status_code}")

                if response.is_success:
                    return {"success": True, "data": self._parse_json(response), "status_code": response.status_code}
                return self._handle_error_response(response)

        except httpx.TimeoutException:
            return {"success": False, "error": "Timeout connecting to YCloud API", "status_code": None}
        except httpx.HTTPError as e:
            return {"success": False, "error": f"Connection error with YCloud API: {e}", "status_code": None}

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _handle_error_response(self, response: httpx.Response) -> dict[str, Any]:
        """Handle error response from API."""
        error_detail = response.text
        logger.error(f"YCloud error {response.status_code}: {error_detail}")

        try:
            error_json = response.json()
            error_message = error_json.get("error", {}).get("message", error_detail)
        except (ValueError, AttributeError):
            error_message = error_detail

        return {
            "success": False,
            "error": f"HTTP {response.status_code}: {error_message}",
            "status_code": response.status_code,
        }
