"""
Google Calendar HTTP Client.

Single Responsibility: bearer-authenticated calls to the Calendar v3 events
endpoint for a single calendar. Responses are dicts that always carry
``status_code`` so callers can react to 401.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """HTTP client for Google Calendar events."""

    def __init__(
        self,
        base_url: str = "https://www.googleapis.com/calendar/v3",
        calendar_id: str = "primary",
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._calendar_id = calendar_id
        self._timeout = timeout
        self._transport = transport

    @property
    def events_url(self) -> str:
        return f"{self._base_url}/calendars/{quote(self._calendar_id, safe='')}/events"

    @staticmethod
    def headers(access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    async def create_event(self, access_token: str, event: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", self.events_url, access_token, json=event)

    async def list_events(self, access_token: str, params: dict[str, Any]) -> dict[str, Any]:
        return await self._request("GET", self.events_url, access_token, params=params)

    async def delete_event(self, access_token: str, event_id: str) -> dict[str, Any]:
        url = f"{self.events_url}/{quote(event_id, safe='')}"
        response = await self._request("DELETE", url, access_token)
        if response.get("status_code") == 410:
            # Already deleted on Google's side
            return {"success": True, "data": {}, "status_code": 410}
        return response

    async def _request(self, method: str, url: str, access_token: str, **kwargs: Any) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, headers=self.headers(access_token), **kwargs)
        except httpx.TimeoutException:
            return {"success": False, "error": "Timeout connecting to Google Calendar", "status_code": None}
        except httpx.HTTPError as e:
            return {"success": False, "error": f"Connection error with Google Calendar: {e}", "status_code": None}

        if response.is_success:
            return {"success": True, "data": self._parse_json(response), "status_code": response.status_code}

        error_detail = response.text
        payload = self._parse_json(response)
        error = payload.get("error")
        if isinstance(error, dict):
            error_detail = error.get("message", error_detail)

        if response.status_code != 401:
            logger.error(f"Google Calendar {method} failed ({response.status_code}): {error_detail}")
        return {
            "success": False,
            "error": f"HTTP {response.status_code}: {error_detail}",
            "status_code": response.status_code,
        }

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
