"""
YCloud Messenger.

Single Responsibility: Build YCloud WhatsApp payloads and send them.
Implements the reminders domain's INotificationService port.
"""

import logging
from typing import Any

from citenly.core.shared.formatters import PhoneFormatter
from citenly.domains.reminders.application.dto.reminder_dtos import SendResult
from citenly.integrations.ycloud.http_client import YCloudHttpClient

logger = logging.getLogger(__name__)


class YCloudMessenger:
    """
    Message sender for YCloud WhatsApp.

    Single Responsibility: Build and send template and text messages.
    """

    def __init__(self, http_client: YCloudHttpClient):
        """
        Initialize messenger.

        Args:
            http_client: HTTP client for API calls
        """
        self._client = http_client

    async def send_template(
        self,
        api_key: str,
        sender: str | None,
        recipient: str,
        template_name: str,
        language_code: str,
        body_parameters: list[str],
    ) -> SendResult:
        """Send a pre-approved WhatsApp template with positional body parameters."""
        if not api_key:
            return SendResult(success=False, error="Missing YCloud API key")

        payload: dict[str, Any] = {
            "to": PhoneFormatter.to_e164(recipient),
            "type": "template",
            "template": {
                "name": template_name,
                "language": {"code": language_code},
                "components": [
                    {
                        "type": "body",
                        "parameters": [{"type": "text", "text": value} for value in body_parameters],
                    }
                ],
            },
        }
        if sender:
            payload["from"] = PhoneFormatter.to_e164(sender)

        return self._to_result(await self._client.post(payload, api_key))

    async def send_text(
        self,
        api_key: str,
        sender: str | None,
        recipient: str,
        body: str,
    ) -> SendResult:
        """Send text message."""
        if not api_key:
            return SendResult(success=False, error="Missing YCloud API key")
        if not recipient or not body:
            return SendResult(success=False, error="Number and message required")

        payload: dict[str, Any] = {
            "to": PhoneFormatter.to_e164(recipient),
            "type": "text",
            "text": {"body": body},
        }
        if sender:
            payload["from"] = PhoneFormatter.to_e164(sender)

        return self._to_result(await self._client.post(payload, api_key))

    @staticmethod
    def _to_result(response: dict[str, Any]) -> SendResult:
        if response.get("success"):
            data = response.get("data") or {}
            return SendResult(
                success=True,
                message_id=data.get("id"),
                status_code=response.get("status_code"),
            )
        return SendResult(
            success=False,
            error=response.get("error"),
            status_code=response.get("status_code"),
        )
