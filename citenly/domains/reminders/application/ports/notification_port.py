# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: Notification service port (DIP compliant).
# ============================================================================
"""Notification Service Port.

Defines the interface for sending WhatsApp messages on behalf of a clinic.
Credentials are per clinic, so they travel with every call.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..dto.reminder_dtos import SendResult


@runtime_checkable
class INotificationService(Protocol):
    """Interface for notification services.

    Implementations: YCloudMessenger

    Implementations must not raise for provider or network failures; they
    return a failed SendResult instead.
    """

    async def send_template(
        self,
        api_key: str,
        sender: str | None,
        recipient: str,
        template_name: str,
        language_code: str,
        body_parameters: list[str],
    ) -> "SendResult":
        """Send a pre-approved WhatsApp template.

        Args:
            api_key: Clinic's provider API key.
            sender: Clinic's sender number.
            recipient: Patient phone number.
            template_name: Approved template name.
            language_code: Template language (e.g. "es").
            body_parameters: Positional body parameters.
        """
        ...

    async def send_text(
        self,
        api_key: str,
        sender: str | None,
        recipient: str,
        body: str,
    ) -> "SendResult":
        """Send a free-form text message."""
        ...
