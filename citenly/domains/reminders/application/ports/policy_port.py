# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: Reminder policy store port (DIP compliant).
# ============================================================================
"""Reminder Policy Repository Port."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ...domain.entities.reminder_policy import ReminderPolicy


@runtime_checkable
class IReminderPolicyRepository(Protocol):
    """Read-only access to every clinic's reminder policy."""

    async def list_policies(self) -> list["ReminderPolicy"]:
        """Return one policy per clinic that has reminder settings."""
        ...
