# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: Appointment store port (DIP compliant).
# ============================================================================
"""Appointment Repository Port."""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ...domain.entities.appointment import NotificationState, ReminderAppointment
    from ...domain.value_objects.reminder_tier import ReminderTier


@runtime_checkable
class IAppointmentRepository(Protocol):
    """Interface for the appointment rows the reminder engine reads and updates.

    Implementations: SQLAlchemyAppointmentRepository

    Writes are conditional on ``appointment.version``: a claim or release only
    applies when the stored version still matches, and on success the passed
    entity is updated in place (including its version).
    """

    async def find_reminder_candidates(
        self,
        clinic_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list["ReminderAppointment"]:
        """Pending/confirmed appointments with range_start <= scheduled_at < range_end."""
        ...

    async def find_followup_candidates(
        self,
        clinic_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list["ReminderAppointment"]:
        """Completed appointments in range whose follow-up was never sent."""
        ...

    async def find_by_id(self, appointment_id: str) -> "ReminderAppointment | None":
        """Fresh copy of one appointment, or None when it no longer exists."""
        ...

    async def claim_reminder(
        self,
        appointment: "ReminderAppointment",
        tier: "ReminderTier",
        sent_at: datetime,
    ) -> bool:
        """Atomically mark the tier as sent. False when another run got there first."""
        ...

    async def claim_followup(self, appointment: "ReminderAppointment", sent_at: datetime) -> bool:
        """Atomically set followup_sent_at. False when another run got there first."""
        ...

    async def release(self, appointment: "ReminderAppointment", previous: "NotificationState") -> bool:
        """Undo a claim after a failed send by restoring the previous state."""
        ...
