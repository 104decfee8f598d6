"""Appointment Entity - Aggregate Root.

The reminder engine's view of an appointment: who to notify, when it is,
and what has already been sent for it.
"""

from dataclasses import dataclass, field
from datetime import datetime

from citenly.core.domain.entities import AggregateRoot

from ..value_objects.appointment_status import AppointmentStatus
from ..value_objects.reminder_tier import ReminderTier


@dataclass(frozen=True)
class NotificationState:
    """Snapshot of the dedup fields, used to undo a claim when a send fails."""

    reminder_sent: bool
    reminder_sent_at: datetime | None
    reminder_tiers_sent: dict[str, datetime]
    followup_sent_at: datetime | None


@dataclass
class ReminderAppointment(AggregateRoot[str]):
    """Cita programada - Aggregate Root.

    Notification state has two layers:
    - reminder_tiers_sent: last send per tier, authoritative once it has entries.
    - reminder_sent / reminder_sent_at: legacy single slot shared by all tiers,
      still written on every send and honored for rows without tier entries.
    """

    clinic_id: str = ""
    patient_name: str = ""
    patient_phone: str = ""
    service_name: str | None = None
    scheduled_at: datetime | None = None
    duration_minutes: int = 30
    status: AppointmentStatus = AppointmentStatus.PENDING

    reminder_sent: bool = False
    reminder_sent_at: datetime | None = None
    reminder_tiers_sent: dict[str, datetime] = field(default_factory=dict)
    followup_sent_at: datetime | None = None

    @property
    def has_tier_history(self) -> bool:
        return bool(self.reminder_tiers_sent)

    def last_sent_for(self, tier: ReminderTier) -> datetime | None:
        return self.reminder_tiers_sent.get(tier.value)

    def snapshot(self) -> NotificationState:
        return NotificationState(
            reminder_sent=self.reminder_sent,
            reminder_sent_at=self.reminder_sent_at,
            reminder_tiers_sent=dict(self.reminder_tiers_sent),
            followup_sent_at=self.followup_sent_at,
        )

    def tiers_after_send(self, tier: ReminderTier, sent_at: datetime) -> dict[str, datetime]:
        """Tier map as it will look once this tier's send is recorded."""
        tiers = dict(self.reminder_tiers_sent)
        tiers[tier.value] = sent_at
        return tiers

    def mark_reminder_sent(self, tier: ReminderTier, sent_at: datetime) -> None:
        """Registrar el envío del recordatorio para un nivel."""
        self.reminder_tiers_sent = self.tiers_after_send(tier, sent_at)
        self.reminder_sent = True
        self.reminder_sent_at = sent_at
        self.increment_version()
        self.touch()

    def mark_followup_sent(self, sent_at: datetime) -> None:
        """Registrar el envío del seguimiento post-visita."""
        self.followup_sent_at = sent_at
        self.increment_version()
        self.touch()

    def restore(self, state: NotificationState) -> None:
        """Volver al estado previo a un envío fallido."""
        self.reminder_sent = state.reminder_sent
        self.reminder_sent_at = state.reminder_sent_at
        self.reminder_tiers_sent = dict(state.reminder_tiers_sent)
        self.followup_sent_at = state.followup_sent_at
        self.increment_version()
        self.touch()
