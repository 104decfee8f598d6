"""Reminder Tier Value Object.

A tier is one of the lead times a clinic can enable for reminders.
"""

from datetime import timedelta
from enum import Enum


class ReminderTier(str, Enum):
    """Niveles de recordatorio antes de la cita."""

    DAY_BEFORE = "24h"
    TWO_HOURS = "2h"
    ONE_HOUR = "1h"

    @property
    def lead_time(self) -> timedelta:
        leads = {
            "24h": timedelta(hours=24),
            "2h": timedelta(hours=2),
            "1h": timedelta(hours=1),
        }
        return leads[self.value]

    @property
    def coarse_offsets(self) -> tuple[timedelta, timedelta]:
        """Absolute-time query window relative to now, before stretching."""
        offsets = {
            "24h": (timedelta(0), timedelta(hours=48)),
            "2h": (timedelta(minutes=90), timedelta(minutes=150)),
            "1h": (timedelta(minutes=30), timedelta(minutes=90)),
        }
        return offsets[self.value]

    @property
    def legacy_rearm_after(self) -> timedelta | None:
        """Minimum age of the shared reminder_sent_at before this tier may send again.

        None means the tier never re-arms: it only sends while the shared flag is unset.
        """
        ages = {
            "24h": None,
            "2h": timedelta(hours=6),
            "1h": timedelta(minutes=45),
        }
        return ages[self.value]

    @property
    def rearm_after(self) -> timedelta:
        """Minimum age of this tier's own last send before it may send again."""
        ages = {
            "24h": timedelta(hours=12),
            "2h": timedelta(hours=6),
            "1h": timedelta(minutes=45),
        }
        return ages[self.value]

    @property
    def log_label(self) -> str:
        """Texto usado en el registro de mensajes."""
        labels = {
            "24h": "Recordatorio automático",
            "2h": "Recordatorio 2h antes",
            "1h": "Recordatorio 1h antes",
        }
        return labels[self.value]

    @property
    def is_hour_exact(self) -> bool:
        """24h matches a whole local date; 2h and 1h match a single local hour."""
        return self is not ReminderTier.DAY_BEFORE
