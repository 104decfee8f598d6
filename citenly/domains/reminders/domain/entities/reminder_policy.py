"""Reminder Policy.

Read-only view of a clinic's settings and reminder configuration, as loaded
by the scheduler at the start of each run.
"""

from dataclasses import dataclass, field

from citenly.core.domain.exceptions import ValidationException

from ..value_objects.reminder_tier import ReminderTier

DEFAULT_PREFERRED_HOUR = "09:00"


def parse_preferred_hour(value: str | None) -> int:
    """Return the hour component of an "HH:MM" (or "HH") setting.

    Raises:
        ValidationException: If the value is not a valid time of day.
    """
    raw = (value or DEFAULT_PREFERRED_HOUR).strip()
    hour_part = raw.split(":", 1)[0]
    try:
        hour = int(hour_part)
    except ValueError as e:
        raise ValidationException(f"Invalid preferred hour: {value!r}", field="preferred_hour") from e
    if not 0 <= hour <= 23:
        raise ValidationException(f"Preferred hour out of range: {value!r}", field="preferred_hour")
    return hour


@dataclass(frozen=True)
class ClinicProfile:
    """Clinic identity and messaging credentials."""

    id: str
    name: str
    timezone: str | None = None
    ycloud_api_key: str | None = None
    ycloud_phone_number: str | None = None

    @property
    def has_messaging_credentials(self) -> bool:
        return bool(self.ycloud_api_key)


@dataclass(frozen=True)
class ReminderPolicy:
    """Política de recordatorios de una clínica."""

    clinic: ClinicProfile
    enabled_tiers: frozenset[ReminderTier] = field(default_factory=frozenset)
    preferred_hour: str = DEFAULT_PREFERRED_HOUR
    reminder_message: str | None = None
    followup_enabled: bool = False
    followup_days_after: int = 7
    followup_message: str | None = None

    @property
    def clinic_id(self) -> str:
        return self.clinic.id

    @property
    def preferred_local_hour(self) -> int:
        return parse_preferred_hour(self.preferred_hour)

    @property
    def ordered_tiers(self) -> list[ReminderTier]:
        """Enabled tiers in declaration order (24h, 2h, 1h)."""
        return [tier for tier in ReminderTier if tier in self.enabled_tiers]

    @property
    def has_work(self) -> bool:
        return bool(self.enabled_tiers) or self.followup_enabled
