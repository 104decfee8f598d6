# ============================================================================
# SCOPE: DOMAIN SERVICE (Reminders)
# Description: Converts "now" + clinic timezone + tier into the local target
#              to match and the absolute-time range used to fetch candidates.
# ============================================================================
"""Time Window Calculator.

Candidate selection is a two-step pipeline:

1. A cheap absolute-time range query (``TierWindow.range_start/range_end``).
2. A pure predicate (``TierWindow.matches``) that re-derives each
   appointment's clinic-local date/hour and compares it with the target.

The predicate always works from the appointment's own localized time, so
half-hour and 45-minute offset zones behave like whole-hour ones.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo

from pytz import UnknownTimeZoneError, timezone

from citenly.core.domain.exceptions import ValidationException

from ..value_objects.reminder_tier import ReminderTier

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Mexico_City"


def as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True)
class TierWindow:
    """Decision for one clinic/tier on one tick.

    Attributes:
        should_evaluate: False when this tick is not the one for the tier.
        tz: Clinic timezone used by the predicate.
        target_date: Clinic-local date an appointment must fall on.
        target_hour: Clinic-local hour it must start in; None means any hour.
        range_start / range_end: Absolute-time candidate range [start, end).
        reason: Why the tier is not evaluated on this tick.
    """

    should_evaluate: bool
    tz: tzinfo
    target_date: date | None = None
    target_hour: int | None = None
    range_start: datetime | None = None
    range_end: datetime | None = None
    reason: str | None = None

    def matches(self, scheduled_at: datetime | None) -> bool:
        if not self.should_evaluate or scheduled_at is None:
            return False
        local = as_utc(scheduled_at).astimezone(self.tz)
        if local.date() != self.target_date:
            return False
        return self.target_hour is None or local.hour == self.target_hour


class TimeWindowCalculator:
    """Pure calculator for tier windows; no I/O."""

    def __init__(self, default_timezone: str = DEFAULT_TIMEZONE) -> None:
        self._default_timezone = default_timezone

    def resolve_timezone(self, name: str | None) -> tzinfo:
        """Return the pytz zone for ``name``, or the default zone when missing/unknown."""
        if not name:
            return timezone(self._default_timezone)
        try:
            return timezone(name)
        except UnknownTimeZoneError:
            logger.warning(f"Unknown timezone '{name}', falling back to {self._default_timezone}")
            return timezone(self._default_timezone)

    def local_now(self, now: datetime, timezone_name: str | None) -> datetime:
        return as_utc(now).astimezone(self.resolve_timezone(timezone_name))

    def for_tier(
        self,
        now: datetime,
        timezone_name: str | None,
        tier: ReminderTier,
        preferred_hour: int | None = None,
    ) -> TierWindow:
        """Compute the window for ``tier`` at ``now``.

        Args:
            now: Current instant.
            timezone_name: Clinic IANA timezone.
            tier: Reminder tier being evaluated.
            preferred_hour: Clinic-local hour (0-23); required for the 24h tier.
        """
        tz = self.resolve_timezone(timezone_name)
        now_utc = as_utc(now)

        if not tier.is_hour_exact:
            if preferred_hour is None:
                raise ValidationException("Preferred hour is required for the 24h tier", field="preferred_hour")
            return self._day_before_window(now_utc, tz, preferred_hour)

        return self._hour_exact_window(now_utc, tz, tier)

    def followup_window(
        self,
        now: datetime,
        timezone_name: str | None,
        preferred_hour: int,
        days_after: int,
    ) -> TierWindow:
        """Window for post-visit follow-ups: visits on local today - days_after."""
        tz = self.resolve_timezone(timezone_name)
        now_utc = as_utc(now)
        local_now = now_utc.astimezone(tz)

        if local_now.hour != preferred_hour:
            return TierWindow(should_evaluate=False, tz=tz, reason="outside_preferred_hour")

        target_date = local_now.date() - timedelta(days=days_after)
        day_start, day_end = self._local_day_bounds(tz, target_date)
        return TierWindow(
            should_evaluate=True,
            tz=tz,
            target_date=target_date,
            range_start=day_start,
            range_end=day_end,
        )

    def _day_before_window(self, now_utc: datetime, tz: tzinfo, preferred_hour: int) -> TierWindow:
        local_now = now_utc.astimezone(tz)
        if local_now.hour != preferred_hour:
            return TierWindow(should_evaluate=False, tz=tz, reason="outside_preferred_hour")

        target_date = local_now.date() + timedelta(days=1)
        start_offset, end_offset = ReminderTier.DAY_BEFORE.coarse_offsets
        _, day_end = self._local_day_bounds(tz, target_date)

        # Tomorrow can end past now+48h on a 25-hour DST day
        return TierWindow(
            should_evaluate=True,
            tz=tz,
            target_date=target_date,
            range_start=now_utc + start_offset,
            range_end=max(now_utc + end_offset, day_end),
        )

    def _hour_exact_window(self, now_utc: datetime, tz: tzinfo, tier: ReminderTier) -> TierWindow:
        target_instant = now_utc + tier.lead_time
        local_target = target_instant.astimezone(tz)

        hour_start = target_instant - timedelta(
            minutes=local_target.minute,
            seconds=local_target.second,
            microseconds=local_target.microsecond,
        )
        hour_end = hour_start + timedelta(hours=1)

        # Widen the coarse range so it always covers the whole target local hour
        start_offset, end_offset = tier.coarse_offsets
        return TierWindow(
            should_evaluate=True,
            tz=tz,
            target_date=local_target.date(),
            target_hour=local_target.hour,
            range_start=min(now_utc + start_offset, hour_start),
            range_end=max(now_utc + end_offset, hour_end),
        )

    @staticmethod
    def _local_day_bounds(tz: tzinfo, day: date) -> tuple[datetime, datetime]:
        next_day = day + timedelta(days=1)
        start = tz.localize(datetime.combine(day, time.min)).astimezone(UTC)  # type: ignore[attr-defined]
        end = tz.localize(datetime.combine(next_day, time.min)).astimezone(UTC)  # type: ignore[attr-defined]
        return start, end
