"""Dedup Guard.

Decides whether a tier may send for an appointment given what was already
sent. Two policies, chosen per appointment:

- Per-tier history (``reminder_tiers_sent`` has entries): each tier only
  looks at its own last send and re-arms after ``ReminderTier.rearm_after``.
- Legacy shared slot (no per-tier entries yet): ``reminder_sent`` /
  ``reminder_sent_at`` shared by every tier, re-armed after 6h for the 2h
  tier and 45m for the 1h tier; the 24h tier only sends while the slot is unset.
"""

from dataclasses import dataclass
from datetime import datetime

from ..entities.appointment import ReminderAppointment
from ..value_objects.reminder_tier import ReminderTier
from .time_window import as_utc


@dataclass(frozen=True)
class DedupDecision:
    allowed: bool
    reason: str


class DedupGuard:
    """Pure send/skip decision; no I/O."""

    def evaluate(self, appointment: ReminderAppointment, tier: ReminderTier, now: datetime) -> DedupDecision:
        if appointment.has_tier_history:
            return self._evaluate_tier_history(appointment, tier, now)
        return self._evaluate_legacy_slot(appointment, tier, now)

    def is_allowed(self, appointment: ReminderAppointment, tier: ReminderTier, now: datetime) -> bool:
        return self.evaluate(appointment, tier, now).allowed

    def _evaluate_tier_history(
        self,
        appointment: ReminderAppointment,
        tier: ReminderTier,
        now: datetime,
    ) -> DedupDecision:
        last_sent = appointment.last_sent_for(tier)
        if last_sent is None:
            return DedupDecision(True, "tier_not_sent")

        if as_utc(now) - as_utc(last_sent) >= tier.rearm_after:
            return DedupDecision(True, "tier_rearmed")
        return DedupDecision(False, "already_sent_for_tier")

    def _evaluate_legacy_slot(
        self,
        appointment: ReminderAppointment,
        tier: ReminderTier,
        now: datetime,
    ) -> DedupDecision:
        if not appointment.reminder_sent:
            return DedupDecision(True, "not_sent")

        rearm_after = tier.legacy_rearm_after
        if rearm_after is None:
            return DedupDecision(False, "already_sent")

        if appointment.reminder_sent_at is None:
            return DedupDecision(True, "sent_without_timestamp")

        if as_utc(now) - as_utc(appointment.reminder_sent_at) >= rearm_after:
            return DedupDecision(True, "rearmed")
        return DedupDecision(False, "within_rearm_window")
