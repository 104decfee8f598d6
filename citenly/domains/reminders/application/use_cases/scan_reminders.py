# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: Per clinic x tier candidate selection.
# ============================================================================
"""Reminder Scanner.

For one clinic and one enabled tier:

1. Ask the TimeWindowCalculator whether this tick evaluates the tier. If not,
   stop without touching the store.
2. Range query for pending/confirmed appointments in the coarse window.
3. Keep only appointments whose clinic-local date/hour equals the target.
4. Keep only appointments the DedupGuard allows.

A store failure is returned as a ScanResult with ``error`` set.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from ...domain.entities.appointment import ReminderAppointment
from ...domain.entities.reminder_policy import ReminderPolicy
from ...domain.services.dedup_guard import DedupGuard
from ...domain.services.time_window import TierWindow, TimeWindowCalculator
from ...domain.value_objects.reminder_tier import ReminderTier
from ..dto.reminder_dtos import FOLLOWUP_JOB

if TYPE_CHECKING:
    from ..ports import IAppointmentRepository

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    clinic_id: str
    job: str
    window: TierWindow
    candidates: int = 0
    due: list[ReminderAppointment] = field(default_factory=list)
    skip_reasons: Counter = field(default_factory=Counter)
    error: str | None = None

    @property
    def evaluated(self) -> bool:
        return self.window.should_evaluate


class ReminderScanner:
    """Selects the appointments due for a tier on this tick."""

    def __init__(
        self,
        appointment_repository: "IAppointmentRepository",
        calculator: TimeWindowCalculator | None = None,
        dedup_guard: DedupGuard | None = None,
    ) -> None:
        self._appointments = appointment_repository
        self._calculator = calculator or TimeWindowCalculator()
        self._dedup_guard = dedup_guard or DedupGuard()

    @property
    def calculator(self) -> TimeWindowCalculator:
        return self._calculator

    def window_for(self, policy: ReminderPolicy, tier: ReminderTier, now: datetime) -> TierWindow:
        preferred_hour = None if tier.is_hour_exact else policy.preferred_local_hour
        return self._calculator.for_tier(now, policy.clinic.timezone, tier, preferred_hour)

    async def scan(self, policy: ReminderPolicy, tier: ReminderTier, now: datetime) -> ScanResult:
        window = self.window_for(policy, tier, now)
        result = ScanResult(clinic_id=policy.clinic_id, job=tier.value, window=window)

        if not window.should_evaluate:
            result.skip_reasons[window.reason or "not_this_tick"] += 1
            return result

        try:
            candidates = await self._appointments.find_reminder_candidates(
                policy.clinic_id,
                window.range_start,
                window.range_end,
            )
        except Exception as e:
            logger.error(
                f"Error querying {tier.value} candidates for clinic {policy.clinic_id}: {e}",
                exc_info=True,
            )
            result.error = f"store_error: {e}"
            return result

        result.candidates = len(candidates)
        result.due = self.select_due(candidates, window, tier, now, result.skip_reasons)

        logger.debug(
            f"Clinic {policy.clinic_id} tier {tier.value}: {len(candidates)} candidates, {len(result.due)} due"
        )
        return result

    def select_due(
        self,
        candidates: list[ReminderAppointment],
        window: TierWindow,
        tier: ReminderTier,
        now: datetime,
        skip_reasons: Counter | None = None,
    ) -> list[ReminderAppointment]:
        """Exact local-time match followed by the dedup guard; no I/O."""
        skip_reasons = skip_reasons if skip_reasons is not None else Counter()
        due: list[ReminderAppointment] = []

        for appointment in candidates:
            if not appointment.status.requires_reminder():
                skip_reasons["status"] += 1
                continue
            if not window.matches(appointment.scheduled_at):
                continue
            decision = self._dedup_guard.evaluate(appointment, tier, now)
            if not decision.allowed:
                skip_reasons[decision.reason] += 1
                continue
            due.append(appointment)

        return due

    async def scan_followups(self, policy: ReminderPolicy, now: datetime) -> ScanResult:
        """Completed visits from ``followup_days_after`` local days ago, at the preferred hour."""
        window = self._calculator.followup_window(
            now,
            policy.clinic.timezone,
            policy.preferred_local_hour,
            policy.followup_days_after,
        )
        result = ScanResult(clinic_id=policy.clinic_id, job=FOLLOWUP_JOB, window=window)

        if not window.should_evaluate:
            result.skip_reasons[window.reason or "not_this_tick"] += 1
            return result

        try:
            candidates = await self._appointments.find_followup_candidates(
                policy.clinic_id,
                window.range_start,
                window.range_end,
            )
        except Exception as e:
            logger.error(f"Error querying follow-up candidates for clinic {policy.clinic_id}: {e}", exc_info=True)
            result.error = f"store_error: {e}"
            return result

        result.candidates = len(candidates)
        for appointment in candidates:
            if not appointment.status.allows_followup():
                result.skip_reasons["status"] += 1
            elif appointment.followup_sent_at is not None:
                result.skip_reasons["already_sent"] += 1
            elif window.matches(appointment.scheduled_at):
                result.due.append(appointment)
        return result
