# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: One hourly tick: every clinic x enabled tier (plus follow-ups),
#              folded into a DispatchReport. Never raises.
# ============================================================================
"""Scheduler Run Use Case.

Flow per tick:
- Load every clinic's reminder policy (failure -> report with success=False).
- Clinics without a YCloud API key are reported as skipped.
- Each clinic x tier pair (and clinic x follow-up) runs concurrently, bounded
  by a semaphore. Within a pair, sends are sequential with a short pause to
  respect provider rate limits.
- Unexpected errors are caught per appointment and per pair and become
  outcome values; the run always returns a report.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ...domain.entities.appointment import ReminderAppointment
from ...domain.entities.reminder_policy import ReminderPolicy
from ...domain.services.time_window import as_utc
from ...domain.value_objects.reminder_tier import ReminderTier
from ..dto.reminder_dtos import FOLLOWUP_JOB, DispatchOutcome, DispatchReport, JobResult, TenantReport
from .dispatch_notification import NotificationDispatcher
from .scan_reminders import ReminderScanner, ScanResult

if TYPE_CHECKING:
    from ..ports import IReminderPolicyRepository

logger = logging.getLogger(__name__)

MISSING_API_KEY_REASON = "No YCloud API Key"


class SchedulerRun:
    """Top-level orchestrator invoked once per tick."""

    def __init__(
        self,
        policy_repository: "IReminderPolicyRepository",
        scanner: ReminderScanner,
        dispatcher: NotificationDispatcher,
        max_concurrency: int = 5,
        send_delay: float = 0.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the run.

        Args:
            policy_repository: Source of clinic policies (DIP).
            scanner: Candidate selection per clinic/tier.
            dispatcher: Delivery per appointment.
            max_concurrency: Clinic/tier pairs processed at the same time.
            send_delay: Seconds to wait between sends within a pair.
            clock: Returns the current instant; defaults to UTC now.
        """
        self._policies = policy_repository
        self._scanner = scanner
        self._dispatcher = dispatcher
        self._max_concurrency = max(1, max_concurrency)
        self._send_delay = send_delay
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, now: datetime | None = None) -> DispatchReport:
        """Run one tick and return its report."""
        now = as_utc(now or self._clock())
        report = DispatchReport(started_at=now)
        report.log.append(f"Reminder run started at {now.isoformat()}")

        try:
            policies = await self._policies.list_policies()
        except Exception as e:
            logger.error(f"Failed to load reminder policies: {e}", exc_info=True)
            report.success = False
            report.error = f"Failed to load reminder policies: {e}"
            report.finished_at = datetime.now(UTC)
            return report

        try:
            report.tenants = await self._run_tenants(policies, now, report.log)
        except Exception as e:
            logger.error(f"Unexpected error in reminder run: {e}", exc_info=True)
            report.success = False
            report.error = str(e)

        report.finished_at = datetime.now(UTC)
        logger.info(
            f"Reminder run finished: {len(report.tenants)} clinics, {report.total_sent} messages sent"
        )
        return report

    async def _run_tenants(
        self,
        policies: list[ReminderPolicy],
        now: datetime,
        log: list[str],
    ) -> list[TenantReport]:
        semaphore = asyncio.Semaphore(self._max_concurrency)
        tenants: list[TenantReport] = []
        pending: list[tuple[TenantReport, Awaitable[JobResult]]] = []

        active = [policy for policy in policies if policy.has_work]
        log.append(f"Processing {len(active)} clinics with reminders enabled")

        for policy in active:
            tenant = TenantReport(clinic_id=policy.clinic_id, clinic_name=policy.clinic.name)
            tenants.append(tenant)

            if not policy.clinic.has_messaging_credentials:
                tenant.skipped_reason = MISSING_API_KEY_REASON
                log.append(f"Skipping {policy.clinic.name}: {MISSING_API_KEY_REASON}")
                continue

            for tier in policy.ordered_tiers:
                pending.append(
                    (
                        tenant,
                        self._guarded(
                            semaphore,
                            policy.clinic_id,
                            tier.value,
                            lambda policy=policy, tier=tier: self._run_tier(policy, tier, now),
                        ),
                    )
                )

            if policy.followup_enabled:
                pending.append(
                    (
                        tenant,
                        self._guarded(
                            semaphore,
                            policy.clinic_id,
                            FOLLOWUP_JOB,
                            lambda policy=policy: self._run_followups(policy, now),
                        ),
                    )
                )

        results = await asyncio.gather(*(job for _, job in pending))

        for (tenant, _), result in zip(pending, results):
            tenant.add(result)
            if result.error:
                log.append(f"{tenant.clinic_name} [{result.job}]: error {result.error}")
            elif result.evaluated:
                log.append(
                    f"{tenant.clinic_name} [{result.job}]: {result.candidates} candidates, "
                    f"{result.sent_count} sent, {result.failed_count} failed"
                )

        return tenants

    async def _guarded(
        self,
        semaphore: asyncio.Semaphore,
        clinic_id: str,
        job: str,
        operation: Callable[[], Awaitable[JobResult]],
    ) -> JobResult:
        async with semaphore:
            try:
                return await operation()
            except Exception as e:
                logger.error(f"Unexpected error processing {job} for clinic {clinic_id}: {e}", exc_info=True)
                return JobResult.from_error(clinic_id, job, f"internal_error: {e}")

    async def _run_tier(self, policy: ReminderPolicy, tier: ReminderTier, now: datetime) -> JobResult:
        scan = await self._scanner.scan(policy, tier, now)
        tz = scan.window.tz

        async def send(appointment: ReminderAppointment) -> DispatchOutcome:
            return await self._dispatcher.dispatch_reminder(appointment, policy, tier, tz, now)

        return await self._deliver(scan, send)

    async def _run_followups(self, policy: ReminderPolicy, now: datetime) -> JobResult:
        scan = await self._scanner.scan_followups(policy, now)
        tz = scan.window.tz

        async def send(appointment: ReminderAppointment) -> DispatchOutcome:
            return await self._dispatcher.dispatch_followup(appointment, policy, tz, now)

        return await self._deliver(scan, send)

    async def _deliver(
        self,
        scan: ScanResult,
        send: Callable[[ReminderAppointment], Awaitable[DispatchOutcome]],
    ) -> JobResult:
        result = JobResult(
            clinic_id=scan.clinic_id,
            job=scan.job,
            evaluated=scan.evaluated,
            candidates=scan.candidates,
            skip_reasons=Counter(scan.skip_reasons),
            error=scan.error,
        )

        for index, appointment in enumerate(scan.due):
            if index and self._send_delay:
                await asyncio.sleep(self._send_delay)
            try:
                outcome = await send(appointment)
            except Exception as e:
                logger.error(
                    f"Unexpected error sending {scan.job} for appointment {appointment.id}: {e}",
                    exc_info=True,
                )
                outcome = DispatchOutcome.failed(str(appointment.id), scan.job, f"internal_error: {e}")
            result.outcomes.append(outcome)

        return result
