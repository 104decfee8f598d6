# ============================================================================
# SCOPE: MULTI-TENANT WORKFLOW
# Description: In-process hourly trigger for the reminder run.
# Tenant-Aware: Yes - each tick covers every clinic.
# ============================================================================
"""Hourly Reminder Scheduler.

APScheduler-based async scheduler that fires a SchedulerRun at minute 0 of
every hour (UTC). The per-clinic timezone logic lives in the run itself, so
a single job covers every tenant.

An external cron hitting POST /api/v1/cron/process-reminders is the
alternative trigger; both can coexist because sends are claimed atomically.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore[import-not-found]
from apscheduler.triggers.cron import CronTrigger  # type: ignore[import-not-found]
from pytz import utc

if TYPE_CHECKING:
    from ...application.dto.reminder_dtos import DispatchReport
    from ...application.use_cases.scheduler_run import SchedulerRun

logger = logging.getLogger(__name__)

JOB_ID = "hourly_reminder_run"


class HourlyReminderScheduler:
    """Runs the reminder pipeline once per hour.

    Attributes:
        _scheduler: APScheduler instance.
        _is_running: Whether scheduler is currently running.
        _run_factory: Builds the SchedulerRun executed on each tick.
    """

    def __init__(
        self,
        run_factory: Callable[[], SchedulerRun],
        enabled: bool = True,
    ):
        """Initialize the scheduler.

        Args:
            run_factory: Returns the SchedulerRun to execute on each tick.
            enabled: Whether the scheduler is enabled.
        """
        self._run_factory = run_factory
        self._enabled = enabled
        self._scheduler: AsyncIOScheduler | None = None
        self._is_running = False
        self._last_report: DispatchReport | None = None

    async def start(self) -> None:
        """Start the scheduler and register the hourly job."""
        if not self._enabled:
            logger.info("HourlyReminderScheduler is disabled, skipping start")
            return

        if self._is_running:
            logger.warning("HourlyReminderScheduler already running")
            return

        scheduler = AsyncIOScheduler(timezone=utc)
        scheduler.add_job(
            self.run_now,
            trigger=CronTrigger(minute=0, timezone=utc),
            id=JOB_ID,
            name="Recordatorios de citas (cada hora)",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        self._is_running = True

        logger.info("HourlyReminderScheduler started")

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if self._scheduler and self._is_running:
            self._scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("HourlyReminderScheduler stopped")

    async def run_now(self) -> DispatchReport | None:
        """Execute one reminder run immediately."""
        logger.info("Executing hourly reminder run")
        try:
            report = await self._run_factory().execute()
        except Exception as e:
            logger.error(f"Error executing hourly reminder run: {e}", exc_info=True)
            return None

        self._last_report = report
        if report.success:
            logger.info(f"Hourly reminder run completed: {report.total_sent} messages sent")
        else:
            logger.error(f"Hourly reminder run failed: {report.error}")
        return report

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._is_running

    @property
    def last_report(self) -> DispatchReport | None:
        return self._last_report

    def get_jobs_info(self) -> list[dict[str, Any]]:
        """Get information about scheduled jobs."""
        if not self._scheduler:
            return []

        jobs = []
        for job in self._scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                }
            )
        return jobs
