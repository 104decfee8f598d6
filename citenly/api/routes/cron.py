"""
Reminder Trigger Endpoint

External cron (Vercel/Cloud Scheduler/crontab) calls this once per hour.

Endpoint: POST /api/v1/cron/process-reminders

The run keeps going in the background if it takes longer than
REMINDER_TRIGGER_RESPONSE_TIMEOUT; the caller then gets ``in_progress``
instead of the report.
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends

from citenly.api.dependencies import get_scheduler_run, verify_cron_secret
from citenly.config.settings import Settings, get_settings
from citenly.core.background_services import get_background_service_manager
from citenly.domains.reminders.application.use_cases import SchedulerRun

router = APIRouter(prefix="/cron", tags=["cron"])
logger = logging.getLogger(__name__)


@router.post("/process-reminders", dependencies=[Depends(verify_cron_secret)])
async def process_reminders(
    scheduler_run: SchedulerRun = Depends(get_scheduler_run),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> dict[str, Any]:
    """
    Run one reminder tick for every clinic.

    Returns the run report: {success, results: [...per clinic...], log: [...]}.
    """
    task = asyncio.create_task(scheduler_run.execute(), name="reminder_run")
    get_background_service_manager().track(task)

    try:
        report = await asyncio.wait_for(asyncio.shield(task), timeout=settings.REMINDER_TRIGGER_RESPONSE_TIMEOUT)
    except TimeoutError:
        logger.warning(
            f"Reminder run still running after {settings.REMINDER_TRIGGER_RESPONSE_TIMEOUT}s; continuing in background"
        )
        return {
            "success": True,
            "in_progress": True,
            "results": [],
            "log": ["Reminder run continues in background"],
        }

    return report.to_dict()
