"""
Reminders Domain Container.

Single Responsibility: Wire all reminder engine dependencies.
"""

import logging
from typing import TYPE_CHECKING

from citenly.domains.reminders.application.use_cases import (
    NotificationDispatcher,
    ReminderScanner,
    SchedulerRun,
)
from citenly.domains.reminders.domain.services import DedupGuard, TimeWindowCalculator
from citenly.domains.reminders.infrastructure.repositories import (
    SQLAlchemyAppointmentRepository,
    SQLAlchemyMessageLog,
    SQLAlchemyReminderPolicyRepository,
)
from citenly.domains.reminders.infrastructure.scheduler import HourlyReminderScheduler
from citenly.integrations.ycloud import YCloudMessenger

if TYPE_CHECKING:
    from .base import BaseContainer

logger = logging.getLogger(__name__)


class RemindersContainer:
    """
    Reminders domain container.

    Single Responsibility: Create reminder repositories, use cases and scheduler.
    """

    def __init__(self, base: "BaseContainer"):
        """
        Initialize reminders container.

        Args:
            base: BaseContainer with shared singletons
        """
        self._base = base
        self._scheduler: HourlyReminderScheduler | None = None

    # ==================== REPOSITORIES ====================

    def create_appointment_repository(self) -> SQLAlchemyAppointmentRepository:
        return SQLAlchemyAppointmentRepository(self._base.get_session_factory())

    def create_policy_repository(self) -> SQLAlchemyReminderPolicyRepository:
        return SQLAlchemyReminderPolicyRepository(self._base.get_session_factory())

    def create_message_log(self) -> SQLAlchemyMessageLog:
        return SQLAlchemyMessageLog(self._base.get_session_factory())

    # ==================== USE CASES ====================

    def create_scheduler_run(self) -> SchedulerRun:
        """Create SchedulerRun with dependencies."""
        settings = self._base.settings
        appointments = self.create_appointment_repository()
        dedup_guard = DedupGuard()

        scanner = ReminderScanner(
            appointment_repository=appointments,
            calculator=TimeWindowCalculator(settings.DEFAULT_CLINIC_TIMEZONE),
            dedup_guard=dedup_guard,
        )
        dispatcher = NotificationDispatcher(
            appointment_repository=appointments,
            notification_service=YCloudMessenger(self._base.get_ycloud_client()),
            message_log=self.create_message_log(),
            dedup_guard=dedup_guard,
            use_templates=settings.YCLOUD_USE_TEMPLATES,
            reminder_template=settings.YCLOUD_REMINDER_TEMPLATE,
            followup_template=settings.YCLOUD_FOLLOWUP_TEMPLATE,
            template_language=settings.YCLOUD_TEMPLATE_LANGUAGE,
        )
        return SchedulerRun(
            policy_repository=self.create_policy_repository(),
            scanner=scanner,
            dispatcher=dispatcher,
            max_concurrency=settings.REMINDER_MAX_CONCURRENCY,
            send_delay=settings.REMINDER_SEND_DELAY_SECONDS,
        )

    # ==================== SCHEDULER ====================

    def get_hourly_scheduler(self) -> HourlyReminderScheduler:
        """Get HourlyReminderScheduler (singleton)."""
        if self._scheduler is None:
            self._scheduler = HourlyReminderScheduler(
                run_factory=self.create_scheduler_run,
                enabled=self._base.settings.REMINDER_SCHEDULER_ENABLED,
            )
        return self._scheduler
