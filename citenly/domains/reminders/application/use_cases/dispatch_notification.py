# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: Sends one reminder or follow-up and records the outcome.
# ============================================================================
"""Notification Dispatcher.

Per appointment:

1. Claim: conditional update of the dedup fields (version compare-and-set).
   A lost claim is re-checked against the re-read row and retried once when
   DedupGuard still allows the tier; otherwise another run took this send.
2. Send through the messaging provider (template or free text).
3. Success: append to the message log. Failure: release the claim so the
   stored state is back to what it was; no retry within the tick.

Sending is not transactional with the store. A crash after the claim and
before the send loses that reminder; a crash after the send and before the
log write only loses the log row.
"""

import logging
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from citenly.core.shared.formatters import PhoneFormatter

from ...domain.entities.appointment import NotificationState, ReminderAppointment
from ...domain.entities.reminder_policy import ReminderPolicy
from ...domain.services.dedup_guard import DedupGuard
from ...domain.value_objects.reminder_tier import ReminderTier
from ..dto.reminder_dtos import FOLLOWUP_JOB, DispatchOutcome, MessageLogEntry, SendResult
from ..message_renderer import MessageRenderer, RenderedMessage

if TYPE_CHECKING:
    from ..ports import IAppointmentRepository, IMessageLog, INotificationService

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Delivers reminders and follow-ups for single appointments."""

    def __init__(
        self,
        appointment_repository: "IAppointmentRepository",
        notification_service: "INotificationService",
        message_log: "IMessageLog",
        renderer: MessageRenderer | None = None,
        dedup_guard: DedupGuard | None = None,
        use_templates: bool = True,
        reminder_template: str = "appointment_reminder",
        followup_template: str = "appointment_followup",
        template_language: str = "es",
    ) -> None:
        """Initialize dispatcher.

        Args:
            appointment_repository: Store for conditional state updates (DIP).
            notification_service: WhatsApp provider (DIP).
            message_log: Outbound message log (DIP).
            renderer: Message renderer.
            dedup_guard: Re-checks a re-read row after a lost claim.
            use_templates: Send provider templates instead of free text.
            reminder_template: Provider template for reminders.
            followup_template: Provider template for follow-ups.
            template_language: Template language code.
        """
        self._appointments = appointment_repository
        self._notifier = notification_service
        self._message_log = message_log
        self._renderer = renderer or MessageRenderer()
        self._dedup = dedup_guard or DedupGuard()
        self._use_templates = use_templates
        self._reminder_template = reminder_template
        self._followup_template = followup_template
        self._template_language = template_language

    async def dispatch_reminder(
        self,
        appointment: ReminderAppointment,
        policy: ReminderPolicy,
        tier: ReminderTier,
        tz: tzinfo,
        now: datetime,
    ) -> DispatchOutcome:
        """Send the ``tier`` reminder for ``appointment``."""
        appointment_id = str(appointment.id)
        recipient = PhoneFormatter.to_e164(appointment.patient_phone)
        if not recipient:
            return DispatchOutcome.skipped(appointment_id, tier.value, "missing_phone")

        claim = await self._claim_reminder(appointment, tier, now)
        if claim is None:
            logger.info(f"Reminder {tier.value} for appointment {appointment_id} claimed by another run")
            return DispatchOutcome.skipped(appointment_id, tier.value, "claimed_by_concurrent_run")
        appointment, previous = claim

        message = self._renderer.render_reminder(appointment, policy, tz)
        result = await self._send(policy, recipient, message, self._reminder_template)

        if not result.success:
            logger.error(
                f"Reminder {tier.value} failed for appointment {appointment_id} "
                f"(clinic {policy.clinic_id}): {result.error}"
            )
            await self._release(appointment, previous)
            return DispatchOutcome.failed(appointment_id, tier.value, result.error or "send_failed")

        content = message.text if not self._use_templates else f"{tier.log_label} enviado a {appointment.patient_name}"
        await self._record(policy, recipient, content, result)

        logger.info(f"Reminder {tier.value} sent to {appointment.patient_name} for appointment {appointment_id}")
        return DispatchOutcome.sent(appointment_id, tier.value, result.message_id)

    async def dispatch_followup(
        self,
        appointment: ReminderAppointment,
        policy: ReminderPolicy,
        tz: tzinfo,
        now: datetime,
    ) -> DispatchOutcome:
        """Send the post-visit follow-up for a completed appointment."""
        appointment_id = str(appointment.id)
        recipient = PhoneFormatter.to_e164(appointment.patient_phone)
        if not recipient:
            return DispatchOutcome.skipped(appointment_id, FOLLOWUP_JOB, "missing_phone")

        previous = appointment.snapshot()
        if not await self._appointments.claim_followup(appointment, now):
            return DispatchOutcome.skipped(appointment_id, FOLLOWUP_JOB, "claimed_by_concurrent_run")

        message = self._renderer.render_followup(appointment, policy, tz)
        result = await self._send(policy, recipient, message, self._followup_template)

        if not result.success:
            logger.error(f"Follow-up failed for appointment {appointment_id}: {result.error}")
            await self._release(appointment, previous)
            return DispatchOutcome.failed(appointment_id, FOLLOWUP_JOB, result.error or "send_failed")

        content = message.text if not self._use_templates else f"Seguimiento enviado a {appointment.patient_name}"
        await self._record(policy, recipient, content, result)
        return DispatchOutcome.sent(appointment_id, FOLLOWUP_JOB, result.message_id)

    async def _claim_reminder(
        self,
        appointment: ReminderAppointment,
        tier: ReminderTier,
        now: datetime,
    ) -> tuple[ReminderAppointment, NotificationState] | None:
        """Claim the tier send; returns the claimed entity and its pre-claim state."""
        previous = appointment.snapshot()
        if await self._appointments.claim_reminder(appointment, tier, now):
            return appointment, previous

        current = await self._appointments.find_by_id(str(appointment.id))
        if current is None or not current.status.requires_reminder():
            return None
        if not self._dedup.is_allowed(current, tier, now):
            return None

        previous = current.snapshot()
        if await self._appointments.claim_reminder(current, tier, now):
            logger.info(f"Reminder {tier.value} for appointment {current.id} claimed on retry")
            return current, previous
        return None

    async def _send(
        self,
        policy: ReminderPolicy,
        recipient: str,
        message: RenderedMessage,
        template_name: str,
    ) -> SendResult:
        api_key = policy.clinic.ycloud_api_key or ""
        sender = policy.clinic.ycloud_phone_number
        try:
            if self._use_templates:
                return await self._notifier.send_template(
                    api_key=api_key,
                    sender=sender,
                    recipient=recipient,
                    template_name=template_name,
                    language_code=self._template_language,
                    body_parameters=message.template_parameters,
                )
            return await self._notifier.send_text(
                api_key=api_key,
                sender=sender,
                recipient=recipient,
                body=message.text,
            )
        except Exception as e:
            logger.error(f"Unexpected error sending to {recipient} for clinic {policy.clinic_id}: {e}", exc_info=True)
            return SendResult(success=False, error=f"internal_error: {e}")

    async def _release(self, appointment: ReminderAppointment, previous: NotificationState) -> None:
        try:
            released = await self._appointments.release(appointment, previous)
            if not released:
                logger.warning(f"Could not release claim for appointment {appointment.id}: version changed")
        except Exception as e:
            logger.error(f"Error releasing claim for appointment {appointment.id}: {e}", exc_info=True)

    async def _record(
        self,
        policy: ReminderPolicy,
        recipient: str,
        content: str,
        result: SendResult,
    ) -> None:
        entry = MessageLogEntry(
            clinic_id=policy.clinic_id,
            phone_number=recipient,
            content=content,
            provider_message_id=result.message_id,
        )
        try:
            await self._message_log.record(entry)
        except Exception as e:
            # Provider already accepted the message; outcome stays SENT
            logger.error(f"Failed to log message for clinic {policy.clinic_id}: {e}", exc_info=True)
