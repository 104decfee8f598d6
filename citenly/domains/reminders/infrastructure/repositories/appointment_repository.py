"""
Appointment Repository Implementation

SQLAlchemy implementation of IAppointmentRepository. Each operation runs in
its own short session so that concurrent clinic/tier jobs never share one.
"""

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from citenly.models.db.appointments import Appointment as AppointmentModel

from ...domain.entities.appointment import NotificationState, ReminderAppointment
from ...domain.value_objects.appointment_status import AppointmentStatus
from ...domain.value_objects.reminder_tier import ReminderTier

logger = logging.getLogger(__name__)


def _as_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def _parse_tiers(raw: dict | None) -> dict[str, datetime]:
    tiers: dict[str, datetime] = {}
    for tier, value in (raw or {}).items():
        if not value:
            continue
        try:
            sent_at = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
        except ValueError:
            logger.warning(f"Ignoring unparseable reminder timestamp for tier {tier}: {value!r}")
            continue
        tiers[tier] = sent_at if sent_at.tzinfo else sent_at.replace(tzinfo=UTC)
    return tiers


def _serialize_tiers(tiers: dict[str, datetime]) -> dict[str, str]:
    return {tier: sent_at.isoformat() for tier, sent_at in tiers.items()}


class SQLAlchemyAppointmentRepository:
    """
    SQLAlchemy implementation of the reminder engine's appointment store.

    Claims and releases are compare-and-set on the ``version`` column.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize repository.

        Args:
            session_factory: Factory for short-lived async sessions
        """
        self._session_factory = session_factory

    async def find_reminder_candidates(
        self,
        clinic_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list[ReminderAppointment]:
        statuses = [status.value for status in AppointmentStatus.reminder_statuses()]
        query = (
            select(AppointmentModel)
            .where(
                and_(
                    AppointmentModel.clinic_id == _as_uuid(clinic_id),
                    AppointmentModel.status.in_(statuses),
                    AppointmentModel.scheduled_at >= range_start,
                    AppointmentModel.scheduled_at < range_end,
                )
            )
            .order_by(AppointmentModel.scheduled_at)
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_entity(model) for model in result.scalars().all()]

    async def find_followup_candidates(
        self,
        clinic_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list[ReminderAppointment]:
        query = (
            select(AppointmentModel)
            .where(
                and_(
                    AppointmentModel.clinic_id == _as_uuid(clinic_id),
                    AppointmentModel.status == AppointmentStatus.COMPLETED.value,
                    AppointmentModel.followup_sent_at.is_(None),
                    AppointmentModel.scheduled_at >= range_start,
                    AppointmentModel.scheduled_at < range_end,
                )
            )
            .order_by(AppointmentModel.scheduled_at)
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_entity(model) for model in result.scalars().all()]

    async def find_by_id(self, appointment_id: str) -> ReminderAppointment | None:
        async with self._session_factory() as session:
            model = await session.get(AppointmentModel, _as_uuid(appointment_id))
            return self._to_entity(model) if model else None

    async def claim_reminder(
        self,
        appointment: ReminderAppointment,
        tier: ReminderTier,
        sent_at: datetime,
    ) -> bool:
        claimed = await self._compare_and_set(
            appointment,
            reminder_sent=True,
            reminder_sent_at=sent_at,
            reminder_tiers_sent=_serialize_tiers(appointment.tiers_after_send(tier, sent_at)),
        )
        if claimed:
            appointment.mark_reminder_sent(tier, sent_at)
        return claimed

    async def claim_followup(self, appointment: ReminderAppointment, sent_at: datetime) -> bool:
        claimed = await self._compare_and_set(appointment, followup_sent_at=sent_at)
        if claimed:
            appointment.mark_followup_sent(sent_at)
        return claimed

    async def release(self, appointment: ReminderAppointment, previous: NotificationState) -> bool:
        released = await self._compare_and_set(
            appointment,
            reminder_sent=previous.reminder_sent,
            reminder_sent_at=previous.reminder_sent_at,
            reminder_tiers_sent=_serialize_tiers(previous.reminder_tiers_sent),
            followup_sent_at=previous.followup_sent_at,
        )
        if released:
            appointment.restore(previous)
        return released

    async def _compare_and_set(self, appointment: ReminderAppointment, **values) -> bool:
        statement = (
            update(AppointmentModel)
            .where(
                and_(
                    AppointmentModel.id == _as_uuid(appointment.id),
                    AppointmentModel.version == appointment.version,
                )
            )
            .values(**values, version=AppointmentModel.version + 1, updated_at=datetime.now(UTC))
        )
        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        return result.rowcount == 1

    @staticmethod
    def _to_entity(model: AppointmentModel) -> ReminderAppointment:
        try:
            status = AppointmentStatus(model.status)
        except ValueError:
            logger.warning(f"Unknown status '{model.status}' for appointment {model.id}")
            status = AppointmentStatus.CANCELLED

        return ReminderAppointment(
            id=str(model.id),
            clinic_id=str(model.clinic_id),
            patient_name=model.patient_name,
            patient_phone=model.patient_phone or "",
            service_name=model.service_name,
            scheduled_at=model.scheduled_at,
            duration_minutes=model.duration_minutes,
            status=status,
            reminder_sent=model.reminder_sent,
            reminder_sent_at=model.reminder_sent_at,
            reminder_tiers_sent=_parse_tiers(model.reminder_tiers_sent),
            followup_sent_at=model.followup_sent_at,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
