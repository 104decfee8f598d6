"""
Reminder Policy Repository Implementation

Joins clinic_settings with reminder_settings and maps each pair to a
ReminderPolicy for the scheduler.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from citenly.models.db.clinics import ClinicSettings, ReminderSettings

from ...domain.entities.reminder_policy import DEFAULT_PREFERRED_HOUR, ClinicProfile, ReminderPolicy
from ...domain.value_objects.reminder_tier import ReminderTier

logger = logging.getLogger(__name__)


class SQLAlchemyReminderPolicyRepository:
    """Read-only access to clinic reminder policies."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list_policies(self) -> list[ReminderPolicy]:
        query = (
            select(ClinicSettings, ReminderSettings)
            .join(ReminderSettings, ReminderSettings.clinic_id == ClinicSettings.id)
            .order_by(ClinicSettings.clinic_name)
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            rows = result.all()

        policies = [self._to_policy(clinic, settings) for clinic, settings in rows]
        logger.debug(f"Loaded {len(policies)} reminder policies")
        return policies

    @staticmethod
    def _to_policy(clinic: ClinicSettings, settings: ReminderSettings) -> ReminderPolicy:
        enabled = {
            ReminderTier.DAY_BEFORE: settings.reminder_24h_before,
            ReminderTier.TWO_HOURS: settings.reminder_2h_before,
            ReminderTier.ONE_HOUR: settings.reminder_1h_before,
        }
        return ReminderPolicy(
            clinic=ClinicProfile(
                id=str(clinic.id),
                name=clinic.clinic_name,
                timezone=clinic.timezone,
                ycloud_api_key=clinic.ycloud_api_key,
                ycloud_phone_number=clinic.ycloud_phone_number,
            ),
            enabled_tiers=frozenset(tier for tier, is_enabled in enabled.items() if is_enabled),
            preferred_hour=settings.preferred_hour or DEFAULT_PREFERRED_HOUR,
            reminder_message=settings.reminder_message,
            followup_enabled=bool(settings.followup_enabled),
            followup_days_after=settings.followup_days_after or 7,
            followup_message=settings.followup_message,
        )
