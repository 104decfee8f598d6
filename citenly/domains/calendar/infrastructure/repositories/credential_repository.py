"""
Credential Repository Implementation

SQLAlchemy implementation of ICredentialRepository over the
``google_calendar_tokens`` table.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from citenly.models.db.google_calendar_tokens import GoogleCalendarToken

from ...domain.credentials import CredentialRecord

logger = logging.getLogger(__name__)


class SQLAlchemyCredentialRepository:
    """Per-user Google Calendar credentials."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize repository.

        Args:
            session_factory: Factory for short-lived async sessions
        """
        self._session_factory = session_factory

    async def get(self, user_id: str) -> CredentialRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(GoogleCalendarToken).where(GoogleCalendarToken.user_id == user_id)
            )
            model = result.scalar_one_or_none()
            return self._to_record(model) if model else None

    async def save_refreshed(
        self,
        user_id: str,
        access_token: str,
        expires_at: datetime,
        refresh_token: str | None = None,
        scope: str | None = None,
    ) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(GoogleCalendarToken).where(GoogleCalendarToken.user_id == user_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                logger.warning(f"Refreshed token for user {user_id} has no stored credential row")
                return

            model.access_token = access_token
            model.expires_at = expires_at
            if refresh_token:
                model.refresh_token = refresh_token
            if scope:
                model.scope = scope
            model.updated_at = datetime.now(UTC)
            await session.commit()

    async def upsert(
        self,
        user_id: str,
        access_token: str,
        expires_at: datetime,
        refresh_token: str | None = None,
        scope: str | None = None,
    ) -> CredentialRecord:
        now = datetime.now(UTC)
        update_values = {
            "access_token": access_token,
            "expires_at": expires_at,
            "updated_at": now,
        }
        if refresh_token:
            update_values["refresh_token"] = refresh_token
        if scope:
            update_values["scope"] = scope

        statement = (
            insert(GoogleCalendarToken)
            .values(
                user_id=user_id,
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=expires_at,
                scope=scope,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_update(index_elements=[GoogleCalendarToken.user_id], set_=update_values)
            .returning(GoogleCalendarToken)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)
            model = result.scalar_one()
            record = self._to_record(model)
            await session.commit()
        return record

    @staticmethod
    def _to_record(model: GoogleCalendarToken) -> CredentialRecord:
        expires_at = model.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return CredentialRecord(
            user_id=model.user_id,
            access_token=model.access_token,
            refresh_token=model.refresh_token,
            expires_at=expires_at,
            scope=model.scope,
            updated_at=model.updated_at,
        )
