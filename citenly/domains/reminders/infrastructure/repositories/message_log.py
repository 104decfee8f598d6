"""
Message Log Implementation

Appends outbound messages to the ``messages`` table.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from citenly.models.db.messages import Message

from ...application.dto.reminder_dtos import MessageLogEntry


class SQLAlchemyMessageLog:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record(self, entry: MessageLogEntry) -> None:
        message = Message(
            clinic_id=uuid.UUID(str(entry.clinic_id)),
            phone_number=entry.phone_number,
            direction=entry.direction,
            content=entry.content,
            ycloud_message_id=entry.provider_message_id,
            ycloud_status=entry.provider_status,
            ai_generated=entry.ai_generated,
        )
        async with self._session_factory() as session:
            session.add(message)
            await session.commit()
