"""
Outbound message log.

One row per message accepted by the messaging provider. Used for debugging
and for the dashboard's conversation view; never read by the scheduler.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Message(Base):
    """WhatsApp message exchanged with a patient."""

    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    clinic_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clinic_settings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Clinic that sent or received the message",
    )

    phone_number: Mapped[str] = mapped_column(String(32), nullable=False, comment="Patient phone")

    direction: Mapped[str] = mapped_column(String(10), nullable=False, default="outbound", comment="inbound/outbound")

    content: Mapped[str] = mapped_column(Text, nullable=False, comment="Message text or summary")

    ycloud_message_id: Mapped[str | None] = mapped_column(String(128), nullable=True, comment="Provider id")

    ycloud_status: Mapped[str | None] = mapped_column(String(32), nullable=True, comment="Provider status")

    ai_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        return f"<Message(id='{self.id}', direction='{self.direction}', phone='{self.phone_number}')>"
