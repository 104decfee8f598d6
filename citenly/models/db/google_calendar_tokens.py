"""
Google Calendar OAuth credentials, one row per end user.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class GoogleCalendarToken(Base, TimestampMixin):
    """Stored access/refresh token pair for a user's calendar integration."""

    __tablename__ = "google_calendar_tokens"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        comment="Owner of the OAuth grant",
    )

    access_token: Mapped[str] = mapped_column(Text, nullable=False, comment="Current bearer token")

    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True, comment="Long-lived refresh token")

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Access token expiry",
    )

    scope: Mapped[str | None] = mapped_column(Text, nullable=True, comment="Granted scopes")

    def __repr__(self) -> str:
        return f"<GoogleCalendarToken(user_id='{self.user_id}', expires_at='{self.expires_at}')>"
