# ============================================================================
# SCOPE: MULTI-TENANT
# Description: Clinic (tenant) settings and per-clinic reminder policy.
# Tenant-Aware: Yes - reminder_settings keyed by clinic_id.
# ============================================================================
"""
Clinic settings and reminder policy models.

ClinicSettings holds the tenant identity, timezone and YCloud credentials.
ReminderSettings holds which reminder tiers are enabled, the preferred send
hour and the message templates. The scheduler only reads these rows.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin


class ClinicSettings(Base, TimestampMixin):
    """
    Tenant settings.

    Attributes:
        id: Clinic identifier.
        clinic_name: Display name used in messages.
        timezone: IANA timezone; appointments are matched in this local time.
        ycloud_api_key: Per-clinic YCloud API key (missing = reminders skipped).
        ycloud_phone_number: Sender WhatsApp number.
    """

    __tablename__ = "clinic_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique clinic identifier",
    )

    clinic_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Clinic display name",
    )

    timezone: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        default="America/Mexico_City",
        comment="Clinic timezone (IANA format)",
    )

    ycloud_api_key: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="YCloud API key for WhatsApp messaging",
    )

    ycloud_phone_number: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        comment="WhatsApp sender number registered in YCloud",
    )

    reminder_settings: Mapped["ReminderSettings | None"] = relationship(
        "ReminderSettings",
        back_populates="clinic",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<ClinicSettings(id='{self.id}', name='{self.clinic_name}')>"


class ReminderSettings(Base, TimestampMixin):
    """
    Reminder policy for one clinic.

    Attributes:
        reminder_24h_before / reminder_2h_before / reminder_1h_before: Enabled tiers.
        preferred_hour: "HH:MM" local time for the 24h tier and follow-ups.
        reminder_message: Template with {nombre}, {servicio}, {fecha}, {hora}, {clinica}.
        followup_enabled / followup_days_after / followup_message: Post-visit follow-up.
    """

    __tablename__ = "reminder_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique policy identifier",
    )

    clinic_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clinic_settings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
        comment="Clinic this policy belongs to",
    )

    reminder_24h_before: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Send reminder the day before",
    )

    reminder_2h_before: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Send reminder two hours before",
    )

    reminder_1h_before: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Send reminder one hour before",
    )

    request_confirmation: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Ask the patient to confirm attendance",
    )

    confirmation_days_before: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Days before the appointment to request confirmation",
    )

    preferred_hour: Mapped[str] = mapped_column(
        String(5),
        nullable=False,
        default="09:00",
        comment="Local send time (HH:MM) for the day-before reminder",
    )

    reminder_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Reminder template with placeholders (NULL = built-in default)",
    )

    followup_enabled: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Send a follow-up after completed visits",
    )

    followup_days_after: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=7,
        comment="Days after the visit to send the follow-up",
    )

    followup_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Follow-up template with placeholders (NULL = built-in default)",
    )

    clinic: Mapped["ClinicSettings"] = relationship(
        "ClinicSettings",
        back_populates="reminder_settings",
    )

    def __repr__(self) -> str:
        return f"<ReminderSettings(clinic_id='{self.clinic_id}', preferred_hour='{self.preferred_hour}')>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": str(self.id),
            "clinic_id": str(self.clinic_id),
            "reminder_24h_before": self.reminder_24h_before,
            "reminder_2h_before": self.reminder_2h_before,
            "reminder_1h_before": self.reminder_1h_before,
            "request_confirmation": self.request_confirmation,
            "confirmation_days_before": self.confirmation_days_before,
            "preferred_hour": self.preferred_hour,
            "reminder_message": self.reminder_message,
            "followup_enabled": self.followup_enabled,
            "followup_days_after": self.followup_days_after,
            "followup_message": self.followup_message,
        }
