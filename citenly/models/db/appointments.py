# ============================================================================
# SCOPE: MULTI-TENANT
# Description: Appointments and the notification state the reminder engine
#              reads and writes.
# Tenant-Aware: Yes - via clinic_id FK.
# ============================================================================
"""
Appointment model.

Only the fields the reminder engine needs are mapped. Notification state:
- reminder_sent / reminder_sent_at: legacy slot shared by every tier.
- reminder_tiers_sent: {"24h": iso, "2h": iso, "1h": iso}, last send per tier.
- followup_sent_at: post-visit follow-up marker.
- version: optimistic concurrency counter used for conditional claims.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class Appointment(Base, TimestampMixin):
    """Scheduled appointment for a clinic patient."""

    __tablename__ = "appointments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique appointment identifier",
    )

    clinic_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clinic_settings.id", ondelete="CASCADE"),
        nullable=False,
        comment="Clinic owning the appointment",
    )

    patient_name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Patient full name")

    patient_phone: Mapped[str | None] = mapped_column(String(32), nullable=True, comment="Patient WhatsApp number")

    service_name: Mapped[str | None] = mapped_column(String(255), nullable=True, comment="Booked service")

    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Absolute appointment start",
    )

    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=30, comment="Duration")

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
        comment="pending, confirmed, cancelled, completed, no_show",
    )

    reminder_sent: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Legacy dedup flag shared by every tier",
    )

    reminder_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Legacy dedup timestamp shared by every tier",
    )

    reminder_tiers_sent: Mapped[dict[str, str]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        server_default=text("'{}'::jsonb"),
        comment="Last send per tier {tier: ISO timestamp}",
    )

    followup_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the post-visit follow-up was sent",
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        server_default=text("1"),
        comment="Optimistic concurrency counter",
    )

    __table_args__ = (Index("idx_appointments_clinic_status_time", "clinic_id", "status", "scheduled_at"),)

    def __repr__(self) -> str:
        return f"<Appointment(id='{self.id}', scheduled_at='{self.scheduled_at}', status='{self.status}')>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": str(self.id),
            "clinic_id": str(self.clinic_id),
            "patient_name": self.patient_name,
            "patient_phone": self.patient_phone,
            "service_name": self.service_name,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
            "duration_minutes": self.duration_minutes,
            "status": self.status,
            "reminder_sent": self.reminder_sent,
            "reminder_sent_at": self.reminder_sent_at.isoformat() if self.reminder_sent_at else None,
            "reminder_tiers_sent": self.reminder_tiers_sent,
            "followup_sent_at": self.followup_sent_at.isoformat() if self.followup_sent_at else None,
            "version": self.version,
        }
