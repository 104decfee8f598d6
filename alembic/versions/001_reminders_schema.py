"""Reminders and calendar schema.

Revision ID: 001_reminders_schema
Revises: None
Create Date: 2026-10-19

Tables created:
- clinic_settings: tenants (timezone, YCloud credentials)
- reminder_settings: per-clinic reminder policy
- appointments: appointments plus notification state (tier map, version)
- messages: outbound message log
- google_calendar_tokens: per-user Google OAuth grants
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_reminders_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def upgrade() -> None:
    """Create reminder engine and calendar tables."""
    op.create_table(
        "clinic_settings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("clinic_name", sa.String(255), nullable=False, comment="Clinic display name"),
        sa.Column(
            "timezone",
            sa.String(64),
            nullable=True,
            server_default="America/Mexico_City",
            comment="Clinic timezone (IANA format)",
        ),
        sa.Column("ycloud_api_key", sa.String(255), nullable=True, comment="YCloud API key"),
        sa.Column("ycloud_phone_number", sa.String(32), nullable=True, comment="WhatsApp sender number"),
        *_timestamps(),
    )

    op.create_table(
        "reminder_settings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "clinic_id",
            UUID(as_uuid=True),
            sa.ForeignKey("clinic_settings.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("reminder_24h_before", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("reminder_2h_before", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_1h_before", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("request_confirmation", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("confirmation_days_before", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("preferred_hour", sa.String(5), nullable=False, server_default="09:00"),
        sa.Column("reminder_message", sa.Text(), nullable=True),
        sa.Column("followup_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("followup_days_after", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("followup_message", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_reminder_settings_clinic_id", "reminder_settings", ["clinic_id"])

    op.create_table(
        "appointments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "clinic_id",
            UUID(as_uuid=True),
            sa.ForeignKey("clinic_settings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("patient_name", sa.String(255), nullable=False),
        sa.Column("patient_phone", sa.String(32), nullable=True),
        sa.Column("service_name", sa.String(255), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("reminder_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder_tiers_sent", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("followup_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
    )
    op.create_index(
        "idx_appointments_clinic_status_time",
        "appointments",
        ["clinic_id", "status", "scheduled_at"],
    )

    op.create_table(
        "messages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "clinic_id",
            UUID(as_uuid=True),
            sa.ForeignKey("clinic_settings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("direction", sa.String(10), nullable=False, server_default="outbound"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("ycloud_message_id", sa.String(128), nullable=True),
        sa.Column("ycloud_status", sa.String(32), nullable=True),
        sa.Column("ai_generated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_messages_clinic_id", "messages", ["clinic_id"])

    op.create_table(
        "google_calendar_tokens",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.String(64), nullable=False, unique=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("scope", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_google_calendar_tokens_user_id", "google_calendar_tokens", ["user_id"])


def downgrade() -> None:
    """Drop reminder engine and calendar tables."""
    op.drop_index("ix_google_calendar_tokens_user_id", table_name="google_calendar_tokens")
    op.drop_table("google_calendar_tokens")
    op.drop_index("ix_messages_clinic_id", table_name="messages")
    op.drop_table("messages")
    op.drop_index("idx_appointments_clinic_status_time", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_reminder_settings_clinic_id", table_name="reminder_settings")
    op.drop_table("reminder_settings")
    op.drop_table("clinic_settings")
