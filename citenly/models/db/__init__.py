"""
Database models package - Organized by responsibility
"""

from .appointments import Appointment
from .base import Base, TimestampMixin
from .clinics import ClinicSettings, ReminderSettings
from .google_calendar_tokens import GoogleCalendarToken
from .messages import Message

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Tenancy
    "ClinicSettings",
    "ReminderSettings",
    # Scheduling
    "Appointment",
    "Message",
    # Calendar
    "GoogleCalendarToken",
]
