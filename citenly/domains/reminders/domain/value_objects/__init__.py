# Domain Value Objects
from .appointment_status import AppointmentStatus
from .reminder_tier import ReminderTier

__all__ = ["AppointmentStatus", "ReminderTier"]
