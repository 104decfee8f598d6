# Domain Entities
from .appointment import NotificationState, ReminderAppointment
from .reminder_policy import ClinicProfile, ReminderPolicy, parse_preferred_hour

__all__ = [
    "ClinicProfile",
    "NotificationState",
    "ReminderAppointment",
    "ReminderPolicy",
    "parse_preferred_hour",
]
