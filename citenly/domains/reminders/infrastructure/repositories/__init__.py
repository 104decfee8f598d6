"""
Reminders Infrastructure Repositories

SQLAlchemy implementations of the reminder engine ports.
"""

from .appointment_repository import SQLAlchemyAppointmentRepository
from .message_log import SQLAlchemyMessageLog
from .policy_repository import SQLAlchemyReminderPolicyRepository

__all__ = [
    "SQLAlchemyAppointmentRepository",
    "SQLAlchemyMessageLog",
    "SQLAlchemyReminderPolicyRepository",
]
