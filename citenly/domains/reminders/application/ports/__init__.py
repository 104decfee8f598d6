# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: Ports (interfaces) for the store and the messaging provider.
# ============================================================================
"""Reminders Application Ports.

- IAppointmentRepository: candidate queries and conditional state updates
- IReminderPolicyRepository: clinic policies
- IMessageLog: outbound message log
- INotificationService: WhatsApp delivery
"""

from .appointment_port import IAppointmentRepository
from .message_log_port import IMessageLog
from .notification_port import INotificationService
from .policy_port import IReminderPolicyRepository

__all__ = [
    "IAppointmentRepository",
    "IMessageLog",
    "INotificationService",
    "IReminderPolicyRepository",
]
