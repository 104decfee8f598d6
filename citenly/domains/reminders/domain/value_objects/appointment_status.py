"""Appointment Status Value Object.

Defines the states of an appointment as seen by the reminder engine.
"""

from enum import Enum


class AppointmentStatus(str, Enum):
    """Estados de la cita."""

    PENDING = "pending"  # Pendiente de confirmación
    CONFIRMED = "confirmed"  # Confirmada por el paciente
    CANCELLED = "cancelled"  # Cancelada
    COMPLETED = "completed"  # Completada (atendida)
    NO_SHOW = "no_show"  # No se presentó

    def requires_reminder(self) -> bool:
        """¿Requiere recordatorio al paciente?"""
        return self.value in ["pending", "confirmed"]

    def allows_followup(self) -> bool:
        """¿Se puede enviar seguimiento post-visita?"""
        return self is AppointmentStatus.COMPLETED

    @classmethod
    def reminder_statuses(cls) -> tuple["AppointmentStatus", ...]:
        return tuple(status for status in cls if status.requires_reminder())
