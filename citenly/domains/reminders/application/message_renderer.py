"""Reminder message rendering.

Builds the Spanish message variables for an appointment in its clinic's local
time, and renders either the clinic's own template or the provider template
parameters.
"""

from dataclasses import dataclass
from datetime import tzinfo

from citenly.core.shared.formatters import DateFormatter, TemplateFormatter

from ..domain.entities.appointment import ReminderAppointment
from ..domain.entities.reminder_policy import ReminderPolicy
from ..domain.services.time_window import as_utc

DEFAULT_SERVICE_NAME = "consulta"

DEFAULT_REMINDER_TEMPLATE = (
    "¡Hola {nombre}! Te recordamos tu cita de {servicio} el {fecha} a las {hora} en {clinica}. "
    "¿Confirmas tu asistencia?"
)
DEFAULT_FOLLOWUP_TEMPLATE = "¡Hola {nombre}! Hace {dias} días que nos visitaste. ¿Te gustaría agendar otra cita?"


@dataclass(frozen=True)
class RenderedMessage:
    text: str
    template_parameters: list[str]


class MessageRenderer:
    def variables(
        self,
        appointment: ReminderAppointment,
        policy: ReminderPolicy,
        tz: tzinfo,
    ) -> dict[str, str]:
        local = as_utc(appointment.scheduled_at).astimezone(tz) if appointment.scheduled_at else None
        return {
            "nombre": appointment.patient_name,
            "servicio": appointment.service_name or DEFAULT_SERVICE_NAME,
            "fecha": DateFormatter.format_long_date(local),
            "hora": DateFormatter.format_time_12h(local),
            "clinica": policy.clinic.name,
            "dias": str(policy.followup_days_after),
        }

    def render_reminder(
        self,
        appointment: ReminderAppointment,
        policy: ReminderPolicy,
        tz: tzinfo,
    ) -> RenderedMessage:
        variables = self.variables(appointment, policy, tz)
        text = self._render_text(policy.reminder_message or DEFAULT_REMINDER_TEMPLATE, variables)
        return RenderedMessage(
            text=text,
            template_parameters=[
                variables["nombre"],
                variables["servicio"],
                variables["fecha"],
                variables["hora"],
                variables["clinica"],
            ],
        )

    def render_followup(
        self,
        appointment: ReminderAppointment,
        policy: ReminderPolicy,
        tz: tzinfo,
    ) -> RenderedMessage:
        variables = self.variables(appointment, policy, tz)
        text = self._render_text(policy.followup_message or DEFAULT_FOLLOWUP_TEMPLATE, variables)
        return RenderedMessage(
            text=text,
            template_parameters=[variables["nombre"], variables["dias"], variables["clinica"]],
        )

    @staticmethod
    def _render_text(template: str, variables: dict[str, str]) -> str:
        # "{hora}." must not render as "p. m.."
        for key, value in variables.items():
            if value.endswith("."):
                template = template.replace(f"{{{key}}}.", f"{{{key}}}")
        return TemplateFormatter.render(template, variables)
