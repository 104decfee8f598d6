"""
Shared Formatters

Spanish date/time rendering and phone normalization used by outbound messages.
"""

import re
from datetime import date, datetime


class DateFormatter:
    """Date and time formatting utilities."""

    # Spanish day names, indexed by date.weekday()
    DAYS_ES = {
        0: "lunes",
        1: "martes",
        2: "miércoles",
        3: "jueves",
        4: "viernes",
        5: "sábado",
        6: "domingo",
    }

    # Spanish month names
    MONTHS_ES = {
        1: "enero",
        2: "febrero",
        3: "marzo",
        4: "abril",
        5: "mayo",
        6: "junio",
        7: "julio",
        8: "agosto",
        9: "septiembre",
        10: "octubre",
        11: "noviembre",
        12: "diciembre",
    }

    @classmethod
    def format_long_date(cls, d: date | datetime | None) -> str:
        """Format date in Spanish (e.g., 'martes 14 de febrero')."""
        if d is None:
            return ""
        return f"{cls.DAYS_ES[d.weekday()]} {d.day} de {cls.MONTHS_ES[d.month]}"

    @classmethod
    def format_time_12h(cls, dt: datetime | None) -> str:
        """Format time as 12-hour clock with Spanish meridiem (e.g., '02:30 p. m.')."""
        if dt is None:
            return ""
        hour = dt.hour % 12 or 12
        meridiem = "a. m." if dt.hour < 12 else "p. m."
        return f"{hour:02d}:{dt.minute:02d} {meridiem}"


class PhoneFormatter:
    """Phone number normalization for WhatsApp providers."""

    _NON_DIGITS = re.compile(r"\D")

    @classmethod
    def digits_only(cls, phone: str | None) -> str:
        if not phone:
            return ""
        return cls._NON_DIGITS.sub("", phone)

    @classmethod
    def to_e164(cls, phone: str | None) -> str:
        """Normalize to '+<digits>'; empty string when nothing usable remains."""
        digits = cls.digits_only(phone)
        return f"+{digits}" if digits else ""


class TemplateFormatter:
    """Placeholder substitution for tenant-authored message templates."""

    @staticmethod
    def render(template: str, variables: dict[str, str]) -> str:
        """Replace {placeholders}; unknown placeholders are left untouched."""
        try:
            return template.format(**variables)
        except (KeyError, IndexError, ValueError):
            # Fallback: replace only the known keys
            result = template
            for key, value in variables.items():
                result = result.replace(f"{{{key}}}", str(value))
            return result
