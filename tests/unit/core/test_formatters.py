"""
Tests for shared formatters.
"""

from datetime import date, datetime

import pytest

from citenly.core.shared.formatters import DateFormatter, PhoneFormatter, TemplateFormatter


class TestDateFormatter:
    """Tests for Spanish date/time formatting."""

    def test_long_date(self) -> None:
        """Should render weekday, day and month in Spanish."""
        assert DateFormatter.format_long_date(date(2026, 2, 14)) == "sábado 14 de febrero"

    @pytest.mark.parametrize(
        ("hour", "minute", "expected"),
        [(0, 5, "12:05 a. m."), (9, 30, "09:30 a. m."), (12, 0, "12:00 p. m."), (14, 45, "02:45 p. m.")],
    )
    def test_time_12h(self, hour, minute, expected) -> None:
        """Should use a 12-hour clock with Spanish meridiem."""
        assert DateFormatter.format_time_12h(datetime(2026, 3, 10, hour, minute)) == expected

    def test_none_renders_empty(self) -> None:
        """Should render missing values as empty strings."""
        assert DateFormatter.format_long_date(None) == ""
        assert DateFormatter.format_time_12h(None) == ""


class TestPhoneFormatter:
    """Tests for phone normalization."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("+52 1 (55) 1234-5678", "+5215512345678"), ("5215512345678", "+5215512345678"), ("", ""), (None, "")],
    )
    def test_to_e164(self, raw, expected) -> None:
        """Should keep only digits behind a plus sign."""
        assert PhoneFormatter.to_e164(raw) == expected


class TestTemplateFormatter:
    """Tests for tenant template rendering."""

    def test_known_placeholders(self) -> None:
        """Should substitute every known placeholder."""
        assert TemplateFormatter.render("{nombre} - {hora}", {"nombre": "Ana", "hora": "10:00"}) == "Ana - 10:00"

    def test_unbalanced_braces(self) -> None:
        """Should still substitute known keys in a malformed template."""
        assert TemplateFormatter.render("Hola {nombre} {", {"nombre": "Ana"}) == "Hola Ana {"
