"""Tests for the DedupGuard."""

from datetime import UTC, datetime, timedelta

import pytest

from citenly.domains.reminders.domain.services.dedup_guard import DedupGuard
from citenly.domains.reminders.domain.value_objects import ReminderTier

NOW = datetime(2026, 3, 10, 18, 0, tzinfo=UTC)


@pytest.fixture
def guard() -> DedupGuard:
    return DedupGuard()


@pytest.fixture
def appointment(make_appointment):
    return make_appointment(NOW + timedelta(hours=2))


class TestLegacySlot:
    """Tests for appointments without per-tier history."""

    def test_never_sent_is_allowed(self, guard: DedupGuard, appointment) -> None:
        """Should allow every tier when nothing was sent."""
        for tier in ReminderTier:
            assert guard.evaluate(appointment, tier, NOW).reason == "not_sent"

    def test_two_hour_tier_waits_six_hours(self, guard: DedupGuard, appointment) -> None:
        """Should block the 2h tier 5h after a send and re-arm it at 6h."""
        appointment.reminder_sent = True
        appointment.reminder_sent_at = NOW - timedelta(hours=5)
        decision = guard.evaluate(appointment, ReminderTier.TWO_HOURS, NOW)
        assert decision.allowed is False
        assert decision.reason == "within_rearm_window"

        appointment.reminder_sent_at = NOW - timedelta(hours=6)
        decision = guard.evaluate(appointment, ReminderTier.TWO_HOURS, NOW)
        assert decision.allowed is True
        assert decision.reason == "rearmed"

    def test_one_hour_tier_waits_45_minutes(self, guard: DedupGuard, appointment) -> None:
        """Should block the 1h tier under 45 minutes."""
        appointment.reminder_sent = True
        appointment.reminder_sent_at = NOW - timedelta(minutes=44)
        assert guard.is_allowed(appointment, ReminderTier.ONE_HOUR, NOW) is False

        appointment.reminder_sent_at = NOW - timedelta(minutes=45)
        assert guard.is_allowed(appointment, ReminderTier.ONE_HOUR, NOW) is True

    def test_day_before_requires_unset_slot(self, guard: DedupGuard, appointment) -> None:
        """Should block the 24h tier whenever the shared slot is set, however old the send."""
        appointment.reminder_sent = True
        appointment.reminder_sent_at = NOW - timedelta(minutes=5)
        decision = guard.evaluate(appointment, ReminderTier.DAY_BEFORE, NOW)
        assert decision.allowed is False
        assert decision.reason == "already_sent"

        appointment.reminder_sent_at = NOW - timedelta(days=2)
        assert guard.is_allowed(appointment, ReminderTier.DAY_BEFORE, NOW) is False

        appointment.reminder_sent_at = None
        assert guard.is_allowed(appointment, ReminderTier.DAY_BEFORE, NOW) is False

    def test_sent_without_timestamp(self, guard: DedupGuard, appointment) -> None:
        """Should allow a send when the flag is set but the timestamp is missing."""
        appointment.reminder_sent = True
        appointment.reminder_sent_at = None
        assert guard.evaluate(appointment, ReminderTier.TWO_HOURS, NOW).reason == "sent_without_timestamp"


class TestTierHistory:
    """Tests for appointments with per-tier history."""

    def test_other_tier_does_not_block(self, guard: DedupGuard, appointment) -> None:
        """Should let the 2h tier send an hour after the 24h reminder."""
        appointment.mark_reminder_sent(ReminderTier.DAY_BEFORE, NOW - timedelta(hours=1))

        decision = guard.evaluate(appointment, ReminderTier.TWO_HOURS, NOW)
        assert decision.allowed is True
        assert decision.reason == "tier_not_sent"

    def test_same_tier_rearm(self, guard: DedupGuard, appointment) -> None:
        """Should block a repeat of the same tier until it re-arms."""
        appointment.reminder_tiers_sent = {"2h": NOW - timedelta(hours=5)}
        assert guard.evaluate(appointment, ReminderTier.TWO_HOURS, NOW).reason == "already_sent_for_tier"

        appointment.reminder_tiers_sent = {"2h": NOW - timedelta(hours=6)}
        assert guard.evaluate(appointment, ReminderTier.TWO_HOURS, NOW).reason == "tier_rearmed"

    def test_day_before_rearms_after_twelve_hours(self, guard: DedupGuard, appointment) -> None:
        """Should block a second 24h send within 12 hours."""
        appointment.reminder_tiers_sent = {"24h": NOW - timedelta(hours=11)}
        assert guard.is_allowed(appointment, ReminderTier.DAY_BEFORE, NOW) is False

        appointment.reminder_tiers_sent = {"24h": NOW - timedelta(hours=12)}
        assert guard.is_allowed(appointment, ReminderTier.DAY_BEFORE, NOW) is True

    def test_history_takes_precedence_over_shared_slot(self, guard: DedupGuard, appointment) -> None:
        """Should ignore a recent shared-slot send once tier history exists."""
        appointment.reminder_tiers_sent = {"1h": NOW - timedelta(hours=3)}
        appointment.reminder_sent = True
        appointment.reminder_sent_at = NOW - timedelta(minutes=10)

        assert guard.is_allowed(appointment, ReminderTier.TWO_HOURS, NOW) is True
