"""Reminders Scheduler Infrastructure."""

from .hourly_reminder_scheduler import HourlyReminderScheduler

__all__ = ["HourlyReminderScheduler"]
