# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: Use cases of the reminder engine.
# ============================================================================
"""Reminders Use Cases."""

from .dispatch_notification import NotificationDispatcher
from .scan_reminders import ReminderScanner, ScanResult
from .scheduler_run import SchedulerRun

__all__ = [
    "NotificationDispatcher",
    "ReminderScanner",
    "ScanResult",
    "SchedulerRun",
]
