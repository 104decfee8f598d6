# Domain Services
from .dedup_guard import DedupDecision, DedupGuard
from .time_window import TierWindow, TimeWindowCalculator, as_utc

__all__ = [
    "DedupDecision",
    "DedupGuard",
    "TierWindow",
    "TimeWindowCalculator",
    "as_utc",
]
