# Application DTOs
from .reminder_dtos import (
    FOLLOWUP_JOB,
    DispatchOutcome,
    DispatchReport,
    JobResult,
    MessageLogEntry,
    OutcomeStatus,
    SendResult,
    TenantReport,
)

__all__ = [
    "FOLLOWUP_JOB",
    "DispatchOutcome",
    "DispatchReport",
    "JobResult",
    "MessageLogEntry",
    "OutcomeStatus",
    "SendResult",
    "TenantReport",
]
