# ============================================================================
# SCOPE: APPLICATION LAYER (Reminders)
# Description: Outcome values bubbled from each send up to the run report.
# ============================================================================
"""Reminder DTOs.

Errors never travel as exceptions between layers of a run; each layer
returns one of these values and the next one folds it into its own:

    DispatchOutcome (per appointment)
      -> JobResult (per clinic x job, where job is a tier or "followup")
        -> TenantReport (per clinic)
          -> DispatchReport (per run)
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

FOLLOWUP_JOB = "followup"


class OutcomeStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SendResult:
    """Result of a single call to the messaging provider."""

    success: bool
    message_id: str | None = None
    error: str | None = None
    status_code: int | None = None


@dataclass(frozen=True)
class MessageLogEntry:
    """Outbound message row written after the provider accepts a message."""

    clinic_id: str
    phone_number: str
    content: str
    provider_message_id: str | None = None
    provider_status: str = "sent"
    direction: str = "outbound"
    ai_generated: bool = False


@dataclass(frozen=True)
class DispatchOutcome:
    appointment_id: str
    job: str
    status: OutcomeStatus
    reason: str | None = None
    message_id: str | None = None

    @classmethod
    def sent(cls, appointment_id: str, job: str, message_id: str | None) -> "DispatchOutcome":
        return cls(appointment_id, job, OutcomeStatus.SENT, message_id=message_id)

    @classmethod
    def failed(cls, appointment_id: str, job: str, reason: str) -> "DispatchOutcome":
        return cls(appointment_id, job, OutcomeStatus.FAILED, reason=reason)

    @classmethod
    def skipped(cls, appointment_id: str, job: str, reason: str) -> "DispatchOutcome":
        return cls(appointment_id, job, OutcomeStatus.SKIPPED, reason=reason)


@dataclass
class JobResult:
    """Result of one clinic/tier (or clinic/follow-up) pair."""

    clinic_id: str
    job: str
    evaluated: bool = True
    candidates: int = 0
    outcomes: list[DispatchOutcome] = field(default_factory=list)
    skip_reasons: Counter = field(default_factory=Counter)
    error: str | None = None

    @property
    def sent_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is OutcomeStatus.SENT)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is OutcomeStatus.FAILED)

    def all_skip_reasons(self) -> Counter:
        reasons = Counter(self.skip_reasons)
        for outcome in self.outcomes:
            if outcome.status is OutcomeStatus.SKIPPED and outcome.reason:
                reasons[outcome.reason] += 1
        return reasons

    @classmethod
    def from_error(cls, clinic_id: str, job: str, error: str) -> "JobResult":
        return cls(clinic_id=clinic_id, job=job, error=error)


@dataclass
class TenantReport:
    """Per-clinic summary of a run."""

    clinic_id: str
    clinic_name: str
    sent: dict[str, int] = field(default_factory=dict)
    failed: dict[str, int] = field(default_factory=dict)
    skip_reasons: dict[str, int] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    skipped_reason: str | None = None

    @property
    def total_sent(self) -> int:
        return sum(self.sent.values())

    def add(self, result: JobResult) -> None:
        if result.evaluated and result.error is None:
            self.sent[result.job] = self.sent.get(result.job, 0) + result.sent_count
            if result.failed_count:
                self.failed[result.job] = self.failed.get(result.job, 0) + result.failed_count
        for reason, count in result.all_skip_reasons().items():
            key = f"{result.job}:{reason}"
            self.skip_reasons[key] = self.skip_reasons.get(key, 0) + count
        if result.error:
            self.errors.append(f"{result.job}: {result.error}")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "clinic_id": self.clinic_id,
            "clinic": self.clinic_name,
            "sent": dict(self.sent),
            "failed": dict(self.failed),
            "skipped": dict(self.skip_reasons),
            "errors": list(self.errors),
        }
        if self.skipped_reason:
            data["skipped_reason"] = self.skipped_reason
        return data


@dataclass
class DispatchReport:
    """Structured result of one scheduler run; logged, never persisted."""

    started_at: datetime
    finished_at: datetime | None = None
    tenants: list[TenantReport] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    log: list[str] = field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return sum(tenant.total_sent for tenant in self.tenants)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error, "results": [], "log": list(self.log)}
        return {
            "success": True,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "total_sent": self.total_sent,
            "results": [tenant.to_dict() for tenant in self.tenants],
            "log": list(self.log),
        }
