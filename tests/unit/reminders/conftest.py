"""
Fixtures for the reminder engine tests.

In-memory stand-ins for the appointment store, the messaging provider, the
message log and the policy repository. The appointment store copies rows in
and out so that claims behave like the version compare-and-set of the real
repository.
"""

import copy
import uuid
from datetime import datetime

import pytest

from citenly.domains.reminders.application.dto import MessageLogEntry, SendResult
from citenly.domains.reminders.domain.entities import (
    ClinicProfile,
    NotificationState,
    ReminderAppointment,
    ReminderPolicy,
)
from citenly.domains.reminders.domain.value_objects import AppointmentStatus, ReminderTier

CLINIC_TZ = "America/Mexico_City"


class InMemoryAppointmentStore:
    """Appointment store with version compare-and-set semantics."""

    def __init__(self, appointments: list[ReminderAppointment] | None = None):
        self.rows: dict[str, ReminderAppointment] = {}
        self.find_calls: list[tuple[str, datetime, datetime]] = []
        self.fail_find: Exception | None = None
        for appointment in appointments or []:
            self.add(appointment)

    def add(self, appointment: ReminderAppointment) -> None:
        self.rows[appointment.id] = copy.deepcopy(appointment)

    def get(self, appointment_id: str) -> ReminderAppointment:
        return self.rows[appointment_id]

    async def find_reminder_candidates(self, clinic_id, range_start, range_end):
        self.find_calls.append((clinic_id, range_start, range_end))
        if self.fail_find:
            raise self.fail_find
        return [
            copy.deepcopy(row)
            for row in self._in_range(clinic_id, range_start, range_end)
            if row.status.requires_reminder()
        ]

    async def find_followup_candidates(self, clinic_id, range_start, range_end):
        self.find_calls.append((clinic_id, range_start, range_end))
        if self.fail_find:
            raise self.fail_find
        return [
            copy.deepcopy(row)
            for row in self._in_range(clinic_id, range_start, range_end)
            if row.status is AppointmentStatus.COMPLETED and row.followup_sent_at is None
        ]

    async def find_by_id(self, appointment_id):
        row = self.rows.get(appointment_id)
        return copy.deepcopy(row) if row else None

    async def claim_reminder(self, appointment, tier, sent_at) -> bool:
        stored = self.rows[appointment.id]
        if stored.version != appointment.version:
            return False
        stored.mark_reminder_sent(tier, sent_at)
        appointment.mark_reminder_sent(tier, sent_at)
        return True

    async def claim_followup(self, appointment, sent_at) -> bool:
        stored = self.rows[appointment.id]
        if stored.version != appointment.version:
            return False
        stored.mark_followup_sent(sent_at)
        appointment.mark_followup_sent(sent_at)
        return True

    async def release(self, appointment, previous: NotificationState) -> bool:
        stored = self.rows[appointment.id]
        if stored.version != appointment.version:
            return False
        stored.restore(previous)
        appointment.restore(previous)
        return True

    def _in_range(self, clinic_id, range_start, range_end):
        rows = [
            row
            for row in self.rows.values()
            if row.clinic_id == clinic_id and range_start <= row.scheduled_at < range_end
        ]
        return sorted(rows, key=lambda row: row.scheduled_at)


class FakeMessenger:
    """Records every send; answers with ``result`` (or raises ``error``)."""

    def __init__(self, result: SendResult | None = None, error: Exception | None = None):
        self.result = result or SendResult(success=True, message_id="wamid.test")
        self.error = error
        self.templates: list[dict] = []
        self.texts: list[dict] = []

    @property
    def total_calls(self) -> int:
        return len(self.templates) + len(self.texts)

    async def send_template(self, api_key, sender, recipient, template_name, language_code, body_parameters):
        self.templates.append(
            {
                "api_key": api_key,
                "sender": sender,
                "recipient": recipient,
                "template_name": template_name,
                "language_code": language_code,
                "body_parameters": body_parameters,
            }
        )
        if self.error:
            raise self.error
        return self.result

    async def send_text(self, api_key, sender, recipient, body):
        self.texts.append({"api_key": api_key, "sender": sender, "recipient": recipient, "body": body})
        if self.error:
            raise self.error
        return self.result


class FakeMessageLog:
    def __init__(self, error: Exception | None = None):
        self.entries: list[MessageLogEntry] = []
        self.error = error

    async def record(self, entry: MessageLogEntry) -> None:
        if self.error:
            raise self.error
        self.entries.append(entry)


class FakePolicyRepository:
    def __init__(self, policies: list[ReminderPolicy] | None = None, error: Exception | None = None):
        self.policies = policies or []
        self.error = error

    async def list_policies(self) -> list[ReminderPolicy]:
        if self.error:
            raise self.error
        return list(self.policies)


@pytest.fixture
def clinic_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def make_clinic(clinic_id):
    def _make(**overrides) -> ClinicProfile:
        values = {
            "id": clinic_id,
            "name": "Clínica Dental Sonrisa",
            "timezone": CLINIC_TZ,
            "ycloud_api_key": "yc-test-key",
            "ycloud_phone_number": "+5215500000000",
        }
        values.update(overrides)
        return ClinicProfile(**values)

    return _make


@pytest.fixture
def make_policy(make_clinic):
    def _make(tiers=(ReminderTier.DAY_BEFORE,), clinic: ClinicProfile | None = None, **overrides) -> ReminderPolicy:
        values = {
            "clinic": clinic or make_clinic(),
            "enabled_tiers": frozenset(tiers),
            "preferred_hour": "09:00",
        }
        values.update(overrides)
        return ReminderPolicy(**values)

    return _make


@pytest.fixture
def make_appointment(clinic_id):
    def _make(scheduled_at: datetime, **overrides) -> ReminderAppointment:
        values = {
            "id": str(uuid.uuid4()),
            "clinic_id": clinic_id,
            "patient_name": "Ana López",
            "patient_phone": "+52 1 55 1234 5678",
            "service_name": "Limpieza dental",
            "scheduled_at": scheduled_at,
            "status": AppointmentStatus.CONFIRMED,
        }
        values.update(overrides)
        return ReminderAppointment(**values)

    return _make


@pytest.fixture
def store() -> InMemoryAppointmentStore:
    return InMemoryAppointmentStore()


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture
def message_log() -> FakeMessageLog:
    return FakeMessageLog()


@pytest.fixture
def policy_repository() -> FakePolicyRepository:
    return FakePolicyRepository()
