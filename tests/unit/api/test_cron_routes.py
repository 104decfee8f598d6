"""
Tests for POST /api/v1/cron/process-reminders.
"""

import asyncio
from datetime import UTC, datetime

import pytest

from citenly.api.dependencies import get_scheduler_run
from citenly.domains.reminders.application.dto import DispatchReport, TenantReport

URL = "/api/v1/cron/process-reminders"


class FakeSchedulerRun:
    def __init__(self, report: DispatchReport, delay: float = 0.0):
        self.report = report
        self.delay = delay
        self.calls = 0

    async def execute(self) -> DispatchReport:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.report


@pytest.fixture
def report() -> DispatchReport:
    started = datetime(2026, 3, 10, 18, 0, tzinfo=UTC)
    tenant = TenantReport(clinic_id="c1", clinic_name="Clínica Norte", sent={"24h": 3})
    return DispatchReport(started_at=started, finished_at=started, tenants=[tenant], log=["done"])


@pytest.fixture
def scheduler_run(app, report) -> FakeSchedulerRun:
    run = FakeSchedulerRun(report)
    app.dependency_overrides[get_scheduler_run] = lambda: run
    return run


class TestProcessReminders:
    """Tests for the reminder trigger endpoint."""

    def test_returns_run_report(self, client, scheduler_run) -> None:
        """Should run one tick and return its report."""
        response = client.post(URL)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total_sent"] == 3
        assert data["results"][0]["clinic"] == "Clínica Norte"
        assert data["results"][0]["sent"] == {"24h": 3}
        assert scheduler_run.calls == 1

    def test_failed_run_keeps_200(self, client, scheduler_run) -> None:
        """Should report a failed run in the body, not as an HTTP error."""
        scheduler_run.report = DispatchReport(
            started_at=datetime(2026, 3, 10, 18, 0, tzinfo=UTC),
            success=False,
            error="Failed to load reminder policies: db down",
        )

        response = client.post(URL)

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "error": "Failed to load reminder policies: db down",
            "results": [],
            "log": [],
        }

    def test_secret_required_when_configured(self, client, settings, scheduler_run) -> None:
        """Should reject callers without the configured bearer secret."""
        settings.CRON_SECRET = "s3cret"

        missing = client.post(URL)
        wrong = client.post(URL, headers={"Authorization": "Bearer nope"})
        accepted = client.post(URL, headers={"Authorization": "Bearer s3cret"})

        assert missing.status_code == 401
        assert missing.json()["message"] == "Invalid cron secret"
        assert wrong.status_code == 401
        assert accepted.status_code == 200
        assert scheduler_run.calls == 1

    def test_slow_run_reports_in_progress(self, client, settings, scheduler_run) -> None:
        """Should answer in_progress when the run outlives the response timeout."""
        settings.REMINDER_TRIGGER_RESPONSE_TIMEOUT = 0.05
        scheduler_run.delay = 1.0

        response = client.post(URL)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["in_progress"] is True
        assert data["results"] == []
