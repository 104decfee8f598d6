"""
Tests for CalendarGateway.
"""

from datetime import UTC, datetime, timedelta

import pytest

from citenly.domains.calendar.application.use_cases import CalendarEventDraft, CalendarResult, map_google_event
from citenly.domains.calendar.domain import CredentialErrorCode

UNAUTHORIZED = {"success": False, "error": "Invalid Credentials", "status_code": 401}
INVALID_GRANT = {"success": False, "error": "Token has been expired or revoked.", "error_code": "invalid_grant"}


class TestUnauthorizedRetry:
    """Tests for the single retry after a 401."""

    @pytest.mark.asyncio
    async def test_retries_once_with_fresh_token(self, gateway, calendar_client, provider, connect, user_id) -> None:
        """Should refresh and repeat the call once after a 401."""
        connect()
        calendar_client.responses = [UNAUTHORIZED, {"success": True, "data": {"items": []}, "status_code": 200}]

        result = await gateway.list_events(user_id)

        assert result.success is True
        assert [call[1] for call in calendar_client.calls] == ["old-token", "fresh-token-1"]
        assert provider.calls == ["refresh-1"]

    @pytest.mark.asyncio
    async def test_second_401_is_access_revoked(self, gateway, calendar_client, provider, connect, user_id) -> None:
        """Should give up after two calls and one refresh."""
        connect()
        calendar_client.responses = [UNAUTHORIZED, UNAUTHORIZED, UNAUTHORIZED]

        result = await gateway.delete_event(user_id, "evt-1")

        assert result.success is False
        assert result.code is CredentialErrorCode.ACCESS_REVOKED
        assert result.status_code == 401
        assert len(calendar_client.calls) == 2
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_refresh_failure_after_401(self, gateway, calendar_client, provider, connect, user_id) -> None:
        """Should surface REFRESH_FAILED when the refresh after a 401 fails."""
        connect()
        provider.responses = [INVALID_GRANT]
        calendar_client.responses = [UNAUTHORIZED]

        result = await gateway.list_events(user_id)

        assert result.code is CredentialErrorCode.REFRESH_FAILED
        assert result.status_code == 401
        assert len(calendar_client.calls) == 1

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self, gateway, calendar_client, provider, connect, user_id) -> None:
        """Should return CALENDAR_ERROR for non-401 failures without refreshing."""
        connect()
        calendar_client.responses = [{"success": False, "error": "Backend Error", "status_code": 500}]

        result = await gateway.list_events(user_id)

        assert result.code is CredentialErrorCode.CALENDAR_ERROR
        assert result.error == "Backend Error"
        assert result.status_code == 500
        assert provider.calls == []


class TestTokenAcquisition:
    """Tests for the token step before the call."""

    @pytest.mark.asyncio
    async def test_not_connected_skips_provider(self, gateway, calendar_client, user_id) -> None:
        """Should not call Google for a user without a grant."""
        result = await gateway.list_events(user_id)

        assert result.to_dict() == {
            "success": False,
            "code": "NOT_CONNECTED",
            "error": "Google Calendar no está conectado",
        }
        assert calendar_client.calls == []

    @pytest.mark.asyncio
    async def test_proactive_refresh_before_call(self, gateway, calendar_client, connect, user_id) -> None:
        """Should use the refreshed token when the stored one is about to expire."""
        connect(expires_in=timedelta(minutes=2))

        await gateway.delete_event(user_id, "evt-1")

        assert calendar_client.calls[0][1] == "fresh-token-1"


class TestOperations:
    """Tests for operation-specific request and response shapes."""

    @pytest.mark.asyncio
    async def test_list_default_range(self, gateway, calendar_client, connect, user_id) -> None:
        """Should query the next 30 days of single events ordered by start time."""
        connect()

        await gateway.list_events(user_id)

        assert calendar_client.calls[0][2] == {
            "timeMin": "2026-03-10T18:00:00Z",
            "timeMax": "2026-04-09T18:00:00Z",
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": 100,
        }

    @pytest.mark.asyncio
    async def test_list_maps_events(self, gateway, calendar_client, connect, user_id) -> None:
        """Should flatten Google events into the API shape."""
        connect()
        calendar_client.responses = [
            {
                "success": True,
                "status_code": 200,
                "data": {
                    "items": [
                        {
                            "id": "evt-1",
                            "summary": "Consulta",
                            "start": {"dateTime": "2026-03-11T10:00:00-06:00"},
                            "end": {"dateTime": "2026-03-11T10:30:00-06:00"},
                            "htmlLink": "https://calendar.google.com/event?eid=1",
                        },
                        {"id": "evt-2", "start": {"date": "2026-03-12"}, "end": {"date": "2026-03-13"}},
                    ]
                },
            }
        ]

        result = await gateway.list_events(user_id)

        first, second = result.data["events"]
        assert first["title"] == "Consulta"
        assert first["start"] == "2026-03-11T10:00:00-06:00"
        assert first["is_all_day"] is False
        assert second["title"] == "(Sin título)"
        assert second["start"] == "2026-03-12"
        assert second["is_all_day"] is True

    @pytest.mark.asyncio
    async def test_create_event(self, gateway, calendar_client, connect, user_id) -> None:
        """Should send the Google event body and return the new id and link."""
        connect()
        calendar_client.responses = [
            {"success": True, "status_code": 200, "data": {"id": "evt-9", "htmlLink": "https://cal/evt-9"}}
        ]
        start = datetime(2026, 3, 11, 16, 0, tzinfo=UTC)
        draft = CalendarEventDraft(
            title="Limpieza dental",
            start=start,
            end=start + timedelta(minutes=30),
            attendees=["ana@example.com"],
            timezone="America/Mexico_City",
        )

        result = await gateway.create_event(user_id, draft)

        body = calendar_client.calls[0][2]
        assert body["summary"] == "Limpieza dental"
        assert body["start"] == {"dateTime": "2026-03-11T16:00:00+00:00", "timeZone": "America/Mexico_City"}
        assert body["attendees"] == [{"email": "ana@example.com"}]
        assert "description" not in body
        assert result.to_dict() == {"success": True, "event_id": "evt-9", "html_link": "https://cal/evt-9"}

    @pytest.mark.asyncio
    async def test_delete_event(self, gateway, calendar_client, connect, user_id) -> None:
        """Should echo the deleted event id."""
        connect()

        result = await gateway.delete_event(user_id, "evt-3")

        assert result.data == {"event_id": "evt-3"}
        assert calendar_client.calls[0] == ("delete", "old-token", "evt-3")


class TestCalendarResult:
    """Tests for CalendarResult and map_google_event."""

    def test_failure_defaults_to_display_name(self) -> None:
        """Should use the Spanish message when no error text is given."""
        result = CalendarResult.failure(CredentialErrorCode.ACCESS_REVOKED)
        assert result.error == "El acceso a Google Calendar fue revocado"

    def test_map_google_event_source(self) -> None:
        """Should tag mapped events with their source."""
        assert map_google_event({"id": "x"})["source"] == "google"
