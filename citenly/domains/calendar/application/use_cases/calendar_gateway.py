# ============================================================================
# SCOPE: APPLICATION LAYER (Calendar)
# Description: Calendar operations for a user with one retry after a 401.
# ============================================================================
"""Calendar Gateway.

Every operation follows the same shape:

    token = refresher.get_usable_token(user)
    for attempt in (INITIAL, RETRY):
        response = call(token)
        401 on INITIAL -> force_refresh, loop once more
        401 on RETRY   -> ACCESS_REVOKED
        anything else  -> result

The loop is bounded by the CallAttempt enum, so a provider that keeps
answering 401 costs at most two calls and one refresh.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

from ...domain.credentials import CredentialErrorCode
from .credential_refresher import CredentialRefresher

if TYPE_CHECKING:
    from ..ports import ICalendarClient

logger = logging.getLogger(__name__)

UNTITLED_EVENT = "(Sin título)"
DEFAULT_LIST_DAYS = 30
DEFAULT_MAX_RESULTS = 100


class CallAttempt(str, Enum):
    INITIAL = "initial"
    RETRY = "retry"


@dataclass
class CalendarResult:
    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    code: CredentialErrorCode | None = None
    error: str | None = None
    status_code: int | None = None

    @classmethod
    def failure(
        cls,
        code: CredentialErrorCode,
        error: str | None = None,
        status_code: int | None = None,
    ) -> "CalendarResult":
        return cls(success=False, code=code, error=error or code.display_name, status_code=status_code)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, **self.data}
        return {"success": False, "code": self.code.value if self.code else None, "error": self.error}


@dataclass
class CalendarEventDraft:
    """Event to create, in the caller's terms."""

    title: str
    start: datetime
    end: datetime
    description: str | None = None
    attendees: list[str] = field(default_factory=list)
    timezone: str | None = None

    def to_google_body(self) -> dict[str, Any]:
        start: dict[str, Any] = {"dateTime": self.start.isoformat()}
        end: dict[str, Any] = {"dateTime": self.end.isoformat()}
        if self.timezone:
            start["timeZone"] = self.timezone
            end["timeZone"] = self.timezone

        body: dict[str, Any] = {"summary": self.title, "start": start, "end": end}
        if self.description:
            body["description"] = self.description
        if self.attendees:
            body["attendees"] = [{"email": email} for email in self.attendees]
        return body


def map_google_event(event: dict[str, Any]) -> dict[str, Any]:
    """Flatten a Google event resource into the API's event shape."""
    start = event.get("start") or {}
    end = event.get("end") or {}
    return {
        "id": event.get("id"),
        "title": event.get("summary") or UNTITLED_EVENT,
        "description": event.get("description"),
        "start": start.get("dateTime") or start.get("date"),
        "end": end.get("dateTime") or end.get("date"),
        "is_all_day": "dateTime" not in start and "date" in start,
        "html_link": event.get("htmlLink"),
        "source": "google",
    }


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class CalendarGateway:
    """User-scoped calendar operations."""

    def __init__(
        self,
        refresher: CredentialRefresher,
        calendar_client: "ICalendarClient",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._refresher = refresher
        self._client = calendar_client
        self._clock = clock or (lambda: datetime.now(UTC))

    async def create_event(self, user_id: str, draft: CalendarEventDraft) -> CalendarResult:
        body = draft.to_google_body()
        result = await self._call(user_id, lambda token: self._client.create_event(token, body))
        if result.success:
            event = result.data
            result.data = {"event_id": event.get("id"), "html_link": event.get("htmlLink")}
            logger.info(f"Calendar event {event.get('id')} created for user {user_id}")
        return result

    async def list_events(
        self,
        user_id: str,
        time_min: datetime | None = None,
        time_max: datetime | None = None,
    ) -> CalendarResult:
        time_min = time_min or self._clock()
        time_max = time_max or time_min + timedelta(days=DEFAULT_LIST_DAYS)
        params = {
            "timeMin": _rfc3339(time_min),
            "timeMax": _rfc3339(time_max),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": DEFAULT_MAX_RESULTS,
        }

        result = await self._call(user_id, lambda token: self._client.list_events(token, params))
        if result.success:
            items = result.data.get("items") or []
            result.data = {"events": [map_google_event(item) for item in items]}
        return result

    async def delete_event(self, user_id: str, event_id: str) -> CalendarResult:
        result = await self._call(user_id, lambda token: self._client.delete_event(token, event_id))
        if result.success:
            result.data = {"event_id": event_id}
        return result

    async def _call(
        self,
        user_id: str,
        operation: Callable[[str], Awaitable[dict[str, Any]]],
    ) -> CalendarResult:
        token = await self._refresher.get_usable_token(user_id)
        if not token.success or not token.access_token:
            return CalendarResult.failure(token.code or CredentialErrorCode.REFRESH_FAILED, token.error)

        access_token = token.access_token
        for attempt in CallAttempt:
            response = await operation(access_token)
            status_code = response.get("status_code")

            if response.get("success"):
                data = response.get("data")
                return CalendarResult(
                    success=True,
                    data=data if isinstance(data, dict) else {},
                    status_code=status_code,
                )

            if status_code != 401:
                return CalendarResult.failure(
                    CredentialErrorCode.CALENDAR_ERROR,
                    response.get("error"),
                    status_code=status_code,
                )

            if attempt is CallAttempt.RETRY:
                logger.warning(f"Google Calendar rejected a freshly refreshed token for user {user_id}")
                return CalendarResult.failure(CredentialErrorCode.ACCESS_REVOKED, status_code=401)

            refreshed = await self._refresher.force_refresh(user_id, rejected_token=access_token)
            if not refreshed.success or not refreshed.access_token:
                return CalendarResult.failure(
                    refreshed.code or CredentialErrorCode.REFRESH_FAILED,
                    refreshed.error,
                    status_code=401,
                )
            access_token = refreshed.access_token

        return CalendarResult.failure(CredentialErrorCode.CALENDAR_ERROR)
