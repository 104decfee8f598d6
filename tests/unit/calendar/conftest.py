"""
Fixtures for the calendar credential tests.
"""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from citenly.domains.calendar.application.use_cases import CalendarGateway, CredentialRefresher
from citenly.domains.calendar.domain import CredentialRecord

USER_ID = "user-123"
NOW = datetime(2026, 3, 10, 18, 0, tzinfo=UTC)


class FrozenClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakeCredentialRepository:
    """Credential store keyed by user id."""

    def __init__(self):
        self.records: dict[str, CredentialRecord] = {}
        self.get_calls = 0
        self.saves: list[dict] = []
        self.error: Exception | None = None

    def put(self, record: CredentialRecord) -> None:
        self.records[record.user_id] = record

    async def get(self, user_id):
        self.get_calls += 1
        if self.error:
            raise self.error
        record = self.records.get(user_id)
        return CredentialRecord(**vars(record)) if record else None

    async def save_refreshed(self, user_id, access_token, expires_at, refresh_token=None, scope=None):
        self.saves.append({"user_id": user_id, "access_token": access_token, "refresh_token": refresh_token})
        record = self.records[user_id]
        record.access_token = access_token
        record.expires_at = expires_at
        if refresh_token:
            record.refresh_token = refresh_token
        if scope:
            record.scope = scope

    async def upsert(self, user_id, access_token, expires_at, refresh_token=None, scope=None):
        record = CredentialRecord(
            user_id=user_id,
            access_token=access_token,
            expires_at=expires_at,
            refresh_token=refresh_token,
            scope=scope,
        )
        self.records[user_id] = record
        return record


class FakeTokenProvider:
    """Answers refresh requests from a queue of responses, optionally after a pause."""

    def __init__(self, responses: list[dict] | None = None, delay: float = 0.0):
        self.responses = list(responses or [])
        self.delay = delay
        self.calls: list[str] = []

    async def refresh_access_token(self, refresh_token: str) -> dict:
        self.calls.append(refresh_token)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.responses:
            return self.responses.pop(0)
        return refreshed(f"fresh-token-{len(self.calls)}")


class FakeCalendarClient:
    """Replays scripted provider responses and records the tokens used."""

    def __init__(self, responses: list[dict] | None = None):
        self.responses = list(responses or [])
        self.calls: list[tuple[str, str, object]] = []

    def _next(self, operation: str, token: str, payload) -> dict:
        self.calls.append((operation, token, payload))
        if self.responses:
            return self.responses.pop(0)
        return {"success": True, "data": {}, "status_code": 200}

    async def create_event(self, access_token, event):
        return self._next("create", access_token, event)

    async def list_events(self, access_token, params):
        return self._next("list", access_token, params)

    async def delete_event(self, access_token, event_id):
        return self._next("delete", access_token, event_id)


def refreshed(access_token: str, expires_in: int = 3600, refresh_token: str | None = None) -> dict:
    data = {"access_token": access_token, "expires_in": expires_in}
    if refresh_token:
        data["refresh_token"] = refresh_token
    return {"success": True, "data": data}


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def repository() -> FakeCredentialRepository:
    return FakeCredentialRepository()


@pytest.fixture
def provider() -> FakeTokenProvider:
    return FakeTokenProvider()


@pytest.fixture
def calendar_client() -> FakeCalendarClient:
    return FakeCalendarClient()


@pytest.fixture
def refresher(repository, provider, clock) -> CredentialRefresher:
    return CredentialRefresher(repository, provider, clock=clock)


@pytest.fixture
def gateway(refresher, calendar_client, clock) -> CalendarGateway:
    return CalendarGateway(refresher, calendar_client, clock=clock)


@pytest.fixture
def connect(repository, clock):
    """Store a grant for USER_ID expiring ``expires_in`` from the clock."""

    def _connect(
        expires_in: timedelta = timedelta(hours=1),
        access_token: str = "old-token",
        refresh_token: str | None = "refresh-1",
    ) -> CredentialRecord:
        record = CredentialRecord(
            user_id=USER_ID,
            access_token=access_token,
            expires_at=clock() + expires_in,
            refresh_token=refresh_token,
        )
        repository.put(record)
        return record

    return _connect


@pytest.fixture
def user_id() -> str:
    return USER_ID
