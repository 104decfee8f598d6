# ============================================================================
# SCOPE: APPLICATION LAYER TESTS (Calendar)
# Description: Proactive and reactive token refresh, per-user serialization.
# ============================================================================
"""Tests for CredentialRefresher."""

import asyncio
from datetime import timedelta

import pytest

from citenly.domains.calendar.application.use_cases import (
    CredentialRefresher,
    StoreCalendarTokensUseCase,
    StoreTokensRequest,
)
from citenly.domains.calendar.domain import CredentialErrorCode, CredentialState

INVALID_GRANT = {"success": False, "error": "Token has been expired or revoked.", "error_code": "invalid_grant"}
SERVER_ERROR = {"success": False, "error": "HTTP 503", "error_code": None}


class TestGetUsableToken:
    """Tests for the proactive path."""

    @pytest.mark.asyncio
    async def test_refreshes_inside_leeway(self, refresher, provider, repository, connect, clock, user_id) -> None:
        """Should refresh a token that expires in 2 minutes."""
        connect(expires_in=timedelta(minutes=2))

        result = await refresher.get_usable_token(user_id)

        assert result.success is True
        assert result.refreshed is True
        assert result.access_token == "fresh-token-1"
        assert result.expires_at == clock() + timedelta(seconds=3600)
        assert provider.calls == ["refresh-1"]
        assert repository.records[user_id].access_token == "fresh-token-1"
        assert repository.records[user_id].refresh_token == "refresh-1"
        assert refresher.state_of(user_id) is CredentialState.VALID

    @pytest.mark.asyncio
    async def test_keeps_token_outside_leeway(self, refresher, provider, connect, user_id) -> None:
        """Should hand out a token that expires in 10 minutes as is."""
        connect(expires_in=timedelta(minutes=10))

        result = await refresher.get_usable_token(user_id)

        assert result.access_token == "old-token"
        assert result.refreshed is False
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, refresher, provider, connect, user_id) -> None:
        """Should refresh a token that is already past its expiry."""
        connect(expires_in=-timedelta(hours=2))

        result = await refresher.get_usable_token(user_id)

        assert result.access_token == "fresh-token-1"
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_refresh(self, repository, connect, clock, user_id) -> None:
        """Should call the provider once for N callers that all see an expiring token."""
        slow_provider = _SlowProvider()
        refresher = CredentialRefresher(repository, slow_provider, clock=clock)
        connect(expires_in=timedelta(minutes=1))

        results = await asyncio.gather(*(refresher.get_usable_token(user_id) for _ in range(5)))

        assert slow_provider.calls == 1
        assert {result.access_token for result in results} == {"rotated-token"}
        assert all(result.success for result in results)

    @pytest.mark.asyncio
    async def test_rotated_refresh_token_is_stored(self, refresher, provider, repository, connect, user_id) -> None:
        """Should persist a new refresh token when the provider rotates it."""
        provider.responses = [
            {"success": True, "data": {"access_token": "a2", "expires_in": 1800, "refresh_token": "refresh-2"}}
        ]
        connect(expires_in=timedelta(minutes=1))

        await refresher.get_usable_token(user_id)

        assert repository.records[user_id].refresh_token == "refresh-2"
        assert repository.saves[0]["refresh_token"] == "refresh-2"

    @pytest.mark.asyncio
    async def test_not_connected(self, refresher, provider, user_id) -> None:
        """Should report NOT_CONNECTED when the user has no grant."""
        result = await refresher.get_usable_token(user_id)

        assert result.success is False
        assert result.code is CredentialErrorCode.NOT_CONNECTED
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_missing_refresh_token(self, refresher, provider, connect, user_id) -> None:
        """Should report TOKEN_EXPIRED when there is nothing to refresh with."""
        connect(expires_in=timedelta(minutes=1), refresh_token=None)

        result = await refresher.get_usable_token(user_id)

        assert result.code is CredentialErrorCode.TOKEN_EXPIRED
        assert result.error == CredentialErrorCode.TOKEN_EXPIRED.display_name
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_store_failure_does_not_raise(self, refresher, repository, user_id) -> None:
        """Should turn a store exception into a STORE_ERROR result."""
        repository.error = RuntimeError("pool exhausted")

        result = await refresher.get_usable_token(user_id)

        assert result.success is False
        assert result.code is CredentialErrorCode.STORE_ERROR
        assert result.error == "pool exhausted"


class TestRefreshFailures:
    """Tests for provider-side refresh failures."""

    @pytest.mark.asyncio
    async def test_revoked_grant_is_terminal(self, refresher, provider, connect, user_id) -> None:
        """Should stop calling the provider once the refresh token was rejected."""
        provider.responses = [INVALID_GRANT]
        connect(expires_in=timedelta(minutes=1))

        first = await refresher.get_usable_token(user_id)
        second = await refresher.get_usable_token(user_id)

        assert first.code is CredentialErrorCode.REFRESH_FAILED
        assert first.error == "Token has been expired or revoked."
        assert second.code is CredentialErrorCode.REFRESH_FAILED
        assert provider.calls == ["refresh-1"]
        assert refresher.state_of(user_id) is CredentialState.REFRESH_FAILED

    @pytest.mark.asyncio
    async def test_transient_failure_retries_next_call(self, refresher, provider, connect, user_id) -> None:
        """Should try again on the next call after a transient provider error."""
        provider.responses = [SERVER_ERROR]
        connect(expires_in=timedelta(minutes=1))

        first = await refresher.get_usable_token(user_id)
        second = await refresher.get_usable_token(user_id)

        assert first.code is CredentialErrorCode.REFRESH_FAILED
        assert second.success is True
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_reconnect_clears_terminal_state(
        self, refresher, provider, repository, connect, clock, user_id
    ) -> None:
        """Should refresh again after the user stores a new grant."""
        provider.responses = [INVALID_GRANT]
        connect(expires_in=timedelta(minutes=1))
        await refresher.get_usable_token(user_id)

        store_tokens = StoreCalendarTokensUseCase(repository, refresher, clock=clock)
        await store_tokens.execute(
            StoreTokensRequest(user_id=user_id, access_token="new-access", refresh_token="refresh-1", expires_in=60)
        )
        result = await refresher.get_usable_token(user_id)

        assert result.success is True
        assert provider.calls == ["refresh-1", "refresh-1"]


class TestForceRefresh:
    """Tests for the reactive path."""

    @pytest.mark.asyncio
    async def test_refreshes_even_if_not_expiring(self, refresher, provider, connect, user_id) -> None:
        """Should refresh a token the provider rejected although it looks valid."""
        connect(expires_in=timedelta(hours=1))

        result = await refresher.force_refresh(user_id, rejected_token="old-token")

        assert result.access_token == "fresh-token-1"
        assert provider.calls == ["refresh-1"]

    @pytest.mark.asyncio
    async def test_concurrent_rejections_refresh_once(self, repository, connect, clock, user_id) -> None:
        """Should reuse a token another caller already rotated."""
        slow_provider = _SlowProvider()
        refresher = CredentialRefresher(repository, slow_provider, clock=clock)
        connect(expires_in=timedelta(hours=1))

        results = await asyncio.gather(
            *(refresher.force_refresh(user_id, rejected_token="old-token") for _ in range(3))
        )

        assert slow_provider.calls == 1
        assert {result.access_token for result in results} == {"rotated-token"}

    @pytest.mark.asyncio
    async def test_not_connected(self, refresher, user_id) -> None:
        """Should report NOT_CONNECTED."""
        result = await refresher.force_refresh(user_id, rejected_token="whatever")
        assert result.code is CredentialErrorCode.NOT_CONNECTED


class _SlowProvider:
    """Provider that yields to the loop before answering."""

    def __init__(self):
        self.calls = 0

    async def refresh_access_token(self, refresh_token: str) -> dict:
        self.calls += 1
        await asyncio.sleep(0.01)
        return {"success": True, "data": {"access_token": "rotated-token", "expires_in": 3600}}
