"""Tests for StoreCalendarTokensUseCase."""

from datetime import timedelta

import pytest

from citenly.core.domain.exceptions import ValidationException
from citenly.domains.calendar.application.use_cases import StoreCalendarTokensUseCase, StoreTokensRequest
from citenly.domains.calendar.domain import CredentialErrorCode


class TestStoreCalendarTokens:
    """Tests for storing a user's calendar grant."""

    @pytest.mark.asyncio
    async def test_upserts_grant(self, repository, clock, user_id) -> None:
        """Should store the grant with an absolute expiry."""
        use_case = StoreCalendarTokensUseCase(repository, clock=clock)

        record = await use_case.execute(
            StoreTokensRequest(user_id=user_id, access_token="a1", refresh_token="r1", expires_in=1200)
        )

        assert record.expires_at == clock() + timedelta(seconds=1200)
        assert repository.records[user_id].refresh_token == "r1"

    @pytest.mark.asyncio
    async def test_replaces_existing_grant(self, repository, connect, clock, user_id) -> None:
        """Should overwrite an earlier grant for the same user."""
        connect()
        use_case = StoreCalendarTokensUseCase(repository, clock=clock)

        await use_case.execute(StoreTokensRequest(user_id=user_id, access_token="a2"))

        assert repository.records[user_id].access_token == "a2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("request_kwargs", "field"),
        [
            ({"user_id": "", "access_token": "a1"}, "user_id"),
            ({"user_id": "u1", "access_token": ""}, "access_token"),
            ({"user_id": "u1", "access_token": "a1", "expires_in": 0}, "expires_in"),
        ],
    )
    async def test_rejects_invalid_request(self, repository, request_kwargs, field) -> None:
        """Should raise ValidationException for incomplete grants."""
        use_case = StoreCalendarTokensUseCase(repository)

        with pytest.raises(ValidationException) as exc_info:
            await use_case.execute(StoreTokensRequest(**request_kwargs))

        assert exc_info.value.field == field
        assert repository.records == {}

    @pytest.mark.asyncio
    async def test_refresh_failure_is_forgotten(self, repository, refresher, provider, connect, clock, user_id) -> None:
        """Should let a user recover from REFRESH_FAILED by reconnecting."""
        provider.responses = [{"success": False, "error": "revoked", "error_code": "invalid_grant"}]
        connect(expires_in=timedelta(minutes=1))
        failed = await refresher.get_usable_token(user_id)
        assert failed.code is CredentialErrorCode.REFRESH_FAILED

        await StoreCalendarTokensUseCase(repository, refresher, clock=clock).execute(
            StoreTokensRequest(user_id=user_id, access_token="a-new", refresh_token="r-new")
        )

        assert refresher.state_of(user_id) is None
        assert (await refresher.get_usable_token(user_id)).access_token == "a-new"
