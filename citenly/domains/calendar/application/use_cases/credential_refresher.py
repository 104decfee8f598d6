# ============================================================================
# SCOPE: APPLICATION LAYER (Calendar)
# Description: Hands out usable access tokens, refreshing them when they are
#              about to expire or when the provider rejected them.
# ============================================================================
"""Credential Refresher.

Two entry points:

- ``get_usable_token``: proactive. Refreshes only when the stored token is
  within the leeway of its expiry.
- ``force_refresh``: reactive, after a 401. Re-reads the store right before
  calling the provider; if another caller already rotated the token, that
  token is returned and the provider is not called again.

Refreshes for one user are serialized with a per-user lock, so N concurrent
callers that all see an expiring token cause one provider call.

Neither method raises. Failures come back as a TokenResult with a code.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from ...domain.credentials import (
    DEFAULT_REFRESH_LEEWAY,
    CredentialErrorCode,
    CredentialRecord,
    CredentialState,
    TokenResult,
)

if TYPE_CHECKING:
    from ..ports import ICredentialRepository, ITokenProvider

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN_SECONDS = 3600

# Provider errors that mean the refresh token itself is no longer usable
PERMANENT_REFRESH_ERRORS = frozenset({"invalid_grant", "unauthorized_client", "invalid_client"})


class CredentialRefresher:
    """Per-user token lifecycle manager."""

    def __init__(
        self,
        repository: "ICredentialRepository",
        token_provider: "ITokenProvider",
        leeway: timedelta = DEFAULT_REFRESH_LEEWAY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._token_provider = token_provider
        self._leeway = leeway
        self._clock = clock or (lambda: datetime.now(UTC))
        self._locks: dict[str, asyncio.Lock] = {}
        self._states: dict[str, CredentialState] = {}
        self._rejected_refresh_tokens: dict[str, str] = {}

    def state_of(self, user_id: str) -> CredentialState | None:
        """Last known lifecycle state for ``user_id`` (None if never seen)."""
        return self._states.get(user_id)

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def get_usable_token(self, user_id: str) -> TokenResult:
        try:
            record = await self._repository.get(user_id)
            if record is None:
                return TokenResult.failure(CredentialErrorCode.NOT_CONNECTED)
            if self._is_valid(record):
                self._states[user_id] = CredentialState.VALID
                return TokenResult.ok(record.access_token, record.expires_at)

            self._states[user_id] = CredentialState.EXPIRING
            async with self._lock_for(user_id):
                # Another caller may have refreshed while we waited
                record = await self._repository.get(user_id)
                if record is None:
                    return TokenResult.failure(CredentialErrorCode.NOT_CONNECTED)
                if self._is_valid(record):
                    self._states[user_id] = CredentialState.VALID
                    return TokenResult.ok(record.access_token, record.expires_at)
                return await self._refresh(record)
        except Exception as e:
            logger.error(f"Error obtaining calendar token for user {user_id}: {e}", exc_info=True)
            return TokenResult.failure(CredentialErrorCode.STORE_ERROR, str(e))

    async def force_refresh(self, user_id: str, rejected_token: str | None = None) -> TokenResult:
        """Refresh after the provider rejected ``rejected_token``."""
        try:
            async with self._lock_for(user_id):
                record = await self._repository.get(user_id)
                if record is None:
                    return TokenResult.failure(CredentialErrorCode.NOT_CONNECTED)
                if rejected_token and record.access_token != rejected_token and self._is_valid(record):
                    logger.debug(f"Calendar token for user {user_id} already rotated by a concurrent caller")
                    self._states[user_id] = CredentialState.VALID
                    return TokenResult.ok(record.access_token, record.expires_at, refreshed=True)
                return await self._refresh(record)
        except Exception as e:
            logger.error(f"Error refreshing calendar token for user {user_id}: {e}", exc_info=True)
            return TokenResult.failure(CredentialErrorCode.STORE_ERROR, str(e))

    def _is_valid(self, record: CredentialRecord) -> bool:
        return record.state_at(self._clock(), self._leeway) is CredentialState.VALID

    async def _refresh(self, record: CredentialRecord) -> TokenResult:
        user_id = record.user_id

        if not record.refresh_token:
            self._states[user_id] = CredentialState.REFRESH_FAILED
            return TokenResult.failure(CredentialErrorCode.TOKEN_EXPIRED)

        if self._rejected_refresh_tokens.get(user_id) == record.refresh_token:
            self._states[user_id] = CredentialState.REFRESH_FAILED
            return TokenResult.failure(
                CredentialErrorCode.REFRESH_FAILED,
                "Refresh token was rejected; reconnect required",
            )

        self._states[user_id] = CredentialState.REFRESHING
        response = await self._token_provider.refresh_access_token(record.refresh_token)

        if not response.get("success"):
            self._states[user_id] = CredentialState.REFRESH_FAILED
            if response.get("error_code") in PERMANENT_REFRESH_ERRORS:
                self._rejected_refresh_tokens[user_id] = record.refresh_token
            logger.warning(f"Calendar token refresh failed for user {user_id}: {response.get('error')}")
            return TokenResult.failure(CredentialErrorCode.REFRESH_FAILED, response.get("error"))

        data: dict[str, Any] = response.get("data") or {}
        access_token = data["access_token"]
        expires_at = self._clock() + timedelta(seconds=int(data.get("expires_in") or DEFAULT_EXPIRES_IN_SECONDS))

        await self._repository.save_refreshed(
            user_id,
            access_token,
            expires_at,
            refresh_token=data.get("refresh_token") or None,
            scope=data.get("scope"),
        )

        self._states[user_id] = CredentialState.VALID
        self._rejected_refresh_tokens.pop(user_id, None)
        logger.info(f"Calendar token refreshed for user {user_id}")
        return TokenResult.ok(access_token, expires_at, refreshed=True)

    def forget(self, user_id: str) -> None:
        """Drop cached lifecycle state after the user reconnects."""
        self._states.pop(user_id, None)
        self._rejected_refresh_tokens.pop(user_id, None)
