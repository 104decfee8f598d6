"""
Store Calendar Tokens Use Case

Saves the grant obtained by the OAuth consent flow for a user.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from citenly.core.domain.exceptions import ValidationException

from ...domain.credentials import CredentialRecord
from .credential_refresher import DEFAULT_EXPIRES_IN_SECONDS, CredentialRefresher

if TYPE_CHECKING:
    from ..ports import ICredentialRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreTokensRequest:
    user_id: str
    access_token: str
    refresh_token: str | None = None
    expires_in: int = DEFAULT_EXPIRES_IN_SECONDS
    scope: str | None = None


class StoreCalendarTokensUseCase:
    """Upsert a user's calendar grant (reconnect clears refresh failures)."""

    def __init__(
        self,
        repository: "ICredentialRepository",
        refresher: CredentialRefresher | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._refresher = refresher
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, request: StoreTokensRequest) -> CredentialRecord:
        if not request.user_id:
            raise ValidationException("User id is required", field="user_id")
        if not request.access_token:
            raise ValidationException("Access token is required", field="access_token")
        if request.expires_in <= 0:
            raise ValidationException("expires_in must be positive", field="expires_in")

        expires_at = self._clock() + timedelta(seconds=request.expires_in)
        record = await self._repository.upsert(
            request.user_id,
            request.access_token,
            expires_at,
            refresh_token=request.refresh_token,
            scope=request.scope,
        )

        if self._refresher is not None:
            self._refresher.forget(request.user_id)

        logger.info(f"Calendar tokens stored for user {request.user_id}")
        return record
