"""
Calendar Domain Container.

Single Responsibility: Wire Google Calendar dependencies.
"""

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from citenly.domains.calendar.application.use_cases import (
    CalendarGateway,
    CredentialRefresher,
    StoreCalendarTokensUseCase,
)
from citenly.domains.calendar.infrastructure.repositories import SQLAlchemyCredentialRepository

if TYPE_CHECKING:
    from .base import BaseContainer

logger = logging.getLogger(__name__)


class CalendarContainer:
    """
    Calendar domain container.

    The CredentialRefresher is a singleton: its per-user locks only
    serialize refreshes if every request shares it.
    """

    def __init__(self, base: "BaseContainer"):
        self._base = base
        self._refresher: CredentialRefresher | None = None

    def create_credential_repository(self) -> SQLAlchemyCredentialRepository:
        return SQLAlchemyCredentialRepository(self._base.get_session_factory())

    def get_credential_refresher(self) -> CredentialRefresher:
        if self._refresher is None:
            self._refresher = CredentialRefresher(
                repository=self.create_credential_repository(),
                token_provider=self._base.get_oauth_client(),
                leeway=timedelta(minutes=self._base.settings.TOKEN_REFRESH_LEEWAY_MINUTES),
            )
        return self._refresher

    def create_calendar_gateway(self) -> CalendarGateway:
        return CalendarGateway(
            refresher=self.get_credential_refresher(),
            calendar_client=self._base.get_calendar_client(),
        )

    def create_store_tokens_use_case(self) -> StoreCalendarTokensUseCase:
        return StoreCalendarTokensUseCase(
            repository=self.create_credential_repository(),
            refresher=self.get_credential_refresher(),
        )
