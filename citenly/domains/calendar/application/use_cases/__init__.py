"""Calendar Use Cases."""

from .calendar_gateway import (
    UNTITLED_EVENT,
    CalendarEventDraft,
    CalendarGateway,
    CalendarResult,
    CallAttempt,
    map_google_event,
)
from .credential_refresher import CredentialRefresher
from .store_tokens import StoreCalendarTokensUseCase, StoreTokensRequest

__all__ = [
    "UNTITLED_EVENT",
    "CalendarEventDraft",
    "CalendarGateway",
    "CalendarResult",
    "CallAttempt",
    "CredentialRefresher",
    "StoreCalendarTokensUseCase",
    "StoreTokensRequest",
    "map_google_event",
]
