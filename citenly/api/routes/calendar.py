"""
Google Calendar Endpoints

Per-user calendar access. The caller is identified by the X-User-Id header.
Calendar and credential problems are soft errors (HTTP 200, success=false,
code in NOT_CONNECTED/TOKEN_EXPIRED/REFRESH_FAILED/ACCESS_REVOKED/CALENDAR_ERROR).
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from citenly.api.dependencies import get_calendar_gateway, get_current_user_id, get_store_tokens_use_case
from citenly.api.schemas.calendar import CalendarResponse, CreateEventRequest, StoreTokensRequestSchema
from citenly.domains.calendar.application.use_cases import (
    CalendarEventDraft,
    CalendarGateway,
    StoreCalendarTokensUseCase,
    StoreTokensRequest,
)

router = APIRouter(prefix="/calendar", tags=["calendar"])
logger = logging.getLogger(__name__)


@router.post("/events", response_model=CalendarResponse, response_model_exclude_none=True)
async def create_event(
    body: CreateEventRequest,
    user_id: str = Depends(get_current_user_id),
    gateway: CalendarGateway = Depends(get_calendar_gateway),  # noqa: B008
) -> CalendarResponse:
    """Crear un evento en el calendario principal del usuario."""
    draft = CalendarEventDraft(
        title=body.title,
        start=body.start,
        end=body.end,
        description=body.description,
        attendees=body.attendees,
        timezone=body.timezone,
    )
    result = await gateway.create_event(user_id, draft)
    return CalendarResponse.from_result(result.to_dict())


@router.get("/events", response_model=CalendarResponse, response_model_exclude_none=True)
async def list_events(
    time_min: datetime | None = Query(None),
    time_max: datetime | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    gateway: CalendarGateway = Depends(get_calendar_gateway),  # noqa: B008
) -> CalendarResponse:
    """Listar eventos (por defecto: desde ahora hasta 30 días)."""
    result = await gateway.list_events(user_id, time_min=time_min, time_max=time_max)
    return CalendarResponse.from_result(result.to_dict())


@router.delete("/events/{event_id}", response_model=CalendarResponse, response_model_exclude_none=True)
async def delete_event(
    event_id: str,
    user_id: str = Depends(get_current_user_id),
    gateway: CalendarGateway = Depends(get_calendar_gateway),  # noqa: B008
) -> CalendarResponse:
    """Eliminar un evento; si ya no existe en Google se considera eliminado."""
    result = await gateway.delete_event(user_id, event_id)
    return CalendarResponse.from_result(result.to_dict())


@router.post("/tokens")
async def store_tokens(
    body: StoreTokensRequestSchema,
    user_id: str = Depends(get_current_user_id),
    use_case: StoreCalendarTokensUseCase = Depends(get_store_tokens_use_case),  # noqa: B008
) -> dict:
    """Guardar el grant de OAuth del usuario (conectar o reconectar Google Calendar)."""
    record = await use_case.execute(
        StoreTokensRequest(
            user_id=user_id,
            access_token=body.access_token,
            refresh_token=body.refresh_token,
            expires_in=body.expires_in,
            scope=body.scope,
        )
    )
    return {
        "success": True,
        "expires_at": record.expires_at.isoformat(),
        "has_refresh_token": bool(record.refresh_token),
    }
