"""Calendar API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator


class CreateEventRequest(BaseModel):
    """Evento a crear en el calendario del usuario."""

    title: str = Field(..., min_length=1, max_length=1024)
    description: str | None = None
    start: datetime
    end: datetime
    attendees: list[str] = Field(default_factory=list)
    timezone: str | None = Field(None, description="IANA timezone for the event")

    @model_validator(mode="after")
    def validate_range(self) -> "CreateEventRequest":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class StoreTokensRequestSchema(BaseModel):
    """Grant returned by the OAuth consent flow."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str | None = None
    expires_in: int = Field(3600, gt=0)
    scope: str | None = None


class CalendarEventSchema(BaseModel):
    id: str | None = None
    title: str
    description: str | None = None
    start: str | None = None
    end: str | None = None
    is_all_day: bool = False
    html_link: str | None = None
    source: str = "google"


class CalendarResponse(BaseModel):
    """Soft-error envelope: failures come back with HTTP 200 and success=false."""

    success: bool
    code: str | None = None
    error: str | None = None
    event_id: str | None = None
    html_link: str | None = None
    events: list[CalendarEventSchema] | None = None

    @classmethod
    def from_result(cls, payload: dict[str, Any]) -> "CalendarResponse":
        return cls(**payload)
