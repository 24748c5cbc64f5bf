# backend/mentorship/schemas/booking.py
"""
Session booking schemas.

Bookings are self-contained: they copy the date and time window of the
resolved slot the mentee picked and reference the mentorship request only
through an opaque ``request_id``.
"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from ..core.config import settings
from ..core.constants import MAX_REQUEST_ID_LENGTH
from .base import StandardizedModel, StrictRequestModel


class SessionBookingCreate(StrictRequestModel):
    """Details captured from the mentee before committing a booking."""

    request_id: str = Field(..., min_length=1, max_length=MAX_REQUEST_ID_LENGTH)
    mentor_id: str = Field(..., min_length=1, max_length=64)
    mentee_id: str = Field(..., min_length=1, max_length=64)
    session_date: date
    start_time: time
    end_time: time
    meeting_link: Optional[str] = Field(None, description="e.g. a Zoom or Google Meet link")
    notes: Optional[str] = Field(None, description="Topics the mentee wants to discuss")

    @field_validator("meeting_link", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        """Clean up optional free text; empty input means not provided."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("meeting_link", "notes")
    @classmethod
    def enforce_length(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is None:
            return v
        limit = (
            settings.meeting_link_max_length
            if info.field_name == "meeting_link"
            else settings.notes_max_length
        )
        if len(v) > limit:
            raise ValueError(f"{info.field_name} cannot exceed {limit} characters")
        return v


class SessionBookingResponse(StandardizedModel):
    """Response schema for a committed booking."""

    id: str
    request_id: str
    mentor_id: str
    mentee_id: str
    session_date: date
    start_time: time
    end_time: time
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
