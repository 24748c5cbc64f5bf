# backend/mentorship/schemas/availability.py
"""
Availability schemas for mentor scheduling.

Recurring model only: a mentor publishes (day_of_week, start_time, end_time)
windows that repeat weekly. ``ResolvedSlot`` is the projection of one such
window onto a concrete calendar date.
"""

import datetime
from typing import Dict, List

from pydantic import ConfigDict, Field

from ..core.constants import MAX_DAY_OF_WEEK, MIN_DAY_OF_WEEK
from .base import StandardizedModel, StrictRequestModel

# Type aliases for clarity
DateType = datetime.date
TimeType = datetime.time


class AvailabilitySlotCreate(StrictRequestModel):
    """Schema for adding a recurring weekly slot.

    Time order is checked by the editor so it can raise InvalidTimeRange.
    """

    mentor_id: str = Field(..., min_length=1, max_length=64)
    day_of_week: int = Field(
        ..., ge=MIN_DAY_OF_WEEK, le=MAX_DAY_OF_WEEK, description="0 = Sunday ... 6 = Saturday"
    )
    start_time: TimeType
    end_time: TimeType


class AvailabilitySlotResponse(StandardizedModel):
    """Response schema for a recurring slot."""

    id: str
    mentor_id: str
    day_of_week: int
    start_time: TimeType
    end_time: TimeType
    is_recurring: bool
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class ResolvedSlot(StandardizedModel):
    """A recurring slot projected onto one calendar date."""

    slot_id: str
    session_date: DateType
    day_of_week: int
    start_time: TimeType
    end_time: TimeType
    is_booked: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def sort_key(self) -> tuple[TimeType, TimeType]:
        return (self.start_time, self.end_time)


WeeklyPattern = Dict[int, List[AvailabilitySlotResponse]]
