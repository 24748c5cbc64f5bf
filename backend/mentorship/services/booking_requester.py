# backend/mentorship/services/booking_requester.py
"""
Booking Requester

Mentee-facing flow: pick a date inside the booking window, resolve the
mentor's slots for it, choose one unbooked slot, add optional details and
commit. A SlotAlreadyBookedException from the commit is turned into a
refreshed slot list for the same date; every other failure propagates to
the caller unchanged and is never retried here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import SlotAlreadyBookedException, ValidationException
from ..core.log_context import correlation_scope
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..schemas.availability import ResolvedSlot
from ..schemas.booking import SessionBookingResponse
from ..utils.time_helpers import format_short_date, format_time_12h
from ._inputs import DateInput, coerce_date
from .availability_resolver import AvailabilityResolver
from .base import BaseService
from .booking_commit_service import BookingCommitService

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = (
    "That time was just booked by someone else. Here are the remaining times for this day."
)


class BookingOutcomeStatus(str, Enum):
    CONFIRMED = "confirmed"
    SLOT_TAKEN = "slot_taken"


@dataclass(frozen=True)
class BookingOutcome:
    """What the mentee sees after submitting a booking."""

    status: BookingOutcomeStatus
    message: str
    booking: Optional[SessionBookingResponse] = None
    slots: List[ResolvedSlot] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == BookingOutcomeStatus.CONFIRMED


class BookingRequester(BaseService):
    """Orchestrates date selection, slot resolution and booking commit."""

    def __init__(
        self,
        db: Session,
        resolver: Optional[AvailabilityResolver] = None,
        commit_service: Optional[BookingCommitService] = None,
    ):
        super().__init__(db)
        self.resolver = resolver or AvailabilityResolver(db)
        self.commit_service = commit_service or BookingCommitService(db)

    def available_dates(self, today: Optional[DateInput] = None) -> List[date]:
        """The ``booking_window_days`` consecutive dates a mentee may pick, from today."""
        start = coerce_date(today, "today") if today is not None else date.today()
        return [start + timedelta(days=offset) for offset in range(settings.booking_window_days)]

    def load_slots(self, mentor_id: str, session_date: DateInput) -> List[ResolvedSlot]:
        return self.resolver.resolve(mentor_id, session_date)

    @BaseService.measure_operation("submit")
    def submit(
        self,
        *,
        request_id: str,
        mentor_id: str,
        mentee_id: str,
        slot: ResolvedSlot,
        mentor_name: Optional[str] = None,
        meeting_link: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BookingOutcome:
        """
        Commit the mentee's chosen slot.

        Returns:
            CONFIRMED with the booking and the refreshed slots, or SLOT_TAKEN
            with the refreshed slots when another mentee won the race

        Raises:
            ValidationException: If the chosen slot is already shown as booked
                or the booking details are malformed
            StoreUnavailableException: On transient store failure
        """
        with correlation_scope():
            if slot.is_booked:
                raise ValidationException(
                    "This time slot is already booked",
                    code="SLOT_NOT_SELECTABLE",
                    details={"slot_id": slot.slot_id},
                )

            try:
                booking = self.commit_service.book(
                    request_id=request_id,
                    mentor_id=mentor_id,
                    mentee_id=mentee_id,
                    session_date=slot.session_date,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    meeting_link=meeting_link,
                    notes=notes,
                )
            except SlotAlreadyBookedException:
                prometheus_metrics.record_booking_conflict("requester")
                self.logger.warning(
                    "slot_taken_refreshing",
                    extra={
                        "mentor_id": mentor_id,
                        "session_date": slot.session_date.isoformat(),
                        "slot_id": slot.slot_id,
                    },
                )
                refreshed = self.resolver.resolve(mentor_id, slot.session_date)
                return BookingOutcome(
                    status=BookingOutcomeStatus.SLOT_TAKEN,
                    message=SLOT_TAKEN_MESSAGE,
                    slots=refreshed,
                )

            refreshed = self.resolver.resolve(mentor_id, slot.session_date)
            name = mentor_name or "your mentor"
            message = (
                f"Your session with {name} has been scheduled for "
                f"{format_short_date(slot.session_date)} at {format_time_12h(slot.start_time)}"
            )
            return BookingOutcome(
                status=BookingOutcomeStatus.CONFIRMED,
                message=message,
                booking=SessionBookingResponse.model_validate(booking),
                slots=refreshed,
            )
