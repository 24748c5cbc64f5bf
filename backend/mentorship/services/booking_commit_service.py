# backend/mentorship/services/booking_commit_service.py
"""
Booking Commit Service

Converts a mentee's choice of one resolved slot into a durable
SessionBooking with at-most-one-winner semantics.

No availability query precedes the insert. The insert runs in its own
transaction and the store's unique constraint on (mentor_id, session_date,
start_time, end_time) accepts exactly one of any set of concurrent attempts.
The others surface as SlotAlreadyBookedException and leave no rows behind.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import InvalidTimeRangeException, SlotAlreadyBookedException
from ..models.booking import SessionBooking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import SessionBookingCreate
from ..utils.time_helpers import TimeInput
from ._inputs import DateInput, coerce_clock, coerce_date, parse_model
from .base import BaseService

logger = logging.getLogger(__name__)


class BookingCommitService(BaseService):
    """Service layer for committing session bookings."""

    booking_repository: BookingRepository

    def __init__(self, db: Session, booking_repository: Optional[BookingRepository] = None):
        super().__init__(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )

    @BaseService.measure_operation("book")
    def book(
        self,
        request_id: str,
        mentor_id: str,
        mentee_id: str,
        session_date: DateInput,
        start_time: TimeInput,
        end_time: TimeInput,
        meeting_link: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> SessionBooking:
        """
        Atomically book one mentor slot on one date.

        Args:
            request_id: Originating mentorship request (passed through)
            mentor_id: Mentor being booked
            mentee_id: Mentee making the booking
            session_date: Concrete calendar date of the session
            start_time: Start of the resolved slot
            end_time: End of the resolved slot
            meeting_link: Optional video link
            notes: Optional topics for the session

        Returns:
            The committed booking with its assigned id

        Raises:
            InvalidTimeRangeException: If start_time >= end_time (store untouched)
            ValidationException: If any other input is malformed
            SlotAlreadyBookedException: If another booking holds the slot
            StoreUnavailableException: On transient store failure; safe to retry
        """
        start = coerce_clock(start_time, "start_time")
        end = coerce_clock(end_time, "end_time")
        if start >= end:
            raise InvalidTimeRangeException(start, end)

        booking_data = parse_model(
            SessionBookingCreate,
            request_id=request_id,
            mentor_id=mentor_id,
            mentee_id=mentee_id,
            session_date=coerce_date(session_date, "session_date"),
            start_time=start,
            end_time=end,
            meeting_link=meeting_link,
            notes=notes,
        )

        self.log_operation(
            "book",
            mentor_id=booking_data.mentor_id,
            mentee_id=booking_data.mentee_id,
            session_date=booking_data.session_date.isoformat(),
            start_time=start.isoformat(),
            end_time=end.isoformat(),
        )

        try:
            with self.transaction():
                booking = self.booking_repository.insert_booking(**booking_data.model_dump())
        except SlotAlreadyBookedException as exc:
            prometheus_metrics.record_booking_conflict("commit")
            self.logger.warning(
                "booking_conflict",
                extra={
                    "mentor_id": booking_data.mentor_id,
                    "mentee_id": booking_data.mentee_id,
                    **exc.details,
                },
            )
            raise

        self.logger.info(
            "session_booked",
            extra={
                "booking_id": booking.id,
                "request_id": booking.request_id,
                "mentor_id": booking.mentor_id,
                "mentee_id": booking.mentee_id,
            },
        )
        return booking
