# backend/mentorship/repositories/booking_repository.py
"""
BookingRepository - Session Booking Data Access

Bookings are committed with a single INSERT guarded by the
``uq_session_bookings_mentor_slot`` unique constraint. There is no
read-then-write availability check here: whichever concurrent insert the
store accepts first wins, and every other attempt surfaces as
SlotAlreadyBookedException.
"""

from datetime import date, time
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import BOOKING_UNIQUE_CONSTRAINT
from ..core.exceptions import RepositoryException, SlotAlreadyBookedException
from ..models.booking import SessionBooking
from .base_repository import BaseRepository, constraint_name_of

logger = logging.getLogger(__name__)


def _is_slot_taken_violation(exc: IntegrityError) -> bool:
    name = constraint_name_of(exc)
    if name:
        return name == BOOKING_UNIQUE_CONSTRAINT
    text = str(getattr(exc, "orig", exc)).lower()
    return BOOKING_UNIQUE_CONSTRAINT in text or (
        "unique constraint failed" in text and "session_bookings" in text
    )


class BookingRepository(BaseRepository[SessionBooking]):
    """Repository for committed mentorship sessions."""

    def __init__(self, db: Session):
        super().__init__(db, SessionBooking)
        self.logger = logging.getLogger(__name__)

    def get_booking(self, booking_id: str) -> Optional[SessionBooking]:
        return self.get_by_id(booking_id)

    def list_bookings_for_mentor_on_date(
        self, mentor_id: str, session_date: date
    ) -> List[SessionBooking]:
        """Bookings of one mentor on one calendar date, earliest first."""
        query = (
            self._build_query()
            .filter(
                SessionBooking.mentor_id == mentor_id,
                SessionBooking.session_date == session_date,
            )
            .order_by(SessionBooking.start_time, SessionBooking.end_time)
        )
        return self._execute_query(query, "list bookings")

    def list_bookings_for_mentor_between(
        self, mentor_id: str, start_date: date, end_date: date
    ) -> List[SessionBooking]:
        """Bookings of one mentor with ``start_date <= session_date <= end_date``."""
        query = (
            self._build_query()
            .filter(
                SessionBooking.mentor_id == mentor_id,
                SessionBooking.session_date >= start_date,
                SessionBooking.session_date <= end_date,
            )
            .order_by(
                SessionBooking.session_date,
                SessionBooking.start_time,
                SessionBooking.end_time,
            )
        )
        return self._execute_query(query, "list bookings")

    def insert_booking(
        self,
        request_id: str,
        mentor_id: str,
        mentee_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        meeting_link: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> SessionBooking:
        """
        Insert a booking; the store's unique constraint decides availability.

        Raises:
            SlotAlreadyBookedException: If the (mentor, date, window) is taken
            RepositoryException: If any other constraint rejects the row
        """
        booking = SessionBooking(
            request_id=request_id,
            mentor_id=mentor_id,
            mentee_id=mentee_id,
            session_date=session_date,
            start_time=start_time,
            end_time=end_time,
            meeting_link=meeting_link,
            notes=notes,
        )
        try:
            return self.add(booking)
        except IntegrityError as e:
            if _is_slot_taken_violation(e):
                raise SlotAlreadyBookedException(
                    details={
                        "mentor_id": mentor_id,
                        "session_date": session_date.isoformat(),
                        "start_time": start_time.isoformat(),
                        "end_time": end_time.isoformat(),
                    }
                ) from e
            self.logger.error(f"Integrity error creating booking: {str(e)}")
            raise RepositoryException(f"Integrity constraint violated: {str(e)}") from e
