# backend/mentorship/models/booking.py
"""
Session booking model for mentor scheduling.

A booking is a self-contained record: it copies the mentor, date and time
window from the resolved slot at commit time and keeps no foreign key to
``mentor_availability_slots``. Hiding or deleting the recurring slot later
leaves the booking untouched.

The unique constraint on (mentor_id, session_date, start_time, end_time) is
what makes booking atomic: the insert itself is the availability check.
"""

from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from ..core.constants import BOOKING_UNIQUE_CONSTRAINT, MAX_REQUEST_ID_LENGTH
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class SessionBooking(Base):
    """Confirmed reservation of one resolved slot by one mentee."""

    __tablename__ = "session_bookings"

    id = Column(String(26), primary_key=True, default=generate_ulid)

    # Originating mentorship request, passed through untouched
    request_id = Column(String(MAX_REQUEST_ID_LENGTH), nullable=False, index=True)
    mentor_id = Column(String(64), nullable=False)
    mentee_id = Column(String(64), nullable=False, index=True)

    session_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    meeting_link = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_now_utc, server_default=func.now())

    __table_args__ = (
        UniqueConstraint(
            "mentor_id",
            "session_date",
            "start_time",
            "end_time",
            name=BOOKING_UNIQUE_CONSTRAINT,
        ),
        CheckConstraint("start_time < end_time", name="ck_session_bookings_time_order"),
        Index("idx_session_bookings_mentor_date", "mentor_id", "session_date"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        logger.debug(
            "Creating session booking for mentee %s with mentor %s", self.mentee_id, self.mentor_id
        )

    def __repr__(self) -> str:
        return (
            f"<SessionBooking {self.id}: mentee={self.mentee_id}, "
            f"mentor={self.mentor_id}, date={self.session_date}, "
            f"time={self.start_time}-{self.end_time}>"
        )
