# backend/mentorship/models/availability.py
"""
Availability models for mentor scheduling.

This module defines the recurring weekly availability pattern a mentor
publishes. Each row is one (day_of_week, start_time, end_time) window that
repeats every week and can be hidden without being deleted.

Classes:
    AvailabilitySlot: One recurring weekly window owned by a mentor
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Time,
    UniqueConstraint,
)
from sqlalchemy.sql import func, true

from ..core.constants import SLOT_UNIQUE_CONSTRAINT
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class AvailabilitySlot(Base):
    """
    Recurring weekly availability window.

    The time window is immutable once created: changing the time of a slot
    means deleting it and creating a new one. Only ``is_available`` is ever
    updated in place.
    """

    __tablename__ = "mentor_availability_slots"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    mentor_id = Column(String(64), nullable=False)
    # 0 = Sunday ... 6 = Saturday
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_recurring = Column(Boolean, nullable=False, default=True, server_default=true())
    is_available = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), default=_now_utc, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=_now_utc)

    __table_args__ = (
        UniqueConstraint(
            "mentor_id",
            "day_of_week",
            "start_time",
            "end_time",
            name=SLOT_UNIQUE_CONSTRAINT,
        ),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_slots_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_availability_slots_time_order"),
        Index("idx_availability_slots_mentor_day", "mentor_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        state = "available" if self.is_available else "unavailable"
        return (
            f"<AvailabilitySlot {self.id}: mentor={self.mentor_id}, day={self.day_of_week}, "
            f"time={self.start_time}-{self.end_time}, {state}>"
        )
