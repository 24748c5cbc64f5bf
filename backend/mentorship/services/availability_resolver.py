# backend/mentorship/services/availability_resolver.py
"""
Availability Resolver

Turns a mentor's recurring weekly pattern into the concrete slots a mentee
can pick on a given calendar date:

1. weekday of the date (0 = Sunday) selects the recurring windows,
2. hidden (``is_available = False``) and non-recurring windows are dropped,
3. each remaining window is marked booked when a SessionBooking with the
   same start and end exists on that exact date,
4. the result is ordered by start time, then end time.

The resolver never writes. Its output is a pure function of store state at
call time.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, time, timedelta
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from ..core.constants import DAYS_PER_WEEK
from ..models.availability import AvailabilitySlot
from ..models.booking import SessionBooking
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import ResolvedSlot
from ..utils.time_helpers import day_of_week_for
from ._inputs import DateInput, coerce_date
from .base import BaseService

logger = logging.getLogger(__name__)


def project_slots(
    slots: Iterable[AvailabilitySlot],
    bookings: Iterable[SessionBooking],
    on_date: date,
) -> List[ResolvedSlot]:
    """
    Project recurring slots onto ``on_date`` and flag the booked ones.

    Slots for other weekdays, hidden slots and non-recurring slots are
    skipped; only bookings dated ``on_date`` count.
    """
    weekday = day_of_week_for(on_date)
    booked: Set[Tuple[time, time]] = {
        (booking.start_time, booking.end_time)
        for booking in bookings
        if booking.session_date == on_date
    }
    resolved = [
        ResolvedSlot(
            slot_id=slot.id,
            session_date=on_date,
            day_of_week=slot.day_of_week,
            start_time=slot.start_time,
            end_time=slot.end_time,
            is_booked=(slot.start_time, slot.end_time) in booked,
        )
        for slot in slots
        if slot.day_of_week == weekday and slot.is_available and slot.is_recurring
    ]
    resolved.sort(key=lambda item: item.sort_key)
    return resolved


class AvailabilityResolver(BaseService):
    """Resolves recurring availability against concrete dates."""

    availability_repository: AvailabilityRepository
    booking_repository: BookingRepository

    def __init__(
        self,
        db: Session,
        availability_repository: Optional[AvailabilityRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
    ):
        super().__init__(db)
        self.availability_repository = (
            availability_repository or RepositoryFactory.create_availability_repository(db)
        )
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )

    @BaseService.measure_operation("resolve")
    def resolve(self, mentor_id: str, on_date: DateInput) -> List[ResolvedSlot]:
        """
        Bookable slots of ``mentor_id`` on one calendar date.

        Args:
            mentor_id: Mentor whose pattern is resolved
            on_date: Calendar date; past dates are allowed

        Returns:
            Ordered resolved slots; empty when the mentor has nothing that weekday

        Raises:
            ValidationException: If ``on_date`` is not a calendar date
            StoreUnavailableException: If the store cannot be reached
        """
        target = coerce_date(on_date, "session_date")
        weekday = day_of_week_for(target)

        with self.read_scope():
            slots = self.availability_repository.list_slots(
                mentor_id, day_of_week=weekday, is_recurring=True, only_available=True
            )
            bookings = (
                self.booking_repository.list_bookings_for_mentor_on_date(mentor_id, target)
                if slots
                else []
            )
            resolved = project_slots(slots, bookings, target)

        self.logger.debug(
            "resolved_slots",
            extra={
                "mentor_id": mentor_id,
                "session_date": target.isoformat(),
                "slot_count": len(resolved),
                "booked_count": sum(1 for item in resolved if item.is_booked),
            },
        )
        return resolved

    @BaseService.measure_operation("resolve_week")
    def resolve_week(self, mentor_id: str, week_start: DateInput) -> Dict[date, List[ResolvedSlot]]:
        """
        Resolve the seven consecutive dates starting at ``week_start``.

        Uses one slot query and one ranged booking query; every date in the
        result obeys the same contract as :meth:`resolve`.
        """
        start = coerce_date(week_start, "week_start")
        dates = [start + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]

        with self.read_scope():
            slots = self.availability_repository.list_slots(
                mentor_id, is_recurring=True, only_available=True
            )
            bookings = (
                self.booking_repository.list_bookings_for_mentor_between(
                    mentor_id, dates[0], dates[-1]
                )
                if slots
                else []
            )
            bookings_by_date: Dict[date, List[SessionBooking]] = defaultdict(list)
            for booking in bookings:
                bookings_by_date[booking.session_date].append(booking)

            return {
                day: project_slots(slots, bookings_by_date.get(day, []), day) for day in dates
            }
