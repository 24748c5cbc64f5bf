# backend/mentorship/repositories/availability_repository.py
"""
AvailabilityRepository - Recurring Slot Management

Data access for ``mentor_availability_slots``. The unique constraint on
(mentor_id, day_of_week, start_time, end_time) is the source of truth for
duplicate detection; this repository only translates its violation.
"""

from datetime import time
import logging
from typing import List, Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import SLOT_UNIQUE_CONSTRAINT
from ..core.exceptions import DuplicateSlotException, RepositoryException
from ..models.availability import AvailabilitySlot
from .base_repository import BaseRepository, constraint_name_of

logger = logging.getLogger(__name__)


def _is_duplicate_slot_violation(exc: IntegrityError) -> bool:
    name = constraint_name_of(exc)
    if name:
        return name == SLOT_UNIQUE_CONSTRAINT
    text = str(getattr(exc, "orig", exc)).lower()
    return SLOT_UNIQUE_CONSTRAINT in text or (
        "unique constraint failed" in text and "mentor_availability_slots" in text
    )


class AvailabilityRepository(BaseRepository[AvailabilitySlot]):
    """Repository for a mentor's recurring weekly slots."""

    def __init__(self, db: Session):
        """Initialize with AvailabilitySlot model."""
        super().__init__(db, AvailabilitySlot)
        self.logger = logging.getLogger(__name__)

    def list_slots(
        self,
        mentor_id: str,
        day_of_week: Optional[int] = None,
        is_recurring: bool = True,
        only_available: bool = False,
    ) -> List[AvailabilitySlot]:
        """
        Get a mentor's slots ordered by day, then start and end time.

        Args:
            mentor_id: Owning mentor
            day_of_week: Restrict to one weekday (0 = Sunday)
            is_recurring: Recurrence flag to match
            only_available: Skip slots the mentor has hidden

        Returns:
            List of matching slots
        """
        query = self._build_query().filter(
            AvailabilitySlot.mentor_id == mentor_id,
            AvailabilitySlot.is_recurring.is_(is_recurring),
        )
        if day_of_week is not None:
            query = query.filter(AvailabilitySlot.day_of_week == day_of_week)
        if only_available:
            query = query.filter(AvailabilitySlot.is_available.is_(True))
        query = query.order_by(
            AvailabilitySlot.day_of_week,
            AvailabilitySlot.start_time,
            AvailabilitySlot.end_time,
        )
        return self._execute_query(query, "list slots")

    def get_slot(self, slot_id: str) -> Optional[AvailabilitySlot]:
        return self.get_by_id(slot_id)

    def insert_slot(
        self,
        mentor_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        is_recurring: bool = True,
        is_available: bool = True,
    ) -> AvailabilitySlot:
        """
        Create a new recurring slot.

        Raises:
            DuplicateSlotException: If the mentor already has this exact window
            RepositoryException: If any other constraint rejects the row
        """
        slot = AvailabilitySlot(
            mentor_id=mentor_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            is_recurring=is_recurring,
            is_available=is_available,
        )
        try:
            return self.add(slot)
        except IntegrityError as e:
            if _is_duplicate_slot_violation(e):
                raise DuplicateSlotException(mentor_id, day_of_week, start_time, end_time) from e
            self.logger.error(f"Integrity error creating slot: {str(e)}")
            raise RepositoryException(f"Integrity constraint violated: {str(e)}") from e

    def update_slot_availability(
        self, slot_id: str, is_available: bool
    ) -> Optional[AvailabilitySlot]:
        """
        Set the visibility flag of a slot with a single UPDATE.

        The UPDATE is issued whatever value this session has cached, so a
        change made by another session is never skipped as a no-op.

        Returns:
            The slot as stored after the update, or None when it does not exist
        """
        statement = (
            update(AvailabilitySlot)
            .where(AvailabilitySlot.id == slot_id)
            .values(is_available=is_available)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(statement)
        except SQLAlchemyError as e:
            self._raise_store_error(e, "update")
        if result.rowcount == 0:
            return None
        return self.get_slot(slot_id)

    def delete_slot(self, slot_id: str) -> bool:
        """
        Hard-delete a slot. Bookings made from it are not touched.

        Returns:
            True if deleted, False if not found
        """
        statement = (
            delete(AvailabilitySlot)
            .where(AvailabilitySlot.id == slot_id)
            .execution_options(synchronize_session="fetch")
        )
        try:
            result = self.db.execute(statement)
        except SQLAlchemyError as e:
            self._raise_store_error(e, "delete")
        return bool(result.rowcount > 0)
