# backend/mentorship/services/availability_editor.py
"""
Availability Editor

Mentor-side management of the recurring weekly pattern: add, hide/show and
remove slots. Owns no booking logic. Hiding or removing a slot never touches
SessionBookings already made from it.

Duplicate policy: adding an exact (day_of_week, start_time, end_time) the
mentor already has is rejected with DuplicateSlotException, whether the
existing slot is available or hidden.

Local state is only updated by callers after these methods return, i.e.
after the store confirmed the change.
"""

import logging
from datetime import time
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    DuplicateSlotException,
    InvalidTimeRangeException,
    NotFoundException,
)
from ..models.availability import AvailabilitySlot
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import AvailabilitySlotCreate, AvailabilitySlotResponse, WeeklyPattern
from ..utils.time_helpers import TimeInput, time_grid
from ._inputs import coerce_clock, parse_model
from .base import BaseService

logger = logging.getLogger(__name__)


class AvailabilityEditor(BaseService):
    """Service layer for a mentor's recurring availability slots."""

    availability_repository: AvailabilityRepository

    def __init__(
        self, db: Session, availability_repository: Optional[AvailabilityRepository] = None
    ):
        super().__init__(db)
        self.availability_repository = (
            availability_repository or RepositoryFactory.create_availability_repository(db)
        )

    @BaseService.measure_operation("add_slot")
    def add_slot(
        self,
        mentor_id: str,
        day_of_week: int,
        start_time: TimeInput,
        end_time: TimeInput,
    ) -> AvailabilitySlot:
        """
        Publish a new weekly recurring slot, available immediately.

        Raises:
            ValidationException: If the weekday or a time is malformed
            InvalidTimeRangeException: If start_time >= end_time
            DuplicateSlotException: If the mentor already has this exact slot
        """
        start = coerce_clock(start_time, "start_time")
        end = coerce_clock(end_time, "end_time")
        slot_data = parse_model(
            AvailabilitySlotCreate,
            mentor_id=mentor_id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
        )
        if start >= end:
            prometheus_metrics.record_availability_change("add", "rejected")
            raise InvalidTimeRangeException(start, end)

        self.log_operation(
            "add_slot",
            mentor_id=slot_data.mentor_id,
            day_of_week=slot_data.day_of_week,
            start_time=start.isoformat(),
            end_time=end.isoformat(),
        )
        try:
            with self.transaction():
                slot = self.availability_repository.insert_slot(
                    slot_data.mentor_id,
                    slot_data.day_of_week,
                    start,
                    end,
                    is_recurring=True,
                    is_available=True,
                )
        except DuplicateSlotException:
            prometheus_metrics.record_availability_change("add", "rejected")
            raise

        prometheus_metrics.record_availability_change("add")
        return slot

    @BaseService.measure_operation("set_available")
    def set_available(
        self, slot_id: str, is_available: bool, *, mentor_id: Optional[str] = None
    ) -> AvailabilitySlot:
        """
        Show or hide a slot. Idempotent: setting the current value succeeds.

        Args:
            slot_id: Slot to update
            is_available: Desired visibility
            mentor_id: When given, the slot must belong to this mentor

        Raises:
            NotFoundException: If the slot does not exist (or is not the mentor's)
        """
        with self.transaction():
            slot = self._get_owned_slot(slot_id, mentor_id)
            updated = self.availability_repository.update_slot_availability(
                slot.id, bool(is_available)
            )
            if updated is None:
                raise NotFoundException(
                    "Availability slot not found", details={"slot_id": slot_id}
                )

        prometheus_metrics.record_availability_change("set_available")
        self.logger.info(
            "slot_availability_set",
            extra={"slot_id": slot_id, "is_available": updated.is_available},
        )
        return updated

    @BaseService.measure_operation("remove_slot")
    def remove_slot(self, slot_id: str, *, mentor_id: Optional[str] = None) -> None:
        """
        Hard-delete a slot. Existing bookings for that day/time stay valid.

        Raises:
            NotFoundException: If the slot does not exist (or is not the mentor's)
        """
        with self.transaction():
            slot = self._get_owned_slot(slot_id, mentor_id)
            if not self.availability_repository.delete_slot(slot.id):
                raise NotFoundException(
                    "Availability slot not found", details={"slot_id": slot_id}
                )

        prometheus_metrics.record_availability_change("remove")
        self.logger.info("slot_removed", extra={"slot_id": slot_id})

    def list_slots(self, mentor_id: str) -> List[AvailabilitySlot]:
        """Every recurring slot of the mentor, hidden ones included."""
        with self.read_scope():
            return self.availability_repository.list_slots(mentor_id, is_recurring=True)

    def get_weekly_pattern(self, mentor_id: str) -> WeeklyPattern:
        """Recurring slots grouped by weekday 0..6 (empty lists for free days)."""
        pattern: Dict[int, List[AvailabilitySlotResponse]] = {day: [] for day in range(7)}
        for slot in self.list_slots(mentor_id):
            pattern[slot.day_of_week].append(AvailabilitySlotResponse.model_validate(slot))
        return pattern

    def time_options(self) -> List[time]:
        """Clock times offered by the mentor's time picker."""
        return time_grid(
            settings.slot_picker_start,
            settings.slot_picker_end,
            settings.slot_picker_step_minutes,
        )

    def _get_owned_slot(self, slot_id: str, mentor_id: Optional[str]) -> AvailabilitySlot:
        slot = self.availability_repository.get_slot(slot_id)
        if slot is None or (mentor_id is not None and slot.mentor_id != mentor_id):
            raise NotFoundException(
                "Availability slot not found",
                details={"slot_id": slot_id},
            )
        return slot
