# backend/tests/services/test_availability_editor.py
"""
Tests for AvailabilityEditor: slot validation, duplicates, toggling and removal.
"""

from datetime import time
from unittest.mock import MagicMock

import pytest

from mentorship.core.exceptions import (
    DuplicateSlotException,
    InvalidTimeRangeException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from mentorship.models import AvailabilitySlot, SessionBooking
from mentorship.monitoring.prometheus_metrics import prometheus_metrics
from mentorship.repositories import AvailabilityRepository
from mentorship.services import AvailabilityEditor, AvailabilityResolver
from tests.utils.scheduling import MENTOR_ID, MONDAY, OTHER_MENTOR_ID

MISSING_SLOT_ID = "01HZZZZZZZZZZZZZZZZZZZZZZZ"


@pytest.fixture
def editor(db) -> AvailabilityEditor:
    return AvailabilityEditor(db)


class TestAddSlot:
    def test_adds_available_recurring_slot(self, editor, db):
        slot = editor.add_slot(MENTOR_ID, 1, "09:00", "10:00")

        stored = db.get(AvailabilitySlot, slot.id)
        assert stored.start_time == time(9, 0)
        assert stored.end_time == time(10, 0)
        assert stored.is_available is True
        assert stored.is_recurring is True

    @pytest.mark.parametrize(
        "start, end",
        [(time(10, 0), time(9, 0)), (time(9, 0), time(9, 0))],
    )
    def test_rejects_non_positive_range(self, editor, db, start, end):
        with pytest.raises(InvalidTimeRangeException):
            editor.add_slot(MENTOR_ID, 1, start, end)

        assert db.query(AvailabilitySlot).count() == 0

    @pytest.mark.parametrize("day_of_week", [-1, 7])
    def test_rejects_out_of_range_weekday(self, editor, day_of_week):
        with pytest.raises(ValidationException) as exc_info:
            editor.add_slot(MENTOR_ID, day_of_week, time(9, 0), time(10, 0))

        assert "day_of_week" in exc_info.value.details["errors"]

    def test_rejects_malformed_time(self, editor):
        with pytest.raises(ValidationException):
            editor.add_slot(MENTOR_ID, 1, "9am", "10:00")

    def test_rejects_exact_duplicate(self, editor, db):
        editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        rejected_before = prometheus_metrics.sample_value(
            "mentorship_availability_changes_total", {"action": "add", "outcome": "rejected"}
        )

        with pytest.raises(DuplicateSlotException) as exc_info:
            editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))

        assert exc_info.value.details["day_of_week"] == 1
        assert db.query(AvailabilitySlot).count() == 1
        rejected_after = prometheus_metrics.sample_value(
            "mentorship_availability_changes_total", {"action": "add", "outcome": "rejected"}
        )
        assert rejected_after == rejected_before + 1

    def test_duplicate_of_hidden_slot_is_also_rejected(self, editor):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        editor.set_available(slot.id, False)

        with pytest.raises(DuplicateSlotException):
            editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))

    def test_overlapping_windows_are_allowed(self, editor):
        editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        editor.add_slot(MENTOR_ID, 1, time(9, 30), time(10, 30))

        assert len(editor.list_slots(MENTOR_ID)) == 2


class TestSetAvailable:
    def test_toggle_is_idempotent(self, editor):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))

        first = editor.set_available(slot.id, False)
        second = editor.set_available(slot.id, False)

        assert first.is_available is False
        assert second.is_available is False
        assert editor.set_available(slot.id, True).is_available is True

    def test_hidden_slot_disappears_from_resolution(self, editor, db):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        resolver = AvailabilityResolver(db)

        editor.set_available(slot.id, False)
        assert resolver.resolve(MENTOR_ID, MONDAY) == []

        editor.set_available(slot.id, True)
        assert [s.slot_id for s in resolver.resolve(MENTOR_ID, MONDAY)] == [slot.id]

    def test_unknown_slot_is_not_found(self, editor):
        with pytest.raises(NotFoundException) as exc_info:
            editor.set_available(MISSING_SLOT_ID, False)

        assert exc_info.value.code == "NOT_FOUND"

    def test_slot_of_another_mentor_is_not_found(self, editor):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))

        with pytest.raises(NotFoundException):
            editor.set_available(slot.id, False, mentor_id=OTHER_MENTOR_ID)

        assert editor.list_slots(MENTOR_ID)[0].is_available is True


class TestRemoveSlot:
    def test_removes_slot(self, editor, db):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))

        editor.remove_slot(slot.id, mentor_id=MENTOR_ID)

        assert db.get(AvailabilitySlot, slot.id) is None

    def test_unknown_slot_is_not_found(self, editor):
        with pytest.raises(NotFoundException):
            editor.remove_slot(MISSING_SLOT_ID)

    def test_second_removal_is_not_found(self, editor):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        editor.remove_slot(slot.id)

        with pytest.raises(NotFoundException):
            editor.remove_slot(slot.id)

    def test_existing_bookings_survive_slot_removal(self, editor, db, add_booking):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        booking = add_booking(MONDAY, time(9, 0), time(10, 0))

        editor.remove_slot(slot.id)

        assert db.get(SessionBooking, booking.id) is not None

    def test_slot_can_be_re_added_after_removal(self, editor):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        editor.remove_slot(slot.id)

        replacement = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))

        assert replacement.id != slot.id


class TestViews:
    def test_weekly_pattern_groups_every_day(self, editor):
        editor.add_slot(MENTOR_ID, 1, time(11, 0), time(12, 0))
        editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        hidden = editor.add_slot(MENTOR_ID, 5, time(18, 0), time(19, 0))
        editor.set_available(hidden.id, False)

        pattern = editor.get_weekly_pattern(MENTOR_ID)

        assert sorted(pattern) == list(range(7))
        assert [s.start_time for s in pattern[1]] == [time(9, 0), time(11, 0)]
        assert pattern[5][0].is_available is False
        assert pattern[0] == []

    def test_time_options_cover_picker_range(self, editor):
        options = editor.time_options()

        assert options[0] == time(8, 0)
        assert options[-1] == time(21, 0)
        assert time(8, 30) in options
        assert len(options) == 27


class TestChangesFromAnotherSession:
    """Edits must act on what the store holds, not on what this session cached."""

    @pytest.fixture
    def other_editor(self, session_factory):
        session = session_factory()
        try:
            yield AvailabilityEditor(session)
        finally:
            session.close()

    def test_showing_a_slot_hidden_elsewhere_is_stored(self, editor, other_editor, db):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        other_editor.set_available(slot.id, False)

        shown = editor.set_available(slot.id, True)

        assert shown.is_available is True
        assert other_editor.list_slots(MENTOR_ID)[0].is_available is True
        resolved = AvailabilityResolver(db).resolve(MENTOR_ID, MONDAY)
        assert [s.slot_id for s in resolved] == [slot.id]

    def test_hiding_a_slot_shown_elsewhere_is_stored(self, editor, other_editor):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        editor.set_available(slot.id, False)
        other_editor.set_available(slot.id, True)

        hidden = editor.set_available(slot.id, False)

        assert hidden.is_available is False
        assert other_editor.list_slots(MENTOR_ID)[0].is_available is False

    @pytest.mark.parametrize("is_available", [True, False])
    def test_toggling_a_slot_removed_elsewhere_is_not_found(
        self, editor, other_editor, is_available
    ):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        other_editor.remove_slot(slot.id)

        with pytest.raises(NotFoundException):
            editor.set_available(slot.id, is_available)

    def test_removing_a_slot_removed_elsewhere_is_not_found(self, editor, other_editor):
        slot = editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))
        other_editor.remove_slot(slot.id)

        with pytest.raises(NotFoundException):
            editor.remove_slot(slot.id)

    def test_weekly_pattern_reflects_edits_made_elsewhere(self, editor, other_editor):
        slot = editor.add_slot(MENTOR_ID, 2, time(9, 0), time(10, 0))
        assert editor.get_weekly_pattern(MENTOR_ID)[2][0].is_available is True

        other_editor.set_available(slot.id, False)

        assert editor.get_weekly_pattern(MENTOR_ID)[2][0].is_available is False


class TestRepositoryFailures:
    def test_non_transient_repository_error_becomes_service_error(self, db):
        repository = MagicMock(spec=AvailabilityRepository)
        repository.insert_slot.side_effect = RepositoryException("Integrity constraint violated")
        editor = AvailabilityEditor(db, availability_repository=repository)

        with pytest.raises(ServiceException) as exc_info:
            editor.add_slot(MENTOR_ID, 1, time(9, 0), time(10, 0))

        payload = exc_info.value.to_dict()
        assert payload["code"] == "REPOSITORY_ERROR"
        assert payload["retryable"] is False
        assert payload["details"] == {"phase": "commit"}
