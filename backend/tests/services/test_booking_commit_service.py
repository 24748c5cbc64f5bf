# backend/tests/services/test_booking_commit_service.py
"""
Tests for BookingCommitService.book: validation, conflicts and store failures.
"""

from datetime import time
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from mentorship.core.exceptions import (
    InvalidTimeRangeException,
    ServiceException,
    SlotAlreadyBookedException,
    StoreUnavailableException,
    ValidationException,
)
from mentorship.models import SessionBooking
from mentorship.monitoring.prometheus_metrics import prometheus_metrics
from mentorship.repositories import BookingRepository
from mentorship.services import BookingCommitService
from tests.utils.scheduling import MENTEE_ID, MENTOR_ID, MONDAY, OTHER_MENTEE_ID


def _book(service: BookingCommitService, **overrides):
    params = {
        "request_id": "req-1",
        "mentor_id": MENTOR_ID,
        "mentee_id": MENTEE_ID,
        "session_date": MONDAY,
        "start_time": time(9, 0),
        "end_time": time(10, 0),
    }
    params.update(overrides)
    return service.book(**params)


class TestBook:
    @pytest.fixture
    def service(self, db) -> BookingCommitService:
        return BookingCommitService(db)

    def test_successful_booking_is_committed(self, service, session_factory):
        booking = _book(service, meeting_link="https://zoom.example.com/j/1", notes="Resume review")

        assert len(booking.id) == 26
        other_session = session_factory()
        try:
            stored = other_session.get(SessionBooking, booking.id)
            assert stored is not None
            assert stored.mentee_id == MENTEE_ID
            assert stored.notes == "Resume review"
        finally:
            other_session.close()

    def test_accepts_string_inputs(self, service):
        booking = _book(service, session_date="2026-10-19", start_time="09:00", end_time="10:00")

        assert booking.session_date == MONDAY
        assert booking.start_time == time(9, 0)

    @pytest.mark.parametrize(
        "start, end",
        [(time(10, 0), time(9, 0)), (time(9, 0), time(9, 0))],
    )
    def test_invalid_range_never_touches_the_store(self, db, start, end):
        repository = MagicMock(spec=BookingRepository)
        service = BookingCommitService(db, booking_repository=repository)

        with pytest.raises(InvalidTimeRangeException) as exc_info:
            _book(service, start_time=start, end_time=end)

        assert exc_info.value.code == "INVALID_TIME_RANGE"
        repository.insert_booking.assert_not_called()

    def test_second_booking_of_same_slot_conflicts(self, service, db):
        _book(service)
        before = prometheus_metrics.sample_value(
            "mentorship_booking_conflicts_total", {"source": "commit"}
        )

        with pytest.raises(SlotAlreadyBookedException):
            _book(service, request_id="req-2", mentee_id=OTHER_MENTEE_ID)

        assert db.query(SessionBooking).count() == 1
        after = prometheus_metrics.sample_value(
            "mentorship_booking_conflicts_total", {"source": "commit"}
        )
        assert after == before + 1

    def test_session_is_usable_after_conflict(self, service):
        _book(service)
        with pytest.raises(SlotAlreadyBookedException):
            _book(service, request_id="req-2", mentee_id=OTHER_MENTEE_ID)

        booking = _book(service, request_id="req-3", start_time=time(10, 0), end_time=time(11, 0))

        assert booking.start_time == time(10, 0)

    def test_optional_text_is_trimmed_and_blank_becomes_none(self, service):
        booking = _book(service, meeting_link="   ", notes="  Interview prep  ")

        assert booking.meeting_link is None
        assert booking.notes == "Interview prep"

    def test_over_length_notes_are_rejected(self, service, db):
        with pytest.raises(ValidationException) as exc_info:
            _book(service, notes="x" * 2001)

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert "notes" in exc_info.value.details["errors"]
        assert db.query(SessionBooking).count() == 0

    def test_missing_identifiers_are_rejected(self, service):
        with pytest.raises(ValidationException):
            _book(service, mentee_id="")

    def test_malformed_time_is_rejected(self, service):
        with pytest.raises(ValidationException) as exc_info:
            _book(service, start_time="nine")
        assert exc_info.value.code == "INVALID_TIME"


class TestStoreFailures:
    def test_transient_failure_maps_to_store_unavailable(self, db):
        repository = MagicMock(spec=BookingRepository)
        repository.insert_booking.side_effect = StoreUnavailableException(operation="create")
        service = BookingCommitService(db, booking_repository=repository)

        with pytest.raises(StoreUnavailableException) as exc_info:
            _book(service)

        assert exc_info.value.retryable is True
        assert repository.insert_booking.call_count == 1

    def test_commit_failure_on_lost_connection_is_retryable(self, db, monkeypatch):
        service = BookingCommitService(db)

        def _fail_commit():
            raise OperationalError("COMMIT", {}, Exception("server closed the connection unexpectedly"))

        monkeypatch.setattr(db, "commit", _fail_commit)

        with pytest.raises(StoreUnavailableException) as exc_info:
            _book(service)

        assert exc_info.value.to_dict()["code"] == "STORE_UNAVAILABLE"

    def test_non_transient_failure_is_a_service_error(self, db, monkeypatch):
        service = BookingCommitService(db)

        def _fail_commit():
            raise ProgrammingError("COMMIT", {}, Exception("syntax error"))

        monkeypatch.setattr(db, "commit", _fail_commit)

        with pytest.raises(ServiceException) as exc_info:
            _book(service)

        assert not isinstance(exc_info.value, StoreUnavailableException)
        assert exc_info.value.retryable is False
