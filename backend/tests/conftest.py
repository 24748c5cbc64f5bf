# backend/tests/conftest.py
"""
Pytest configuration for the mentorship scheduling tests.

Every test gets its own in-memory SQLite store so commits made by the
services are real and nothing leaks between tests.
"""

import os

# Set testing mode BEFORE any mentorship imports
os.environ["is_testing"] = "true"
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from datetime import date, time
from typing import Callable, Iterator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from mentorship.database import build_engine, build_session_factory
from mentorship.init_db import create_tables, drop_tables
from mentorship.models import AvailabilitySlot, SessionBooking
from tests.utils.scheduling import MENTEE_ID, MENTOR_ID


@pytest.fixture
def engine() -> Iterator[Engine]:
    test_engine = build_engine("sqlite+pysqlite:///:memory:", poolclass=StaticPool)
    create_tables(test_engine)
    yield test_engine
    drop_tables(test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_slot(db: Session) -> Callable[..., AvailabilitySlot]:
    """Insert a committed recurring slot directly, bypassing the editor."""

    def _add(
        day_of_week: int,
        start: time,
        end: time,
        *,
        mentor_id: str = MENTOR_ID,
        is_available: bool = True,
        is_recurring: bool = True,
    ) -> AvailabilitySlot:
        slot = AvailabilitySlot(
            mentor_id=mentor_id,
            day_of_week=day_of_week,
            start_time=start,
            end_time=end,
            is_available=is_available,
            is_recurring=is_recurring,
        )
        db.add(slot)
        db.commit()
        return slot

    return _add


@pytest.fixture
def add_booking(db: Session) -> Callable[..., SessionBooking]:
    """Insert a committed booking directly, bypassing the commit service."""

    def _add(
        session_date: date,
        start: time,
        end: time,
        *,
        mentor_id: str = MENTOR_ID,
        mentee_id: str = MENTEE_ID,
        request_id: str = "req-1",
    ) -> SessionBooking:
        booking = SessionBooking(
            request_id=request_id,
            mentor_id=mentor_id,
            mentee_id=mentee_id,
            session_date=session_date,
            start_time=start,
            end_time=end,
        )
        db.add(booking)
        db.commit()
        return booking

    return _add
