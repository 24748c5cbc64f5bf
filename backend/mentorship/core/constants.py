"""Constants shared by the availability and booking services."""

from __future__ import annotations

# Recurrence key: 0 = Sunday ... 6 = Saturday
DAYS_OF_WEEK = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]
DAY_SHORT_NAMES = [day[:3] for day in DAYS_OF_WEEK]
MIN_DAY_OF_WEEK = 0
MAX_DAY_OF_WEEK = 6

# Booking detail constraints
MAX_REQUEST_ID_LENGTH = 64
DEFAULT_MEETING_LINK_MAX_LENGTH = 500
DEFAULT_NOTES_MAX_LENGTH = 2000

# Mentee-facing booking flow
DEFAULT_BOOKING_WINDOW_DAYS = 14
DAYS_PER_WEEK = 7

# Constraint names used to classify IntegrityErrors
SLOT_UNIQUE_CONSTRAINT = "uq_mentor_availability_slots_pattern"
BOOKING_UNIQUE_CONSTRAINT = "uq_session_bookings_mentor_slot"
