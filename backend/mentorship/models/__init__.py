"""SQLAlchemy models for mentor availability and session bookings."""

from .availability import AvailabilitySlot
from .booking import SessionBooking

__all__ = ["AvailabilitySlot", "SessionBooking"]
