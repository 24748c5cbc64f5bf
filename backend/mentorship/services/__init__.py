"""Service layer: availability resolution, booking commit, slot editing, booking flow."""

from .availability_editor import AvailabilityEditor
from .availability_resolver import AvailabilityResolver
from .booking_commit_service import BookingCommitService
from .booking_requester import BookingOutcome, BookingOutcomeStatus, BookingRequester

__all__ = [
    "AvailabilityEditor",
    "AvailabilityResolver",
    "BookingCommitService",
    "BookingOutcome",
    "BookingOutcomeStatus",
    "BookingRequester",
]
