# backend/mentorship/core/exceptions.py
"""
Domain-specific exceptions for the mentorship scheduling subsystem.

These exceptions provide clear, business-focused error messages that the
mentor and mentee flows can render directly. Every exception carries a
stable ``code`` so callers can branch without parsing messages.
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable payload for the calling UI layer."""
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "retryable": self.retryable,
        }


class ValidationException(DomainException):
    """Raised when business validation fails."""


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code or "NOT_FOUND", details=details)


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""


class ServiceException(DomainException):
    """Raised when a service operation fails."""


# Specific business exceptions


class InvalidTimeRangeException(ValidationException):
    """Raised when a slot or booking does not end after it starts."""

    def __init__(self, start_time: Any, end_time: Any):
        super().__init__(
            message="End time must be after start time",
            code="INVALID_TIME_RANGE",
            details={"start_time": str(start_time), "end_time": str(end_time)},
        )


class DuplicateSlotException(ConflictException):
    """Raised when a mentor already has the exact same recurring slot."""

    def __init__(self, mentor_id: str, day_of_week: int, start_time: Any, end_time: Any):
        super().__init__(
            message="This availability slot already exists",
            code="DUPLICATE_SLOT",
            details={
                "mentor_id": mentor_id,
                "day_of_week": day_of_week,
                "start_time": str(start_time),
                "end_time": str(end_time),
            },
        )


class SlotAlreadyBookedException(ConflictException):
    """Raised when another mentee committed the same slot first."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot has already been booked",
            code="SLOT_ALREADY_BOOKED",
            details=details or {},
        )


class StoreUnavailableException(ServiceException):
    """Raised on transient infrastructure failures; safe for the caller to retry."""

    retryable = True

    def __init__(self, message: Optional[str] = None, *, operation: Optional[str] = None):
        super().__init__(
            message=message or "Service temporarily unavailable. Please try again.",
            code="STORE_UNAVAILABLE",
            details={"operation": operation} if operation else {},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail for reasons
    that retrying will not fix, such as malformed queries or unexpected
    constraint violations.
    """


_TRANSIENT_ERROR_SNIPPETS = (
    "server closed the connection",
    "ssl connection has been closed unexpectedly",
    "could not connect",
    "connection refused",
    "database is locked",
    "terminating connection",
    "timeout expired",
)


def is_db_pool_exhaustion(exc: Exception) -> bool:
    """
    Check if an exception indicates DB connection pool exhaustion.

    This is a common failure mode under load when all database connections
    are in use and new requests time out waiting.
    """
    error_str = str(exc).lower()
    return "queuepool" in error_str or (
        "timeout" in error_str and ("connection" in error_str or "pool" in error_str)
    )


def is_transient_store_error(exc: BaseException) -> bool:
    """True when a data-access failure is infrastructure trouble rather than a bad query."""
    if isinstance(exc, (PoolTimeoutError, InterfaceError)):
        return True
    if isinstance(exc, OperationalError):
        if getattr(exc, "connection_invalidated", False):
            return True
        message = str(exc).lower()
        return any(snippet in message for snippet in _TRANSIENT_ERROR_SNIPPETS) or (
            is_db_pool_exhaustion(exc)
        )
    return False
