"""Coercion of caller-supplied values into validated domain inputs."""

from datetime import date, datetime, time
from typing import Any, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..core.exceptions import ValidationException
from ..utils.time_helpers import TimeInput, coerce_time

DateInput = Union[date, str]
ModelT = TypeVar("ModelT", bound=BaseModel)


def coerce_date(value: DateInput, field_name: str = "date") -> date:
    """Accept a ``date``, a ``datetime`` (date part) or an ISO "YYYY-MM-DD" string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationException(
        f"{field_name} must be a valid calendar date",
        code="INVALID_DATE",
        details={field_name: str(value)},
    )


def coerce_clock(value: TimeInput, field_name: str) -> time:
    try:
        return coerce_time(value)
    except ValueError as exc:
        raise ValidationException(
            f"Invalid time format for {field_name}. Expected HH:MM.",
            code="INVALID_TIME",
            details={field_name: str(value)},
        ) from exc


def parse_model(model: Type[ModelT], **data: Any) -> ModelT:
    """Build a request schema, reporting pydantic errors as ValidationException."""
    try:
        return model(**data)
    except ValidationError as exc:
        errors = {
            ".".join(str(part) for part in err["loc"]) or "__root__": err["msg"]
            for err in exc.errors()
        }
        first = next(iter(errors.values()), "Invalid input")
        raise ValidationException(first, code="VALIDATION_ERROR", details={"errors": errors}) from exc
