from datetime import date, datetime, time, timedelta
from typing import List, Union

from ..core.constants import DAY_SHORT_NAMES, DAYS_OF_WEEK

TimeInput = Union[time, str]


def string_to_time(time_str: str) -> time:
    """Parse "HH:MM" or "HH:MM:SS" wall-clock strings."""
    normalized = time_str.strip()
    if len(normalized) == 5:
        normalized += ":00"
    return datetime.strptime(normalized, "%H:%M:%S").time()


def coerce_time(value: TimeInput) -> time:
    """Accept either a ``time`` or a clock string; raises ValueError otherwise."""
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return string_to_time(value)
    raise ValueError(f"Unsupported time value: {value!r}")


def day_of_week_for(day: date) -> int:
    """Recurrence key of a calendar date (0 = Sunday)."""
    return day.isoweekday() % 7


def day_label(day_of_week: int, short: bool = False) -> str:
    return DAY_SHORT_NAMES[day_of_week] if short else DAYS_OF_WEEK[day_of_week]


def format_time_12h(t: TimeInput) -> str:
    """Render a wall-clock time as "9:00 AM"."""
    value = coerce_time(t)
    hour = value.hour % 12 or 12
    suffix = "PM" if value.hour >= 12 else "AM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_short_date(day: date) -> str:
    """Render a date as "Mon, Oct 19"."""
    return f"{day_label(day_of_week_for(day), short=True)}, {day.strftime('%b')} {day.day}"


def time_grid(start: time, end: time, step_minutes: int) -> List[time]:
    """Clock times from ``start`` to ``end`` inclusive, every ``step_minutes``."""
    anchor = date(2000, 1, 1)
    cursor = datetime.combine(anchor, start)
    stop = datetime.combine(anchor, end)
    step = timedelta(minutes=step_minutes)
    values: List[time] = []
    while cursor <= stop:
        values.append(cursor.time())
        cursor += step
    return values
