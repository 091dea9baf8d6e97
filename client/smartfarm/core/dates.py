"""
Calendar date helpers.

Bookings are whole calendar days exchanged as YYYY-MM-DD strings with no
timezone. User input is parsed strictly; server values are allowed to carry
a time component, which is dropped.
"""

import re
from datetime import date, datetime
from typing import Union

from smartfarm.core.exceptions import InvalidDateError

DATE_FORMAT = "%Y-%m-%d"
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[date, str]


def parse_date(value: DateLike) -> date:
    """Parse a YYYY-MM-DD string. Raises InvalidDateError on anything else."""
    if isinstance(value, datetime):
        raise InvalidDateError(f"Expected a calendar date, got a timestamp: {value!r}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Invalid date: {value!r}")

    text = value.strip()
    if not _ISO_DATE.match(text):
        raise InvalidDateError(f"Invalid date: {value!r}")
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as e:
        # Well-formed but impossible, e.g. 2024-02-30
        raise InvalidDateError(f"Invalid date: {value!r}") from e


def parse_api_date(value: Union[date, datetime, str]) -> date:
    """
    Parse a date sent by the backend.

    Accepts plain dates, datetimes and ISO-8601 timestamps such as
    ``2024-06-01T00:00:00.000Z``; the calendar date as written is kept.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Invalid date: {value!r}")

    text = value.strip()
    if _ISO_DATE.match(text):
        return parse_date(text)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as e:
        raise InvalidDateError(f"Invalid date: {value!r}") from e


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def today() -> date:
    """Current local calendar date."""
    return date.today()


def rental_days(start: date, end: date) -> int:
    """Number of rental days between two dates (end exclusive)."""
    return (end - start).days
