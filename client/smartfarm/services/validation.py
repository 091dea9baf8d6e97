"""
Local validation of a booking request.

Runs before any network call. The checks and their order mirror what the
booking form has always shown the user; the first failing check wins.
"""

from datetime import date
from typing import Optional

from smartfarm.core.dates import DateLike, parse_date
from smartfarm.core.exceptions import BookingValidationError, InvalidDateError

MSG_REQUIRED = "Start and end dates are required"
MSG_START_PAST = "Start date cannot be in the past"
MSG_END_PAST = "End date cannot be in the past"
MSG_END_BEFORE_START = "End date cannot be before start date"
MSG_MIN_DURATION = "End date must be after start date (minimum 1 day rental)"


def _parse_field(value: DateLike, field: str) -> date:
    try:
        return parse_date(value)
    except InvalidDateError as e:
        raise BookingValidationError(str(e), field=field) from e


def validate_booking_dates(
    start: Optional[DateLike],
    end: Optional[DateLike],
    today: date,
) -> tuple[date, date]:
    """
    Validate a requested rental period.

    Returns the parsed (start, end) pair. Raises BookingValidationError with
    the user-facing message and the offending field otherwise.
    """
    if not start or not end:
        raise BookingValidationError(MSG_REQUIRED, field="start_date" if not start else "end_date")

    start_date = _parse_field(start, "start_date")
    end_date = _parse_field(end, "end_date")

    if start_date < today:
        raise BookingValidationError(MSG_START_PAST, field="start_date")
    if end_date < today:
        raise BookingValidationError(MSG_END_PAST, field="end_date")
    if end_date < start_date:
        raise BookingValidationError(MSG_END_BEFORE_START, field="end_date")
    if start_date == end_date:
        raise BookingValidationError(MSG_MIN_DURATION, field="end_date")

    return start_date, end_date
