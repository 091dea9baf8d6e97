"""
Exception hierarchy for the booking client.

Local validation failures never touch the network; API failures carry the
HTTP status and the best message the server provided.
"""

from typing import Optional


class SmartFarmError(Exception):
    """Base class for every error raised by this package."""


class InvalidDateError(SmartFarmError, ValueError):
    """A date string is not a valid YYYY-MM-DD calendar date."""


class BookingValidationError(SmartFarmError):
    """A booking request was rejected locally before any network call."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class NotAuthenticatedError(SmartFarmError):
    """An operation needs a logged-in session."""


class APIError(SmartFarmError):
    """The backend answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(status={self.status_code}, message={self.message!r})>"


class BookingConflictError(APIError):
    """The backend refused a booking because the dates are taken (400/409)."""


class APIConnectionError(APIError):
    """The request never produced an HTTP response."""
