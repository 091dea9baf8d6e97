from smartfarm.api.client import ApiClient, extract_error_message
from smartfarm.api.auth import AuthAPI
from smartfarm.api.bookings import BookingAPI

__all__ = ["ApiClient", "extract_error_message", "AuthAPI", "BookingAPI"]
