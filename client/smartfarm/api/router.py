"""
Backend endpoint paths used by the client.
"""

API_PREFIX = "/api"

AUTH_LOGIN = f"{API_PREFIX}/auth/login"
AUTH_ME = f"{API_PREFIX}/auth/me"
AUTH_LOGOUT = f"{API_PREFIX}/auth/logout"

BOOKINGS = f"{API_PREFIX}/booking"
BOOKING_STREAM = f"{BOOKINGS}/stream"
USER_BOOKINGS = f"{BOOKINGS}/user"
OWNER_BOOKINGS = f"{BOOKINGS}/owner"


def equipment_bookings(equipment_id: str) -> str:
    return f"{BOOKINGS}/equipment/{equipment_id}"


def booking(booking_id: str) -> str:
    return f"{BOOKINGS}/{booking_id}"


def booking_action(booking_id: str, action: str) -> str:
    return f"{BOOKINGS}/{booking_id}/{action}"
