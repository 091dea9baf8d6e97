from smartfarm.schemas.user import User, UserLogin, AuthResponse, StoredSession
from smartfarm.schemas.equipment import Equipment, RentalQuote
from smartfarm.schemas.booking import Booking, BookingCreate, BookingStatus
from smartfarm.schemas.event import BookingEvent

__all__ = [
    "User", "UserLogin", "AuthResponse", "StoredSession",
    "Equipment", "RentalQuote",
    "Booking", "BookingCreate", "BookingStatus",
    "BookingEvent",
]
