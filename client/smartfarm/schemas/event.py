"""
Pydantic schema for server-sent booking events.
"""

from typing import Any, Optional

from pydantic import BaseModel

from smartfarm.core.ids import normalize_id

BOOKING_EVENT_TYPES = frozenset({
    "booking_created",
    "booking_approved",
    "booking_rejected",
    "booking_completed",
    "booking_cancelled",
    "booking_updated",
    "new_booking",
})

CONNECTED = "connected"


class BookingEvent(BaseModel):
    type: str
    message: str = ""
    booking: Optional[dict[str, Any]] = None
    equipment: Optional[dict[str, Any]] = None

    model_config = {"extra": "ignore"}

    @property
    def equipment_id(self) -> Optional[str]:
        """Equipment the event concerns, if the payload names one."""
        candidates = []
        if self.booking:
            candidates.append(self.booking.get("equipmentId"))
        if self.equipment:
            candidates.append(self.equipment)
        for candidate in candidates:
            if candidate is None:
                continue
            try:
                return normalize_id(candidate)
            except ValueError:
                continue
        return None
