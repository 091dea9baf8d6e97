"""
Booking endpoints: listing, creation and owner/renter status transitions.

Status transitions are only requested here. The backend owns the booking
state machine and answers with the booking as it now stands.
"""

from typing import Any, Optional

from pydantic import TypeAdapter

from smartfarm.api import router
from smartfarm.api.client import ApiClient, unwrap
from smartfarm.core.logging import get_logger
from smartfarm.schemas.booking import Booking, BookingCreate

logger = get_logger(__name__)

_booking_list = TypeAdapter(list[Booking])

# Statuses the backend uses to signal a date conflict on create
CONFLICT_STATUSES = (400, 409)

CREATE_FAILED = "Failed to book equipment"


def _parse_booking(payload: Any) -> Booking:
    return Booking.model_validate(unwrap(payload, "booking", "data"))


def _parse_bookings(payload: Any) -> list[Booking]:
    return _booking_list.validate_python(unwrap(payload, "bookings", "data"))


class BookingAPI(ApiClient):

    async def list_equipment_bookings(self, equipment_id: str) -> list[Booking]:
        """Existing bookings for one equipment item. Public endpoint."""
        response = await self._request(
            "GET",
            router.equipment_bookings(equipment_id),
            fallback_message="Failed to fetch bookings",
        )
        return _parse_bookings(response.json())

    async def list_user_bookings(self) -> list[Booking]:
        response = await self._request(
            "GET", router.USER_BOOKINGS, fallback_message="Failed to fetch your bookings"
        )
        return _parse_bookings(response.json())

    async def list_owner_bookings(self) -> list[Booking]:
        response = await self._request(
            "GET", router.OWNER_BOOKINGS, fallback_message="Failed to fetch booking requests"
        )
        return _parse_bookings(response.json())

    async def create_booking(
        self,
        booking_data: BookingCreate,
        idempotency_key: Optional[str] = None,
    ) -> Booking:
        """
        Submit a booking request.

        Raises BookingConflictError on 400/409, APIError on any other
        failure. The request is sent once; callers resubmit manually.
        """
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        response = await self._request(
            "POST",
            router.BOOKINGS,
            json=booking_data.to_payload(),
            headers=headers,
            fallback_message=CREATE_FAILED,
            conflict_statuses=CONFLICT_STATUSES,
        )
        booking = _parse_booking(response.json())
        logger.info(
            "booking_created",
            booking_id=booking.id,
            equipment_id=booking.equipment_id,
            start_date=str(booking.start_date),
            end_date=str(booking.end_date),
        )
        return booking

    async def _transition(self, booking_id: str, action: str) -> Booking:
        response = await self._request(
            "PATCH",
            router.booking_action(booking_id, action),
            fallback_message=f"Failed to {action} booking",
        )
        booking = _parse_booking(response.json())
        logger.info("booking_transition_requested", booking_id=booking_id, action=action, status=booking.status.value)
        return booking

    async def approve_booking(self, booking_id: str) -> Booking:
        return await self._transition(booking_id, "approve")

    async def decline_booking(self, booking_id: str) -> Booking:
        return await self._transition(booking_id, "decline")

    async def complete_booking(self, booking_id: str) -> Booking:
        return await self._transition(booking_id, "complete")

    async def cancel_booking(self, booking_id: str) -> Booking:
        return await self._transition(booking_id, "cancel")

    async def delete_booking(self, booking_id: str) -> None:
        await self._request(
            "DELETE", router.booking(booking_id), fallback_message="Failed to cancel booking"
        )
        logger.info("booking_deleted", booking_id=booking_id)
