"""
Booking form controller.

Holds the state behind the "Book Equipment" dialog and drives a submission:

  idle -> submitting -> success
                     -> error -> idle (on the next field edit)

Local validation failures never reach the network. The optional overlap
pre-check uses the cached booking list and is advisory; the backend's 400/409
answer is what actually decides a conflict.
"""

import asyncio
import inspect
import time
import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from smartfarm.api.bookings import CREATE_FAILED, BookingAPI
from smartfarm.core import dates
from smartfarm.core.config import Settings, get_settings
from smartfarm.core.exceptions import APIError, BookingConflictError, BookingValidationError, InvalidDateError
from smartfarm.core.logging import get_logger
from smartfarm.core.metrics import booking_latency, record_booking_attempt
from smartfarm.schemas.booking import Booking, BookingCreate
from smartfarm.schemas.equipment import Equipment
from smartfarm.services.availability import AvailabilityService
from smartfarm.services.pricing import quote
from smartfarm.services.validation import validate_booking_dates

logger = get_logger(__name__)

SUCCESS_MESSAGE = "Booking request sent! The equipment owner will be notified immediately."
OVERLAP_MESSAGE = "This equipment is already booked for the selected dates. Please choose different dates."
UNAVAILABLE_MESSAGE = "This equipment is currently not available for booking"

Callback = Callable[[], Union[None, Awaitable[None]]]


class FormState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


async def _invoke(callback: Optional[Callback]) -> None:
    if callback is None:
        return
    result = callback()
    if inspect.isawaitable(result):
        await result


class BookingFormController:
    FIELDS = ("start_date", "end_date")

    def __init__(
        self,
        equipment: Equipment,
        api: BookingAPI,
        *,
        on_success: Callback,
        on_close: Optional[Callback] = None,
        availability: Optional[AvailabilityService] = None,
        start_date: str = "",
        end_date: str = "",
        available: Optional[bool] = None,
        settings: Optional[Settings] = None,
        today: Callable[[], date] = dates.today,
    ):
        settings = settings or get_settings()
        self.equipment = equipment
        self.api = api
        self.availability = availability
        self.on_success = on_success
        self.on_close = on_close
        self.available = equipment.available if available is None else available
        self.close_delay = settings.BOOKING_SUCCESS_CLOSE_DELAY
        self.advisory_check = settings.ADVISORY_OVERLAP_CHECK and availability is not None
        self._today = today

        self.form = {"start_date": start_date or "", "end_date": end_date or ""}
        self.state = FormState.IDLE
        self.error = ""
        self.overlap_error = False
        self.success = ""
        self.booking: Optional[Booking] = None
        self.closed = False

        # One key per draft, reused if the same draft is resubmitted
        self._idempotency_key: Optional[str] = None
        self._close_task: Optional[asyncio.Task] = None

    # -- derived state ---------------------------------------------------

    @property
    def loading(self) -> bool:
        return self.state is FormState.SUBMITTING

    @property
    def pending(self) -> bool:
        """True while the post-success callback has not run yet."""
        return self._close_task is not None and not self._close_task.done()

    @property
    def overlap_message(self) -> Optional[str]:
        return OVERLAP_MESSAGE if self.overlap_error else None

    def _parsed_dates(self) -> Optional[tuple[date, date]]:
        try:
            return dates.parse_date(self.form["start_date"]), dates.parse_date(self.form["end_date"])
        except InvalidDateError:
            return None

    @property
    def days(self) -> int:
        parsed = self._parsed_dates()
        return quote(self.equipment, *parsed).days if parsed else 0

    @property
    def total_cost(self) -> Decimal:
        parsed = self._parsed_dates()
        return quote(self.equipment, *parsed).total if parsed else Decimal("0")

    @property
    def can_submit(self) -> bool:
        return not self.loading and self.available is not False and self.days > 0

    # -- input -----------------------------------------------------------

    def handle_change(self, field: str, value: str) -> None:
        if field not in self.FIELDS:
            raise ValueError(f"Unknown booking form field: {field}")
        self.form[field] = value
        self.error = ""
        self.overlap_error = False
        self._idempotency_key = None
        if self.state is FormState.ERROR:
            self.state = FormState.IDLE

    # -- submission ------------------------------------------------------

    def _fail(self, message: str) -> None:
        self.error = message
        self.state = FormState.ERROR
        return None

    async def submit(self) -> Optional[Booking]:
        """
        Validate and send the booking request.

        Returns the created booking, or None when the request was rejected
        locally or by the server (see ``error`` / ``overlap_error``).
        """
        if self.state in (FormState.SUBMITTING, FormState.SUCCESS):
            logger.debug("booking_submit_ignored", state=self.state.value)
            return None

        self.state = FormState.SUBMITTING
        self.success = ""
        self.error = ""
        self.overlap_error = False

        try:
            start, end = validate_booking_dates(
                self.form["start_date"], self.form["end_date"], self._today()
            )
        except BookingValidationError as e:
            record_booking_attempt("invalid")
            logger.info("booking_rejected_locally", field=e.field, reason=e.message)
            return self._fail(e.message)

        if self.available is False:
            record_booking_attempt("invalid")
            return self._fail(UNAVAILABLE_MESSAGE)

        if self.advisory_check:
            try:
                conflicts = await self.availability.find_conflicts(self.equipment.id, start, end)
            except (APIError, ValueError) as e:
                # Pre-check is best effort; the server still validates.
                # ValueError covers unreadable JSON and pydantic ValidationError.
                logger.warning("advisory_check_skipped", equipment_id=self.equipment.id, error=str(e))
                conflicts = []
            if conflicts:
                record_booking_attempt("conflict")
                logger.info(
                    "booking_conflict_detected_locally",
                    equipment_id=self.equipment.id,
                    conflicting_ids=[b.id for b in conflicts],
                )
                self.overlap_error = True
                return self._fail(OVERLAP_MESSAGE)

        if self._idempotency_key is None:
            self._idempotency_key = uuid.uuid4().hex

        started = time.perf_counter()
        try:
            booking = await self.api.create_booking(
                BookingCreate(equipment_id=self.equipment.id, start_date=start, end_date=end),
                idempotency_key=self._idempotency_key,
            )
        except BookingConflictError as e:
            record_booking_attempt("conflict")
            logger.info("booking_conflict", equipment_id=self.equipment.id, status_code=e.status_code)
            self.overlap_error = True
            if self.availability is not None:
                self.availability.invalidate(self.equipment.id)
            return self._fail(e.message)
        except APIError as e:
            record_booking_attempt("error")
            logger.warning("booking_failed", equipment_id=self.equipment.id, status_code=e.status_code, error=e.message)
            return self._fail(e.message or CREATE_FAILED)
        except Exception:
            # e.g. a 201 whose body is not a booking
            record_booking_attempt("error")
            logger.exception("booking_failed_unexpectedly", equipment_id=self.equipment.id)
            return self._fail(CREATE_FAILED)
        finally:
            booking_latency.observe(time.perf_counter() - started)

        record_booking_attempt("success")
        self.booking = booking
        self.state = FormState.SUCCESS
        self.success = SUCCESS_MESSAGE
        self._idempotency_key = None
        if self.availability is not None:
            self.availability.invalidate(self.equipment.id)

        self._close_task = asyncio.create_task(self._finish())
        return booking

    async def _finish(self) -> None:
        # Leave the success message on screen before handing back
        await asyncio.sleep(self.close_delay)
        await _invoke(self.on_success)
        await self.close()

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        await _invoke(self.on_close)

    async def wait_closed(self) -> None:
        """Wait for the post-success callback and close to run."""
        if self._close_task is not None:
            await self._close_task
