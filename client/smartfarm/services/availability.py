"""
Availability service: cached equipment bookings and the advisory conflict check.

CACHING STRATEGY
================

What we cache:
  - The booking list of each equipment item, keyed by equipment id

Why:
  - The booking calendar and the form pre-check both need it, often for the
    same equipment within seconds

Invalidation strategy:
  - Server-sent booking events drop the entry for the equipment they name
    (or everything, when the event does not say which equipment)
  - A successful booking drops the entry for its equipment
  - TTL-based expiry as safety net (BOOKING_CACHE_TTL)

Invalidation only narrows the staleness window. A booking made elsewhere
after our last fetch is invisible until the backend rejects our request.
"""

import time
from datetime import date
from typing import Callable, Optional

from smartfarm.api.bookings import BookingAPI
from smartfarm.core.config import Settings, get_settings
from smartfarm.core.logging import get_logger
from smartfarm.core.metrics import record_cache_lookup
from smartfarm.schemas.booking import Booking, BookingStatus
from smartfarm.services.overlap import DateRange, find_conflicts, is_date_unavailable

logger = get_logger(__name__)


class AvailabilityService:

    def __init__(
        self,
        api: BookingAPI,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = settings or get_settings()
        self.api = api
        self.ttl = settings.BOOKING_CACHE_TTL
        self.blocking_statuses = [BookingStatus(s) for s in settings.BLOCKING_STATUSES]
        self._clock = clock
        self._entries: dict[str, tuple[float, list[Booking]]] = {}

    async def get_bookings(self, equipment_id: str, refresh: bool = False) -> list[Booking]:
        entry = self._entries.get(equipment_id)
        if entry and not refresh and self._clock() - entry[0] < self.ttl:
            record_cache_lookup(hit=True)
            logger.debug("availability_cache_hit", equipment_id=equipment_id)
            return entry[1]

        record_cache_lookup(hit=False)
        bookings = await self.api.list_equipment_bookings(equipment_id)
        self._entries[equipment_id] = (self._clock(), bookings)
        logger.debug("availability_cache_set", equipment_id=equipment_id, count=len(bookings))
        return bookings

    async def find_conflicts(self, equipment_id: str, start: date, end: date) -> list[Booking]:
        """Known bookings that would block [start, end]. Advisory only."""
        bookings = await self.get_bookings(equipment_id)
        return find_conflicts(DateRange(start, end), bookings, self.blocking_statuses)

    async def check_conflict(self, equipment_id: str, start: date, end: date) -> bool:
        return bool(await self.find_conflicts(equipment_id, start, end))

    async def unavailable_dates(self, equipment_id: str, days: list[date]) -> list[date]:
        """Subset of ``days`` that the calendar should grey out."""
        bookings = await self.get_bookings(equipment_id)
        return [d for d in days if is_date_unavailable(d, bookings, self.blocking_statuses)]

    def invalidate(self, equipment_id: Optional[str] = None) -> None:
        """Drop one equipment's cached bookings, or all of them."""
        if equipment_id is None:
            dropped = len(self._entries)
            self._entries.clear()
        else:
            dropped = 1 if self._entries.pop(equipment_id, None) is not None else 0
        logger.info("availability_cache_invalidated", equipment_id=equipment_id, entries_dropped=dropped)
