"""
Real-time booking notifications over server-sent events.

The backend pushes booking lifecycle events on /api/booking/stream. Each
event prompts a refresh of whatever the user is looking at; it narrows the
window in which stale bookings are shown but does not close it.

Connection policy:
  - Only connects while the session is authenticated
  - On error or end of stream, reconnects after SSE_RECONNECT_DELAY
  - stop() cancels the connection and any pending reconnect
"""

import asyncio
import contextlib
import inspect
import json
from collections import defaultdict
from typing import Awaitable, Callable, Optional, Union

import httpx
from httpx_sse import ServerSentEvent, aconnect_sse
from pydantic import ValidationError

from smartfarm.api import router
from smartfarm.api.middleware import clear_request_context
from smartfarm.core.config import Settings, get_settings
from smartfarm.core.exceptions import APIError
from smartfarm.core.logging import get_logger
from smartfarm.core.metrics import record_sse_event, sse_reconnects
from smartfarm.schemas.event import BOOKING_EVENT_TYPES, CONNECTED, BookingEvent
from smartfarm.services.availability import AvailabilityService
from smartfarm.services.session import SessionManager

logger = get_logger(__name__)

EventHandler = Callable[[BookingEvent], Union[None, Awaitable[None]]]

DEFAULT_EVENT = "message"


def decode_event(sse: ServerSentEvent) -> Optional[BookingEvent]:
    """
    Turn one event-stream frame into a BookingEvent.

    The JSON payload names its own type; the ``event:`` field is used only
    when it does not. Unparsable frames are logged and dropped.
    """
    try:
        raw = json.loads(sse.data)
        if isinstance(raw, dict) and "type" not in raw and sse.event != DEFAULT_EVENT:
            raw["type"] = sse.event
        return BookingEvent.model_validate(raw)
    except (ValueError, ValidationError) as e:
        logger.error("sse_event_unparsable", payload=sse.data[:200], error=str(e))
        return None


class BookingEventStream:

    def __init__(
        self,
        http: httpx.AsyncClient,
        session: SessionManager,
        availability: Optional[AvailabilityService] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.http = http
        self.session = session
        self.availability = availability
        self.reconnect_delay = settings.SSE_RECONNECT_DELAY
        self.connected = False
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._task: Optional[asyncio.Task] = None
        self._stopping = False

    def on(self, event_type: str, handler: EventHandler) -> EventHandler:
        """Register a handler for one event type. Returns the handler."""
        self._handlers[event_type].append(handler)
        return handler

    async def dispatch(self, event: BookingEvent) -> None:
        record_sse_event(event.type)

        if event.type in BOOKING_EVENT_TYPES:
            if self.availability is not None:
                self.availability.invalidate(event.equipment_id)
        elif event.type != CONNECTED:
            logger.info("sse_unknown_event", type=event.type)

        for handler in self._handlers.get(event.type, []):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # One broken listener must not kill the stream
                logger.exception("sse_handler_failed", type=event.type)

    async def _listen_once(self) -> None:
        headers = {}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        async with aconnect_sse(self.http, "GET", router.BOOKING_STREAM, headers=headers, timeout=None) as source:
            if not source.response.is_success:
                raise APIError("Event stream refused", status_code=source.response.status_code)
            self.connected = True
            logger.info("sse_connected")
            async for sse in source.aiter_sse():
                event = decode_event(sse)
                if event is not None:
                    await self.dispatch(event)
        logger.info("sse_stream_ended")

    async def run(self) -> None:
        while not self._stopping:
            if not self.session.is_authenticated:
                logger.info("sse_not_started", reason="not_authenticated")
                return
            try:
                await self._listen_once()
            except (httpx.TransportError, httpx.StreamError, APIError) as e:
                logger.error("sse_connection_error", error=str(e))
            finally:
                self.connected = False
                clear_request_context()

            if self._stopping:
                break
            sse_reconnects.inc()
            logger.info("sse_reconnecting", delay_s=self.reconnect_delay)
            await asyncio.sleep(self.reconnect_delay)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._stopping = False
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        self._stopping = True
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        self.connected = False
