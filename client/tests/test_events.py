"""
Tests for server-sent booking events: parsing, dispatch and reconnects.
"""

import asyncio
import json

import httpx
import pytest
from httpx_sse import ServerSentEvent

from smartfarm.core.config import Settings
from smartfarm.realtime.events import BookingEventStream, decode_event
from smartfarm.schemas.user import User
from smartfarm.services.interfaces.memory_store import MemorySessionStore
from smartfarm.services.session import SessionManager

from tests.conftest import mock_client
from tests.fake_backend import FARMER

SETTINGS = Settings(SSE_RECONNECT_DELAY=0.01)


def _frame(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _stream_response(*frames: str) -> httpx.Response:
    return httpx.Response(
        200,
        headers={"content-type": "text/event-stream"},
        content="".join(frames).encode(),
    )


class RecordingAvailability:
    def __init__(self):
        self.invalidated = []

    def invalidate(self, equipment_id=None):
        self.invalidated.append(equipment_id)


def _session(http: httpx.AsyncClient, token: str = "token-farmer") -> SessionManager:
    manager = SessionManager(http, MemorySessionStore())
    manager.login_with(User.model_validate(FARMER), token)
    return manager


def test_decode_event():
    event = decode_event(ServerSentEvent(data='{"type": "connected", "message": "hi"}'))
    assert event.type == "connected"
    assert event.message == "hi"

    # The event field names the type when the payload does not
    named = decode_event(ServerSentEvent(
        event="booking_approved",
        data='{"message": "Your booking was approved",\n "booking": {"equipmentId": "eq-1"}}',
    ))
    assert named.type == "booking_approved"
    assert named.equipment_id == "eq-1"

    assert decode_event(ServerSentEvent(data="{broken")) is None
    assert decode_event(ServerSentEvent(data='{"message": "no type"}')) is None


@pytest.mark.asyncio
async def test_stream_framing():
    seen = []
    done = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        return _stream_response(
            ": keep-alive\n\n",
            "event: booking_approved\n",
            'data: {"message": "Your booking was approved",\n',
            'data:  "booking": {"equipmentId": "eq-1"}}\n\n',
            "data: {broken\n\n",
            _frame({"type": "connected"}),
            'data: {"type": "new_booking"}\n',  # cut off: no terminating blank line
        )

    async with mock_client(handler) as http:
        stream = BookingEventStream(http, _session(http), settings=SETTINGS)
        stream.on("booking_approved", lambda event: seen.append(event))
        stream.on("new_booking", lambda event: seen.append(event))
        stream.on("connected", lambda event: done.set())
        stream.start()
        await asyncio.wait_for(done.wait(), timeout=2)
        await stream.stop()

    assert seen
    assert all(event.type == "booking_approved" for event in seen)
    assert seen[0].equipment_id == "eq-1"


@pytest.mark.asyncio
async def test_dispatch_runs_handlers_and_invalidates_cache():
    seen = []
    received = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer token-farmer"
        assert request.headers["Accept"] == "text/event-stream"
        return _stream_response(
            _frame({"type": "connected", "message": "SSE connection established"}),
            _frame({"type": "new_booking", "message": "New request", "booking": {"equipmentId": "eq-7"}}),
            _frame({"type": "booking_cancelled", "message": "Cancelled"}),
            _frame({"type": "mystery", "message": "?"}),
        )

    availability = RecordingAvailability()
    async with mock_client(handler) as http:
        stream = BookingEventStream(http, _session(http), availability, SETTINGS)
        stream.on("new_booking", lambda event: seen.append(event.type))

        async def on_cancelled(event):
            seen.append(event.type)
            received.set()

        stream.on("booking_cancelled", on_cancelled)
        stream.start()
        await asyncio.wait_for(received.wait(), timeout=2)
        await stream.stop()

    assert seen[:2] == ["new_booking", "booking_cancelled"]
    # Specific equipment first, then "everything" for the event without one
    assert availability.invalidated[:2] == ["eq-7", None]
    assert stream.connected is False


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_the_stream():
    later = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        return _stream_response(
            _frame({"type": "booking_updated"}),
            _frame({"type": "booking_completed"}),
        )

    def broken(event):
        raise RuntimeError("listener bug")

    async with mock_client(handler) as http:
        stream = BookingEventStream(http, _session(http), settings=SETTINGS)
        stream.on("booking_updated", broken)
        stream.on("booking_completed", lambda event: later.set())
        stream.start()
        await asyncio.wait_for(later.wait(), timeout=2)
        await stream.stop()


@pytest.mark.asyncio
async def test_reconnects_after_connection_error():
    attempts = []
    received = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection reset", request=request)
        if len(attempts) == 2:
            return httpx.Response(503, json={"message": "busy"})
        return _stream_response(_frame({"type": "booking_approved"}))

    async with mock_client(handler) as http:
        stream = BookingEventStream(http, _session(http), settings=SETTINGS)
        stream.on("booking_approved", lambda event: received.set())
        stream.start()
        await asyncio.wait_for(received.wait(), timeout=2)
        await stream.stop()

    assert len(attempts) >= 3


@pytest.mark.asyncio
async def test_does_not_connect_without_session():
    calls = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return _stream_response()

    async with mock_client(handler) as http:
        stream = BookingEventStream(http, SessionManager(http, MemorySessionStore()), settings=SETTINGS)
        await asyncio.wait_for(stream.start(), timeout=2)

    assert calls == []
