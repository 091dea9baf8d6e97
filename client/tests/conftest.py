"""
Pytest fixtures for the fake backend, HTTP client and authenticated session.

The fake backend is a FastAPI app served in-process through
httpx.ASGITransport, so every test gets a fresh, isolated server state.
"""

from datetime import date
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio

from smartfarm.api.bookings import BookingAPI
from smartfarm.api.middleware import RequestLoggingHooks
from smartfarm.core.config import Settings
from smartfarm.schemas.equipment import Equipment
from smartfarm.schemas.user import User
from smartfarm.services.availability import AvailabilityService
from smartfarm.services.interfaces.memory_store import MemorySessionStore
from smartfarm.services.session import SessionManager

from tests.fake_backend import FARMER, FakeBackend

TODAY = date(2024, 6, 1)
EQUIPMENT_ID = "eq-tractor-1"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        ENVIRONMENT="test",
        BACKEND_URL="http://test",
        SESSION_STORE="memory",
        BOOKING_SUCCESS_CLOSE_DELAY=0.05,
        SSE_ENABLED=False,
        SSE_RECONNECT_DELAY=0.01,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def equipment() -> Equipment:
    return Equipment.model_validate({
        "_id": EQUIPMENT_ID,
        "name": "Mahindra 575 DI Tractor",
        "type": "Tractor",
        "price": "1500",
        "description": "45 HP, well maintained",
        "available": True,
    })


@pytest_asyncio.fixture
async def http(backend: FakeBackend) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client wired to the fake backend."""
    transport = httpx.ASGITransport(app=backend.app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://test",
        event_hooks=RequestLoggingHooks().as_event_hooks(),
    ) as client:
        yield client


@pytest_asyncio.fixture
async def session(http: httpx.AsyncClient) -> SessionManager:
    """Session logged in as the farmer."""
    manager = SessionManager(http, MemorySessionStore())
    manager.login_with(User.model_validate(FARMER), "token-farmer")
    return manager


@pytest_asyncio.fixture
async def booking_api(http: httpx.AsyncClient, session: SessionManager) -> BookingAPI:
    return BookingAPI(http, token_provider=lambda: session.token)


@pytest_asyncio.fixture
async def availability(booking_api: BookingAPI, settings: Settings) -> AvailabilityService:
    return AvailabilityService(booking_api, settings)


def mock_client(handler) -> httpx.AsyncClient:
    """HTTP client whose responses come from ``handler(request)``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
