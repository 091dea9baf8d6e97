"""
SmartFarm Booking Client - Main Entry Point

Composes the client-side booking flow:
- Session restore and validation against the backend
- Advisory date validation and overlap checks before submitting
- Booking requests with conflict-aware error reporting
- Server-sent events that invalidate cached booking lists

Usage:
    async with SmartFarmClient() as client:
        await client.session.login(email, password)
        form = client.booking_form(equipment, on_success=refresh)
        form.handle_change("start_date", "2024-06-01")
        form.handle_change("end_date", "2024-06-05")
        await form.submit()
"""

from typing import Optional

import httpx

from smartfarm.api.bookings import BookingAPI
from smartfarm.api.middleware import RequestLoggingHooks
from smartfarm.controllers.booking_form import BookingFormController, Callback
from smartfarm.core.config import Settings, get_settings
from smartfarm.core.logging import get_logger, setup_logging
from smartfarm.realtime.events import BookingEventStream
from smartfarm.schemas.equipment import Equipment
from smartfarm.services.availability import AvailabilityService
from smartfarm.services.interfaces.session_store import SessionStore
from smartfarm.services.session import SessionManager
from smartfarm.services.store_factory import get_session_store


class SmartFarmClient:
    """Client lifecycle: startup on ``__aenter__``, shutdown on ``__aexit__``."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        configure_logging: bool = True,
    ):
        self.settings = settings or get_settings()
        self._store = store
        self._transport = transport
        self._configure_logging = configure_logging
        self.http: Optional[httpx.AsyncClient] = None
        self.session: Optional[SessionManager] = None
        self.bookings: Optional[BookingAPI] = None
        self.availability: Optional[AvailabilityService] = None
        self.events: Optional[BookingEventStream] = None
        self._forms: list[BookingFormController] = []

    async def __aenter__(self) -> "SmartFarmClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        if self._configure_logging:
            setup_logging(self.settings)
        logger = get_logger(__name__)

        logger.info(
            "client_starting",
            app=self.settings.APP_NAME,
            version=self.settings.APP_VERSION,
            environment=self.settings.ENVIRONMENT,
            backend=self.settings.BACKEND_URL,
        )

        self.http = httpx.AsyncClient(
            base_url=self.settings.BACKEND_URL,
            timeout=self.settings.REQUEST_TIMEOUT,
            transport=self._transport,
            event_hooks=RequestLoggingHooks().as_event_hooks(),
        )
        self.session = SessionManager(self.http, self._store or get_session_store(self.settings))
        self.bookings = BookingAPI(self.http, token_provider=lambda: self.session.token)
        self.availability = AvailabilityService(self.bookings, self.settings)
        self.events = BookingEventStream(self.http, self.session, self.availability, self.settings)

        user = await self.session.restore_session()
        if user is not None:
            logger.info("session_ready", user_id=user.id)
            self.start_events()
        else:
            logger.info("session_absent", message="Log in to book equipment")

    def start_events(self) -> None:
        """Start listening for booking events if enabled and logged in."""
        if self.settings.SSE_ENABLED and self.session.is_authenticated:
            self.events.start()

    async def login(self, email: str, password: str) -> None:
        await self.session.login(email, password)
        self.start_events()

    async def logout(self) -> None:
        await self.events.stop()
        await self.session.clear_session()
        self.availability.invalidate()

    def booking_form(
        self,
        equipment: Equipment,
        *,
        on_success: Callback,
        on_close: Optional[Callback] = None,
        start_date: str = "",
        end_date: str = "",
        available: Optional[bool] = None,
    ) -> BookingFormController:
        """
        Build a booking form bound to this client.

        Forms still waiting to run their post-success callback are awaited
        by close(), before the HTTP client goes away.
        """
        self._forms = [f for f in self._forms if f.pending or not f.closed]
        form = BookingFormController(
            equipment,
            self.bookings,
            on_success=on_success,
            on_close=on_close,
            availability=self.availability,
            start_date=start_date,
            end_date=end_date,
            available=available,
            settings=self.settings,
        )
        self._forms.append(form)
        return form

    async def close(self) -> None:
        for form in self._forms:
            await form.wait_closed()
        self._forms = []
        if self.events is not None:
            await self.events.stop()
        if self.http is not None:
            await self.http.aclose()
        get_logger(__name__).info("client_shutdown")
