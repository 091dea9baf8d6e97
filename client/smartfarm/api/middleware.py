"""
HTTP client hooks for logging, timing, and request ID tracking.
"""

import time
import uuid

import httpx
import structlog

from smartfarm.core.logging import get_logger
from smartfarm.core.metrics import record_api_request

logger = get_logger(__name__)

_START_KEY = "smartfarm.start_time"


class RequestLoggingHooks:
    """
    httpx event hooks that:
    1. Assign a unique request ID to each outgoing request (X-Request-ID)
    2. Log request method, path, status code, and duration
    3. Bind request context to structlog for correlation
    """

    async def on_request(self, request: httpx.Request) -> None:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.headers["X-Request-ID"] = request_id
        request.extensions[_START_KEY] = time.perf_counter()

        # Bind request context for all downstream log calls
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

    async def on_response(self, response: httpx.Response) -> None:
        request = response.request
        start_time = request.extensions.get(_START_KEY, time.perf_counter())
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        record_api_request(request.method, response.status_code)
        log = logger.info if response.is_success else logger.warning
        log(
            "request_completed",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

    def as_event_hooks(self) -> dict[str, list]:
        return {"request": [self.on_request], "response": [self.on_response]}


def clear_request_context() -> None:
    structlog.contextvars.unbind_contextvars("request_id", "method", "path")
