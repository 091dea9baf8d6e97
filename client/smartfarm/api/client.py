"""
Base HTTP client for the SmartFarm backend.

Wraps an ``httpx.AsyncClient`` and turns every non-success response into an
APIError carrying the best message the server provided. There is no retry:
a failed call surfaces immediately and the caller decides what to do.
"""

from typing import Any, Callable, Collection, Optional

import httpx

from smartfarm.api.middleware import clear_request_context
from smartfarm.core.exceptions import APIConnectionError, APIError, BookingConflictError
from smartfarm.core.logging import get_logger

logger = get_logger(__name__)

TokenProvider = Callable[[], Optional[str]]

GENERIC_ERROR = "Request failed"


def extract_error_message(response: httpx.Response, fallback: str) -> str:
    """Pull a human-readable message out of a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return fallback

    if isinstance(body, dict):
        for key in ("message", "error", "details"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return fallback


def unwrap(payload: Any, *keys: str) -> Any:
    """Return the first of ``keys`` present in a dict envelope, else the payload."""
    if isinstance(payload, dict):
        for key in keys:
            if key in payload:
                return payload[key]
    return payload


class ApiClient:
    def __init__(self, http: httpx.AsyncClient, token_provider: Optional[TokenProvider] = None):
        self.http = http
        self._token_provider = token_provider or (lambda: None)

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
        fallback_message: str = GENERIC_ERROR,
        conflict_statuses: Collection[int] = (),
    ) -> httpx.Response:
        request_headers = {**self._auth_headers(), **(headers or {})}
        try:
            response = await self.http.request(method, path, json=json, headers=request_headers)
        except httpx.TransportError as e:
            logger.error("request_failed", method=method, path=path, error=str(e))
            raise APIConnectionError(f"{fallback_message}: {e}") from e
        finally:
            clear_request_context()

        if response.is_success:
            return response

        message = extract_error_message(response, fallback_message)
        if response.status_code in conflict_statuses:
            raise BookingConflictError(message, status_code=response.status_code)
        raise APIError(message, status_code=response.status_code)
