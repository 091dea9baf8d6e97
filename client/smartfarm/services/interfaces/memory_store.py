"""
In-memory session store.
"""

from typing import Optional

from smartfarm.schemas.user import StoredSession
from smartfarm.services.interfaces.session_store import SessionStore


class MemorySessionStore(SessionStore):
    """
    Keeps the session for the lifetime of the process only.

    Use when:
    - Running tests
    - One-shot scripts that log in on every run
    """

    def __init__(self, session: Optional[StoredSession] = None):
        self._session = session

    def load(self) -> Optional[StoredSession]:
        return self._session

    def save(self, session: StoredSession) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None
