"""
Session storage interface.
Allows swapping where the logged-in user and token are persisted.
"""

from abc import ABC, abstractmethod
from typing import Optional

from smartfarm.schemas.user import StoredSession


class SessionStore(ABC):
    """
    Interface for session persistence back-ends.

    Implementations:
    - MemorySessionStore: process lifetime only (tests, short scripts)
    - FileSessionStore: JSON file in the user's home directory
    """

    @abstractmethod
    def load(self) -> Optional[StoredSession]:
        """
        Load the persisted session.

        Returns:
            The stored session, or None if nothing usable is stored.
            Corrupt data is discarded rather than raised.
        """
        pass

    @abstractmethod
    def save(self, session: StoredSession) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass
