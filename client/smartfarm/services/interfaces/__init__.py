"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .session_store import SessionStore
from .memory_store import MemorySessionStore

__all__ = ['SessionStore', 'MemorySessionStore']
