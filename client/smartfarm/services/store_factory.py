"""
Session store factory.
Configures where the session is persisted.
"""

from typing import Optional

from smartfarm.core.config import Settings, get_settings
from smartfarm.services.file_session_store import FileSessionStore
from smartfarm.services.interfaces.memory_store import MemorySessionStore
from smartfarm.services.interfaces.session_store import SessionStore


def get_session_store(settings: Optional[Settings] = None) -> SessionStore:
    """
    Get configured session store.

    Selected by the SESSION_STORE setting:
    - file: FileSessionStore at SESSION_FILE (default)
    - memory: MemorySessionStore
    """
    settings = settings or get_settings()

    if settings.SESSION_STORE == "memory":
        return MemorySessionStore()
    if settings.SESSION_STORE == "file":
        return FileSessionStore(settings.SESSION_FILE)
    raise ValueError(f"Unknown SESSION_STORE: {settings.SESSION_STORE!r}")
