"""
File-backed session store.

Persists ``{user, token}`` as JSON so a login survives restarts. A file that
cannot be parsed is deleted and treated as "no session", the same way a
corrupt saved login is dropped instead of crashing startup.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from smartfarm.core.logging import get_logger
from smartfarm.schemas.user import StoredSession
from smartfarm.services.interfaces.session_store import SessionStore

logger = get_logger(__name__)


class FileSessionStore(SessionStore):

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[StoredSession]:
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return StoredSession.model_validate(raw)
        except (ValueError, ValidationError) as e:
            logger.error("session_file_corrupt", path=str(self.path), error=str(e))
            self.clear()
            return None

    def save(self, session: StoredSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(session.model_dump_json(), encoding="utf-8")
        # Token is a credential: owner read/write only
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
