"""
Session manager holding the authenticated user and bearer token.

One SessionManager is created per client and handed to everything that
issues authenticated requests. Its lifecycle is explicit:

  restore_session()  load the persisted session and re-validate it
  login()/login_with()  establish a new session
  clear_session()    drop it locally and tell the server

Validation on restore:
  - 401/403 from /api/auth/me: token is dead, session cleared
  - backend unreachable: stored session kept, validated on next start
"""

from typing import Any, Optional

import httpx

from smartfarm.api.auth import AuthAPI
from smartfarm.core.exceptions import APIConnectionError, APIError, NotAuthenticatedError
from smartfarm.core.logging import get_logger
from smartfarm.schemas.user import StoredSession, User, UserLogin
from smartfarm.services.interfaces.session_store import SessionStore

logger = get_logger(__name__)

UNAUTHORIZED_STATUSES = (401, 403)


class SessionManager:

    def __init__(self, http: httpx.AsyncClient, store: SessionStore):
        self.store = store
        self.auth = AuthAPI(http, token_provider=lambda: self.token)
        self.user: Optional[User] = None
        self.token: Optional[str] = None
        self.is_loading = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and bool(self.token)

    def require_user(self) -> User:
        if not self.is_authenticated:
            raise NotAuthenticatedError("Please log in first")
        return self.user

    async def restore_session(self) -> Optional[User]:
        """Load the stored session and check it is still accepted by the backend."""
        stored = self.store.load()
        if stored is None:
            self.is_loading = False
            return None

        self.user, self.token = stored.user, stored.token
        try:
            data = await self.auth.me()
        except APIConnectionError as e:
            logger.warning("session_validation_skipped", reason="backend_unreachable", error=e.message)
        except APIError as e:
            if e.status_code in UNAUTHORIZED_STATUSES:
                logger.info("session_expired", user_id=stored.user.id)
                self._reset()
            else:
                logger.warning("session_validation_failed", status_code=e.status_code, error=e.message)
        else:
            self.user = data.user
            self._persist()
            logger.info("session_restored", user_id=self.user.id)
        finally:
            self.is_loading = False

        return self.user

    async def login(self, email: str, password: str) -> User:
        data = await self.auth.login(UserLogin(email=email, password=password))
        if not data.token:
            raise APIError("Login response did not include a token")
        return self.login_with(data.user, data.token)

    def login_with(self, user: User, token: str) -> User:
        self.user, self.token = user, token
        self._persist()
        logger.info("user_logged_in", user_id=user.id, login_method=user.login_method)
        return user

    def update_user(self, **updates: Any) -> User:
        """Merge profile updates; accepts both camelCase and snake_case keys."""
        user = self.require_user()
        merged = {**user.model_dump(), **updates}
        self.user = User.model_validate(merged)
        self._persist()
        return self.user

    async def clear_session(self, notify_server: bool = True) -> None:
        if notify_server and self.token:
            try:
                await self.auth.logout()
            except APIError as e:
                # Local logout must still happen
                logger.warning("logout_request_failed", status_code=e.status_code, error=e.message)
        user_id = self.user.id if self.user else None
        self._reset()
        logger.info("session_cleared", user_id=user_id)

    def _persist(self) -> None:
        if self.user is not None and self.token:
            self.store.save(StoredSession(user=self.user, token=self.token))

    def _reset(self) -> None:
        self.user = None
        self.token = None
        self.store.clear()
