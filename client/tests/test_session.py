"""
Tests for the session manager and session stores.
"""

import httpx
import pytest

from smartfarm.core.config import Settings
from smartfarm.core.exceptions import APIError, NotAuthenticatedError
from smartfarm.schemas.user import StoredSession, User
from smartfarm.services.file_session_store import FileSessionStore
from smartfarm.services.interfaces.memory_store import MemorySessionStore
from smartfarm.services.session import SessionManager
from smartfarm.services.store_factory import get_session_store

from tests.conftest import mock_client
from tests.fake_backend import FARMER


def _stored(token: str = "token-farmer") -> StoredSession:
    return StoredSession(user=User.model_validate(FARMER), token=token)


@pytest.mark.asyncio
async def test_restore_without_stored_session(http: httpx.AsyncClient, backend):
    manager = SessionManager(http, MemorySessionStore())

    assert await manager.restore_session() is None
    assert manager.is_authenticated is False
    assert manager.is_loading is False
    assert backend.requests == []


@pytest.mark.asyncio
async def test_restore_validates_token(http: httpx.AsyncClient, backend):
    manager = SessionManager(http, MemorySessionStore(_stored()))

    user = await manager.restore_session()

    assert user.id == "u-farmer"
    assert manager.is_authenticated
    assert backend.count("GET", "/api/auth/me") == 1


@pytest.mark.asyncio
async def test_restore_with_expired_token_clears_session(http: httpx.AsyncClient):
    store = MemorySessionStore(_stored(token="revoked"))
    manager = SessionManager(http, store)

    assert await manager.restore_session() is None
    assert manager.is_authenticated is False
    assert store.load() is None


@pytest.mark.asyncio
async def test_restore_keeps_session_when_backend_unreachable():
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store = MemorySessionStore(_stored())
    async with mock_client(handler) as http:
        manager = SessionManager(http, store)
        user = await manager.restore_session()

    assert user is not None
    assert manager.is_authenticated
    assert store.load() is not None


@pytest.mark.asyncio
async def test_login_persists_session(http: httpx.AsyncClient):
    store = MemorySessionStore()
    manager = SessionManager(http, store)

    user = await manager.login("owner@example.com", "secret456")

    assert user.id == "64b000000000000000000002"
    assert user.login_method == "google"
    assert manager.token == "token-owner"
    assert store.load().token == "token-owner"


@pytest.mark.asyncio
async def test_login_with_wrong_password(http: httpx.AsyncClient):
    manager = SessionManager(http, MemorySessionStore())

    with pytest.raises(APIError) as exc:
        await manager.login("farmer@example.com", "nope")

    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid email or password"
    assert manager.is_authenticated is False


@pytest.mark.asyncio
async def test_clear_session_notifies_server(http: httpx.AsyncClient, backend):
    store = MemorySessionStore(_stored())
    manager = SessionManager(http, store)
    await manager.restore_session()

    await manager.clear_session()

    assert backend.count("POST", "/api/auth/logout") == 1
    assert manager.user is None
    assert manager.token is None
    assert store.load() is None


@pytest.mark.asyncio
async def test_clear_session_survives_failed_logout(http: httpx.AsyncClient):
    manager = SessionManager(http, MemorySessionStore())
    manager.login_with(User.model_validate(FARMER), "revoked")

    await manager.clear_session()

    assert manager.is_authenticated is False


@pytest.mark.asyncio
async def test_update_user_maps_field_names(http: httpx.AsyncClient):
    store = MemorySessionStore()
    manager = SessionManager(http, store)
    manager.login_with(User.model_validate(FARMER), "token-farmer")

    manager.update_user(profilePicture="/uploads/ravi.png", phone="+91 98765 43210")

    assert manager.user.profile_picture == "/uploads/ravi.png"
    assert manager.user.phone == "+91 98765 43210"
    assert store.load().user.profile_picture == "/uploads/ravi.png"


@pytest.mark.asyncio
async def test_update_user_requires_login(http: httpx.AsyncClient):
    manager = SessionManager(http, MemorySessionStore())
    with pytest.raises(NotAuthenticatedError):
        manager.update_user(name="x")


def test_file_store_roundtrip(tmp_path):
    store = FileSessionStore(tmp_path / "nested" / "session.json")
    assert store.load() is None

    store.save(_stored())

    loaded = store.load()
    assert loaded.token == "token-farmer"
    assert loaded.user.email == "farmer@example.com"
    assert (store.path.stat().st_mode & 0o777) == 0o600


def test_file_store_discards_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    store = FileSessionStore(path)

    assert store.load() is None
    assert not path.exists()


def test_file_store_discards_invalid_shape(tmp_path):
    path = tmp_path / "session.json"
    path.write_text('{"user": {"name": "no id"}, "token": "t"}', encoding="utf-8")

    assert FileSessionStore(path).load() is None
    assert not path.exists()


def test_store_factory(tmp_path):
    assert isinstance(get_session_store(Settings(SESSION_STORE="memory")), MemorySessionStore)

    store = get_session_store(Settings(SESSION_STORE="file", SESSION_FILE=str(tmp_path / "s.json")))
    assert isinstance(store, FileSessionStore)

    with pytest.raises(ValueError):
        get_session_store(Settings(SESSION_STORE="redis"))
