import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from pastebin.config import Settings
from pastebin.database import Database
from pastebin.main import create_app
from pastebin.models.user import User
from pastebin.services.site_settings import Limits
from pastebin.storage.local import LocalStorage

ADMIN_PASSWORD = "admin-pass"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client: TestClient, username: str, password: str) -> str:
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret-key",
        DATABASE_URL=f"sqlite+aiosqlite:///{(tmp_path / 'app.db').as_posix()}",
        UPLOAD_DIR=tmp_path / "uploads",
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        SWEEP_IN_PROCESS=False,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def admin_headers(client):
    return auth(login(client, "admin", ADMIN_PASSWORD))


@pytest.fixture
def register_user(client, admin_headers):
    def _register(username: str, password: str = "secret-pass") -> dict:
        code = client.post("/api/admin/invite-codes", headers=admin_headers).json()["code"]
        response = client.post(
            "/api/auth/register",
            json={"username": username, "password": password, "inviteCode": code},
        )
        assert response.status_code == 200, response.text
        return auth(login(client, username, password))
    return _register


@pytest.fixture
def alice(register_user):
    return register_user("alice")


@pytest.fixture
def bob(register_user):
    return register_user("bob")


# ---------------------------------------------------------------------------
# Store-level fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def db(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{(tmp_path / 'store.db').as_posix()}")
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
async def session(db):
    async with db.session_maker() as session:
        yield session


async def _add_user(session, username: str, role: str = "user") -> User:
    user = User(username=username, hashed_password="unused", role=role)
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def owner(session):
    return await _add_user(session, "owner")


@pytest.fixture
async def stranger(session):
    return await _add_user(session, "stranger")


@pytest.fixture
async def admin(session):
    return await _add_user(session, "root", role="admin")


@pytest.fixture
def storage(tmp_path):
    storage = LocalStorage(tmp_path / "files")
    storage.ensure_root()
    return storage


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def limits():
    return Limits(max_file_size_bytes=10 * 1024 * 1024, max_expiration_days=30)
