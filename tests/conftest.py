"""Pytest configuration and fixtures for theme options tests."""
import os
import tempfile
from pathlib import Path

# Set test env BEFORE any imports that use config
_db_path = Path(tempfile.gettempdir()) / f"tender_spring_test_{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_path}"
os.environ["INITIAL_ADMIN_PASSWORD"] = "testpass123"
os.environ["INITIAL_ADMIN_USERNAME"] = "admin"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete

from theme.models import Option, User
from theme.models.base import engine, init_db
from theme.services.option_store import OptionStore, SettingsRegistry
from theme.services.theme_options import ThemeOptions
from web.api.main import app


class MemoryOptionStore(OptionStore):
    """Dict-backed option store for pipeline tests."""

    def __init__(self, initial=None):
        self.data = dict(initial or {})
        self.writes = []

    async def get(self, name):
        return self.data.get(name)

    async def set(self, name, value):
        self.writes.append((name, value))
        self.data[name] = value


@pytest.fixture(autouse=True)
async def _init_db():
    """Fresh tables before each test (ASGI lifespan doesn't run with httpx)."""
    await init_db()
    async with engine.begin() as conn:
        await conn.execute(delete(Option))
        await conn.execute(delete(User))


@pytest.fixture
def store():
    return MemoryOptionStore()


@pytest.fixture
def registry(store):
    return SettingsRegistry(store)


@pytest.fixture
def theme_options(store):
    return ThemeOptions(store)


@pytest.fixture
async def client():
    """Async HTTP client for testing the admin app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def auth_headers(client):
    """Login as admin and return Authorization headers for protected endpoints."""
    r = await client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "testpass123"},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    token = r.json()["access_token"]
    client.cookies.clear()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def user_headers(client, auth_headers):
    """Create a plain user (no theme capabilities) and return its headers."""
    r = await client.post(
        "/api/auth/users",
        json={"username": "reader", "password": "readerpass", "role": "user"},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    r = await client.post(
        "/api/auth/login",
        json={"username": "reader", "password": "readerpass"},
    )
    assert r.status_code == 200, r.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
