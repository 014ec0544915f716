"""Pytest configuration and fixtures for API and service tests."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["INITIAL_ADMIN_PASSWORD"] = ""

import pytest
from httpx import ASGITransport, AsyncClient

from landing.models import Database
from landing.services.accounts import register_user
from landing.services.configurations import ConfigurationRepository
from web.api.main import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "testpass123"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def database(tmp_path):
    """Fresh file-backed SQLite database per test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.init()
    yield db
    await db.dispose()


@pytest.fixture
async def admin(database):
    return await register_user(database, ADMIN_EMAIL, ADMIN_PASSWORD, name="Administrator", role="admin")


@pytest.fixture
def repo(database):
    return ConfigurationRepository(database)


@pytest.fixture
def app(database):
    """App wired to the test database (ASGI lifespan doesn't run with httpx)."""
    return create_app(database)


@pytest.fixture
async def client(app):
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def auth_client(client, admin):
    """Client holding the auth cookie of a logged-in admin."""
    r = await client.post(
        "/api/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    return client
