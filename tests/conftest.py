"""Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite, one shared
connection) installed on ``app.state`` the same way the lifespan handler
installs the real one.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Set testing mode BEFORE importing app to disable rate limits
os.environ["TESTING"] = "true"

from ecotracker.config import settings

settings.testing = True

from ecotracker.core.security import create_access_token, hash_password
from ecotracker.database import Database
from ecotracker.main import app
from ecotracker.models import Device, User
from ecotracker.services.broadcaster import ReadingBroadcaster
from ecotracker.services.storage import SensorStorage

TEST_PASSWORD = "sensor-pass-1"
TEST_MAC = "AA:BB:CC:DD:EE:FF"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh schema per test, installed as the app's database."""
    db = Database.from_url("sqlite+aiosqlite://", testing=True)
    await db.create_all()
    app.state.database = db
    yield db
    await db.close()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture
def storage(db_session: AsyncSession) -> SensorStorage:
    return SensorStorage(db_session)


@pytest.fixture
def broadcaster() -> ReadingBroadcaster:
    """A clean broadcaster installed on the app for the duration of a test."""
    previous = app.state.broadcaster
    app.state.broadcaster = ReadingBroadcaster()
    yield app.state.broadcaster
    app.state.broadcaster = previous


async def create_user(session: AsyncSession, email: str) -> User:
    user = User(
        email=email,
        hashed_password=hash_password(TEST_PASSWORD),
        first_name="Ada",
        is_active=True,
    )
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "owner@example.com")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "stranger@example.com")


@pytest_asyncio.fixture
async def device(storage: SensorStorage, user: User) -> Device:
    return await storage.create_device(
        user_id=user.id,
        name="Living room",
        mac_address=TEST_MAC,
        ip_address="192.168.1.40",
        firmware="1.2.0",
    )


def bearer_headers(user: User) -> dict[str, str]:
    token = create_access_token(user_id=user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    return bearer_headers(user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict[str, str]:
    return bearer_headers(other_user)


@pytest_asyncio.fixture
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
