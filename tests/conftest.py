"""
Daily Diet Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own throwaway SQLite database (aiosqlite) in
       pytest's tmp_path, so tests never share rows.

Fixture Hierarchy (all function-scoped):
    ├── database: initialized Database client on a fresh SQLite file
    ├── app: FastAPI app wired to that database
    ├── client / other_client: HTTPX clients with different session cookies
    ├── anonymous_client: HTTPX client without a session cookie
    ├── mock_db_session: AsyncMock session for failure-path tests
    └── meal_payload: a valid create body
"""

import os

# Override settings BEFORE any dailydiet import reads them
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dailydiet.database import Database
from dailydiet.main import create_app

OWNER_A = "5d1d0a36-owner-a"
OWNER_B = "9b77c2e1-owner-b"


@pytest_asyncio.fixture
async def database(tmp_path):
    """An initialized Database on its own SQLite file, torn down afterwards."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'dailydiet_test.db'}")
    await db.init()
    yield db
    await db.teardown()


@pytest.fixture
def app(database):
    """
    FastAPI app using the test database.

    ASGITransport does not run the lifespan, so the `database` fixture
    does the init/teardown instead.
    """
    return create_app(database=database)


def _client(app, session_id=None) -> AsyncClient:
    cookies = {"sessionId": session_id} if session_id else None
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies=cookies,
    )


@pytest_asyncio.fixture
async def client(app):
    """HTTPX client authenticated as OWNER_A."""
    async with _client(app, OWNER_A) as c:
        yield c


@pytest_asyncio.fixture
async def other_client(app):
    """HTTPX client authenticated as OWNER_B."""
    async with _client(app, OWNER_B) as c:
        yield c


@pytest_asyncio.fixture
async def anonymous_client(app):
    """HTTPX client without a session cookie."""
    async with _client(app) as c:
        yield c


@pytest.fixture
def mock_db_session():
    """
    A mock async database session (no real DB).

    Usage:
        mock_db_session.execute.side_effect = SQLAlchemyError("boom")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def meal_payload():
    """A valid create body, in the camelCase the original clients send."""
    return {
        "name": "Breakfast",
        "description": "Oatmeal with banana",
        "date": "25/12/2023",
        "isOnDiet": True,
    }
