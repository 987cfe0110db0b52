"""
BookClub Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── db_engine: SQLite (aiosqlite) engine with all tables created
    ├── session_factory: async_sessionmaker bound to db_engine
    ├── test_client: HTTPX AsyncClient with get_db_session overridden
    └── helpers: join_member / login_token / auth_headers
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports: the settings object
# and the module-level engine are built on first import.
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='bookclub_test_')}/health.db"
)
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-at-least-32-chars"
os.environ["BCRYPT_ROUNDS"] = "4"  # Fast hashing in tests
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOGIN_RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401
from app.database import Base, get_db_session


DEFAULT_PASSWORD = "correct-horse-battery"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    A MagicMock that simulates AsyncSession behavior.
    How:     Mocks execute, get, flush, commit, rollback, and close methods.

    Usage:
        async def test_missing_member(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.scalar = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database file per test, with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookclub.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to our FastAPI app.
    How:     Uses ASGITransport to route requests directly to the app, with
             get_db_session swapped for one bound to the per-test database.
             The session commits/rolls back exactly like the real dependency.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from app.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# API Helpers
# ══════════════════════════════════════════════════════════════════════════

def member_payload(username: str, **overrides: Any) -> Dict[str, Any]:
    payload = {
        "username": username,
        "password": DEFAULT_PASSWORD,
        "email": f"{username}@example.com",
        "gender": "FEMALE",
        "nickname": f"{username}-nick",
        "birth": "1990-05-17",
    }
    payload.update(overrides)
    return payload


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def join_member(test_client):
    """Registers a member through POST /members and returns the response."""

    async def _join(username: str, **overrides: Any):
        return await test_client.post("/members", json=member_payload(username, **overrides))

    return _join


@pytest.fixture
def login_token(test_client):
    """Logs in and returns the access token."""

    async def _login(username: str, password: str = DEFAULT_PASSWORD) -> str:
        response = await test_client.post(
            "/members/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return response.json()["data"]["access_token"]

    return _login


@pytest.fixture
def auth_headers(join_member, login_token):
    """Joins a member (if needed) and returns Authorization headers for it."""

    async def _headers(username: str, password: Optional[str] = None) -> Dict[str, str]:
        await join_member(username)
        token = await login_token(username, password or DEFAULT_PASSWORD)
        return bearer(token)

    return _headers
