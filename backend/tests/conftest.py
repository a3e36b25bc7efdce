"""
ContactKeeper Backend — Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── database: Initialized in-memory SQLite Database with all tables
    ├── app: FastAPI app wired to that database
    ├── test_client: HTTPX AsyncClient for API endpoint testing
    └── make_user: Inserts a user row and returns (user, auth headers)
"""

import os

# Override settings for testing BEFORE any contactkeeper imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from contactkeeper.database import Database
from contactkeeper.main import create_app
from contactkeeper.models.user import User
from contactkeeper.security import AuthenticatedUser, create_access_token


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    `add` fills in the column defaults a real flush would assign (id and
    created_at), so services can serialize what they just added.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = contact
    """
    def assign_defaults(obj):
        if getattr(obj, "id", None) is None:
            obj.id = uuid.uuid4()
        if getattr(obj, "created_at", None) is None:
            obj.created_at = datetime.now(timezone.utc)

    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock(side_effect=assign_defaults)
    return session


@pytest.fixture
def caller():
    """An authenticated caller identity."""
    return AuthenticatedUser(id=uuid.uuid4())


@pytest.fixture
def sample_contact_data(caller):
    """A dictionary matching the Contact model fields, owned by `caller`."""
    return {
        "id": uuid.uuid4(),
        "owner": caller.id,
        "name": "Alice Smith",
        "email": "alice@example.com",
        "phone": "555-0100",
        "type": "personal",
        "created_at": datetime.now(timezone.utc),
    }


# ══════════════════════════════════════════════════════════════════════════
# API fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """
    Fresh in-memory SQLite database with every table created.

    ASGITransport does not run the lifespan, so the fixture initializes
    and disposes the Database itself.
    """
    db = Database("sqlite+aiosqlite://", echo=False)
    await db.init()
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
def app(database):
    return create_app(database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly to the FastAPI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(database):
    """
    Factory inserting a user row and returning (user, headers).

    The password column holds a placeholder; these users authenticate with
    a token minted directly, not through /api/auth.
    """
    async def _make_user(name: str = "Test User", email: str | None = None):
        user = User(
            name=name,
            email=email or f"{uuid.uuid4().hex[:12]}@example.com",
            password="not-a-real-hash",
        )
        async with database.session() as session:
            session.add(user)
            await session.commit()
        headers = {"x-auth-token": create_access_token(user.id)}
        return user, headers

    return _make_user
