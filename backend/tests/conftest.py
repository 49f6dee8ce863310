"""
Teacher Dashboard Backend — Test Configuration (conftest.py)
=============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── test_settings: Settings pointing at a temporary SQLite file
    ├── database: initialized + seeded Database on that file
    ├── empty_database: initialized Database without sample rows
    ├── mock_db: MagicMock standing in for Database (no SQL at all)
    ├── app: create_app(test_settings) with its database initialized
    ├── test_client: HTTPX AsyncClient talking to `app`
    └── teacher_headers / admin_headers / student_headers: bearer tokens per role
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any dashboard import so the module-level Settings never sees
# a developer's .env or the default database file.
TEST_JWT_SECRET = "test-only-signing-secret-0123456789abcdef"

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["LOG_LEVEL"] = "WARNING"

from dashboard.config import Settings  # noqa: E402
from dashboard.database import Database  # noqa: E402
from dashboard.models.enums import Role  # noqa: E402
from dashboard.schemas.auth import Identity  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Settings and Database
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings for one test: its own database file, known credentials."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        db_pool_timeout=5,
        jwt_secret=TEST_JWT_SECRET,
        login_username="teacher",
        login_password="password123",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """A Database with the students table created and the six sample rows."""
    db = Database(test_settings.database_url, pool_timeout=test_settings.db_pool_timeout)
    await db.initialize(seed=True)
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def empty_database(test_settings):
    db = Database(test_settings.database_url, pool_timeout=test_settings.db_pool_timeout)
    await db.initialize(seed=False)
    yield db
    await db.dispose()


@pytest.fixture
def mock_db():
    """
    A stand-in for Database whose primitives are AsyncMocks.

    `mock_db.scope` is what `async with mock_db.transaction() as tx` yields.

    Usage:
        mock_db.fetch_one.side_effect = StorageError(StorageError.LOCKED)
        mock_db.scope.execute.return_value = ExecuteResult(rows_affected=0)
    """
    db = MagicMock(spec=Database)
    db.execute = AsyncMock()
    db.fetch_one = AsyncMock(return_value=None)
    db.fetch_many = AsyncMock(return_value=[])

    scope = MagicMock()
    scope.execute = AsyncMock()
    scope.fetch_one = AsyncMock(return_value=None)
    scope.fetch_many = AsyncMock(return_value=[])

    @asynccontextmanager
    async def transaction():
        yield scope

    db.transaction = transaction
    db.scope = scope
    return db


# ══════════════════════════════════════════════════════════════════════════
# Application and HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings):
    """
    A fresh application per test.

    ASGITransport does not run the lifespan, so the database is initialized
    (and disposed) here instead.
    """
    from dashboard.main import create_app

    application = create_app(test_settings)
    await application.state.db.initialize(seed=True)
    yield application
    application.dependency_overrides.clear()
    await application.state.db.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _bearer(app, role: Role, user_id: int, username: str) -> dict:
    token = app.state.token_service.issue(Identity(username=username, role=role, id=user_id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def teacher_headers(app):
    return _bearer(app, Role.TEACHER, 1, "teacher")


@pytest.fixture
def admin_headers(app):
    return _bearer(app, Role.ADMIN, 99, "admin")


@pytest.fixture
def student_headers(app):
    """Token for the Student role, bound to sample student #3 (Bob Johnson)."""
    return _bearer(app, Role.STUDENT, 3, "bob")
