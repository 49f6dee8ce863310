"""
Teacher Dashboard Backend — Persistence Gateway
================================================

What:  The one storage handle of the process: an async SQLAlchemy engine over
       a SQLite file, exposed as three parameterized primitives
       (execute / fetch_one / fetch_many) plus an explicit transaction scope.
How:   `Database` is constructed by the application factory, stored on
       `app.state.db` and handed to route handlers by the `get_database`
       dependency. Services receive it as an argument.
When:  The engine is built at construction; the connection itself is opened
       by the first statement and kept until `dispose()`.

Connection Strategy:
    pool_size=1, max_overflow=0:  exactly one live connection per process.
    Operations that arrive while it is checked out wait (pool_timeout) for it,
    so writers queue exactly like they do inside SQLite itself.
    In-memory URLs use StaticPool, which is also a single shared connection.

Error Translation:
    Driver failures are re-raised as StorageError with a short code:
        UNIQUE constraint failed  → "unique"
        CHECK constraint failed   → "check"
        database is locked / busy → "locked"
        unable to open database   → "unavailable"
    Anything else keeps the driver's own error name (e.g. SQLITE_IOERR).
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from dashboard.exceptions import StorageError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Params = Optional[Mapping[str, Any]]


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Only the table definitions live on the ORM side: `create_all` and Alembic
    read `Base.metadata`, while request handling goes through raw SQL.
    """
    pass


@dataclass(frozen=True)
class ExecuteResult:
    """Outcome of a write statement. `inserted_id` is only set for INSERTs."""

    rows_affected: int
    inserted_id: Optional[int] = None


# ── Sample data inserted on first run ─────────────────────────────────────
SAMPLE_STUDENTS = (
    {"name": "John Doe", "email": "john.doe@example.com", "subject": "Math", "grade": 85},
    {"name": "Jane Smith", "email": "jane.smith@example.com", "subject": "Science", "grade": 92},
    {"name": "Bob Johnson", "email": "bob.johnson@example.com", "subject": "English", "grade": 78},
    {"name": "Alice Brown", "email": "alice.brown@example.com", "subject": "History", "grade": 88},
    {"name": "Charlie Wilson", "email": "charlie.wilson@example.com", "subject": "Math", "grade": 95},
    {"name": "Diana Davis", "email": "diana.davis@example.com", "subject": "Science", "grade": 89},
)


def _to_storage_error(exc: Exception) -> StorageError:
    """Maps a SQLAlchemy/driver exception onto a StorageError code."""
    if isinstance(exc, PoolTimeoutError):
        return StorageError(
            StorageError.LOCKED,
            message="Timed out waiting for the database connection",
        )

    orig = getattr(exc, "orig", None) or exc
    detail = str(orig)
    lowered = detail.lower()
    error_name = getattr(orig, "sqlite_errorname", None) or type(orig).__name__

    if "unique constraint failed" in lowered or error_name == "SQLITE_CONSTRAINT_UNIQUE":
        code = StorageError.UNIQUE
    elif "check constraint failed" in lowered or error_name == "SQLITE_CONSTRAINT_CHECK":
        code = StorageError.CHECK
    elif "database is locked" in lowered or error_name in ("SQLITE_BUSY", "SQLITE_LOCKED"):
        code = StorageError.LOCKED
    elif "unable to open database" in lowered or error_name == "SQLITE_CANTOPEN":
        code = StorageError.UNAVAILABLE
    else:
        code = error_name

    return StorageError(code, message=detail, context={"driver_error": error_name})


def _is_insert(sql: str) -> bool:
    return sql.lstrip().upper().startswith("INSERT")


class _ConnectionScope:
    """The three primitives bound to one already checked-out connection."""

    def __init__(self, conn: AsyncConnection):
        self._conn = conn

    async def execute(self, sql: str, params: Params = None) -> ExecuteResult:
        try:
            result = await self._conn.execute(text(sql), dict(params or {}))
        except DBAPIError as exc:
            raise _to_storage_error(exc) from exc
        inserted_id = result.lastrowid if _is_insert(sql) else None
        return ExecuteResult(rows_affected=result.rowcount, inserted_id=inserted_id or None)

    async def fetch_one(self, sql: str, params: Params = None) -> Optional[Row]:
        try:
            result = await self._conn.execute(text(sql), dict(params or {}))
        except DBAPIError as exc:
            raise _to_storage_error(exc) from exc
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def fetch_many(self, sql: str, params: Params = None) -> List[Row]:
        try:
            result = await self._conn.execute(text(sql), dict(params or {}))
        except DBAPIError as exc:
            raise _to_storage_error(exc) from exc
        return [dict(row) for row in result.mappings().all()]


class Database:
    """
    Persistence gateway around a single SQLite connection.

    Usage:
        db = Database("sqlite+aiosqlite:///./database.sqlite")
        await db.initialize()
        row = await db.fetch_one("SELECT * FROM students WHERE id = :id", {"id": 1})

        async with db.transaction() as tx:
            result = await tx.execute("DELETE FROM students WHERE id = :id", {"id": 1})
    """

    def __init__(self, url: str, pool_timeout: int = 30, echo: bool = False):
        self.url = url
        if make_url(url).database in (None, "", ":memory:"):
            self._engine: AsyncEngine = create_async_engine(
                url, poolclass=StaticPool, echo=echo
            )
        else:
            self._engine = create_async_engine(
                url,
                pool_size=1,
                max_overflow=0,
                pool_timeout=pool_timeout,
                echo=echo,
            )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    # ── Primitives (each runs in its own short-lived checkout) ────────────

    async def execute(self, sql: str, params: Params = None) -> ExecuteResult:
        """Run one write statement and commit it."""
        async with self.transaction() as scope:
            return await scope.execute(sql, params)

    async def fetch_one(self, sql: str, params: Params = None) -> Optional[Row]:
        """Return the first row as a dict, or None when nothing matches."""
        try:
            async with self._engine.connect() as conn:
                return await _ConnectionScope(conn).fetch_one(sql, params)
        except (DBAPIError, PoolTimeoutError) as exc:
            raise _to_storage_error(exc) from exc

    async def fetch_many(self, sql: str, params: Params = None) -> List[Row]:
        """Return every row, in the order the statement produces them."""
        try:
            async with self._engine.connect() as conn:
                return await _ConnectionScope(conn).fetch_many(sql, params)
        except (DBAPIError, PoolTimeoutError) as exc:
            raise _to_storage_error(exc) from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_ConnectionScope]:
        """
        Explicit transaction: BEGIN on entry, COMMIT on clean exit.

        Any exception raised inside the block rolls the transaction back
        before it propagates. Statements issued through the yielded scope
        share the transaction's connection.
        """
        try:
            async with self._engine.begin() as conn:
                yield _ConnectionScope(conn)
        except (DBAPIError, PoolTimeoutError) as exc:
            logger.warning("Transaction rolled back: %s", exc)
            raise _to_storage_error(exc) from exc
        except Exception as exc:
            logger.debug("Transaction rolled back after %s", type(exc).__name__)
            raise

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def initialize(self, seed: bool = True) -> None:
        """
        Create the schema if missing and seed sample rows into an empty table.

        Idempotent: existing tables and rows are left untouched.
        """
        # Registers the students table on Base.metadata
        from dashboard.models import student  # noqa: F401

        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except DBAPIError as exc:
            raise _to_storage_error(exc) from exc
        logger.info("Students table ready")

        if not seed:
            return

        row = await self.fetch_one("SELECT COUNT(*) AS count FROM students")
        if row and row["count"] == 0:
            async with self.transaction() as tx:
                for sample in SAMPLE_STUDENTS:
                    await tx.execute(
                        "INSERT INTO students (name, email, subject, grade) "
                        "VALUES (:name, :email, :subject, :grade)",
                        sample,
                    )
            logger.info("Inserted %d sample students", len(SAMPLE_STUDENTS))

    async def ping(self) -> bool:
        """Lightweight connectivity check used by GET /health."""
        try:
            await self.fetch_one("SELECT 1 AS ok")
            return True
        except StorageError as exc:
            logger.warning("Database ping failed: %s", exc.message)
            return False

    async def dispose(self) -> None:
        """Close the connection. Called during application shutdown."""
        await self._engine.dispose()


# ── FastAPI Dependency ────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """
    Provides the application's Database to route handlers.

    Example usage in a route:
        @router.get("/students")
        async def list_students(db: Database = Depends(get_database)):
            ...
    """
    return request.app.state.db
