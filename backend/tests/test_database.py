"""
Teacher Dashboard Backend — Persistence Gateway Tests
======================================================

What:  Tests for Database primitives, error codes, transactions and seeding.
How:   Real SQLite file per test (tmp_path), no mocks.

What we test:
    ✅ initialize() creates the table and seeds exactly once
    ✅ fetch_one / fetch_many return dicts (or None / [])
    ✅ execute reports rows affected and the inserted id
    ✅ UNIQUE and CHECK violations surface as StorageError codes
    ✅ transaction() commits on success and rolls back on any exception
    ✅ ping() reports connectivity
"""

import pytest

from dashboard.database import SAMPLE_STUDENTS, Database, ExecuteResult
from dashboard.exceptions import StorageError

INSERT_SQL = (
    "INSERT INTO students (name, email, subject, grade) "
    "VALUES (:name, :email, :subject, :grade)"
)


async def _count(db: Database) -> int:
    row = await db.fetch_one("SELECT COUNT(*) AS count FROM students")
    return row["count"]


class TestInitialize:

    @pytest.mark.asyncio
    async def test_seeds_sample_students(self, database):
        assert await _count(database) == len(SAMPLE_STUDENTS)

    @pytest.mark.asyncio
    async def test_second_initialize_does_not_reseed(self, database):
        await database.initialize(seed=True)
        assert await _count(database) == len(SAMPLE_STUDENTS)

    @pytest.mark.asyncio
    async def test_seed_disabled_leaves_table_empty(self, empty_database):
        assert await _count(empty_database) == 0

    @pytest.mark.asyncio
    async def test_created_at_assigned_by_storage(self, database):
        row = await database.fetch_one("SELECT created_at FROM students WHERE id = 1")
        assert row["created_at"] is not None


class TestPrimitives:

    @pytest.mark.asyncio
    async def test_fetch_one_returns_dict(self, database):
        row = await database.fetch_one(
            "SELECT name, email FROM students WHERE id = :id", {"id": 2}
        )
        assert row == {"name": "Jane Smith", "email": "jane.smith@example.com"}

    @pytest.mark.asyncio
    async def test_fetch_one_no_match_returns_none(self, database):
        assert await database.fetch_one(
            "SELECT id FROM students WHERE id = :id", {"id": 12345}
        ) is None

    @pytest.mark.asyncio
    async def test_fetch_many_preserves_order(self, database):
        rows = await database.fetch_many("SELECT id FROM students ORDER BY grade DESC")
        assert [r["id"] for r in rows] == [5, 2, 6, 4, 1, 3]

    @pytest.mark.asyncio
    async def test_fetch_many_empty(self, empty_database):
        assert await empty_database.fetch_many("SELECT * FROM students") == []

    @pytest.mark.asyncio
    async def test_execute_insert_reports_id(self, database):
        result = await database.execute(
            INSERT_SQL,
            {"name": "Eve Adams", "email": "eve@example.com", "subject": "Math", "grade": 70},
        )
        assert result == ExecuteResult(rows_affected=1, inserted_id=7)

    @pytest.mark.asyncio
    async def test_execute_update_without_match(self, database):
        result = await database.execute(
            "UPDATE students SET grade = :grade WHERE id = :id", {"grade": 50, "id": 999}
        )
        assert result.rows_affected == 0
        assert result.inserted_id is None

    @pytest.mark.asyncio
    async def test_parameters_are_bound_not_interpolated(self, database):
        rows = await database.fetch_many(
            "SELECT id FROM students WHERE name = :name", {"name": "x' OR '1'='1"}
        )
        assert rows == []


class TestStorageErrors:

    @pytest.mark.asyncio
    async def test_duplicate_email_is_unique_error(self, database):
        with pytest.raises(StorageError) as exc_info:
            await database.execute(
                INSERT_SQL,
                {"name": "John Again", "email": "john.doe@example.com",
                 "subject": "Math", "grade": 60},
            )
        assert exc_info.value.code == StorageError.UNIQUE

    @pytest.mark.asyncio
    async def test_duplicate_email_other_case_is_unique_error(self, database):
        """The email column compares without regard to letter case."""
        with pytest.raises(StorageError) as exc_info:
            await database.execute(
                INSERT_SQL,
                {"name": "John Again", "email": "JOHN.DOE@Example.com",
                 "subject": "Math", "grade": 60},
            )
        assert exc_info.value.code == StorageError.UNIQUE

    @pytest.mark.asyncio
    async def test_grade_out_of_range_is_check_error(self, database):
        with pytest.raises(StorageError) as exc_info:
            await database.execute(
                INSERT_SQL,
                {"name": "Too High", "email": "high@example.com", "subject": "Math", "grade": 150},
            )
        assert exc_info.value.code == StorageError.CHECK

    @pytest.mark.asyncio
    async def test_short_name_is_check_error(self, database):
        with pytest.raises(StorageError) as exc_info:
            await database.execute(
                INSERT_SQL,
                {"name": "A", "email": "a@example.com", "subject": "Math", "grade": 50},
            )
        assert exc_info.value.code == StorageError.CHECK


class TestTransaction:

    @pytest.mark.asyncio
    async def test_commits_on_clean_exit(self, database):
        async with database.transaction() as tx:
            await tx.execute("DELETE FROM students WHERE id = :id", {"id": 1})
            await tx.execute("DELETE FROM students WHERE id = :id", {"id": 2})
        assert await _count(database) == 4

    @pytest.mark.asyncio
    async def test_rolls_back_on_exception(self, database):
        with pytest.raises(RuntimeError):
            async with database.transaction() as tx:
                await tx.execute("DELETE FROM students WHERE id = :id", {"id": 1})
                raise RuntimeError("abort")
        assert await _count(database) == len(SAMPLE_STUDENTS)

    @pytest.mark.asyncio
    async def test_rolls_back_on_storage_error(self, database):
        with pytest.raises(StorageError):
            async with database.transaction() as tx:
                await tx.execute(
                    INSERT_SQL,
                    {"name": "Fine Row", "email": "fine@example.com",
                     "subject": "Math", "grade": 50},
                )
                await tx.execute(
                    INSERT_SQL,
                    {"name": "Bad Row", "email": "bad@example.com",
                     "subject": "Math", "grade": -1},
                )
        assert await database.fetch_one(
            "SELECT id FROM students WHERE email = :email", {"email": "fine@example.com"}
        ) is None

    @pytest.mark.asyncio
    async def test_reads_inside_transaction_see_own_writes(self, database):
        async with database.transaction() as tx:
            await tx.execute(
                "UPDATE students SET grade = :grade WHERE id = :id", {"grade": 99, "id": 3}
            )
            row = await tx.fetch_one("SELECT grade FROM students WHERE id = :id", {"id": 3})
        assert row["grade"] == 99


class TestPing:

    @pytest.mark.asyncio
    async def test_ping_connected(self, database):
        assert await database.ping() is True

    @pytest.mark.asyncio
    async def test_ping_unreachable_database(self, tmp_path):
        db = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nested' / 'x.db'}")
        try:
            assert await db.ping() is False
        finally:
            await db.dispose()
