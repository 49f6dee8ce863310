"""
Teacher Dashboard Backend — Student Service (Business Logic)
=============================================================

What:  List / create / update / delete for the `students` resource.
How:   Each operation composes already-validated input into parameterized SQL
       run through the persistence gateway. Writes follow one linear pipeline:

    validate → check existence / duplicate → BEGIN → mutate
             → verify affected rows → COMMIT | ROLLBACK and propagate

Who:   Called by the students routes; receives the Database handle per call.

Error Translation (storage → API):
    StorageError "unique"  → ConflictError            (409)
    StorageError "check"   → ValidationError          (400)
    StorageError "locked"  → ServiceUnavailableError  (503)
    anything else          → DatabaseError            (500, details logged)

The service keeps no per-request state; one module-level instance serves
every request.
"""

import asyncio
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from dashboard.config import settings
from dashboard.database import Database
from dashboard.exceptions import (
    ConflictError,
    DashboardError,
    DatabaseError,
    NotFoundError,
    ServiceUnavailableError,
    StorageError,
    ValidationError,
)
from dashboard.models.enums import Role, SortField, SortOrder, Subject, UpdatableField
from dashboard.schemas.auth import Identity
from dashboard.schemas.student import (
    DeletedStudent,
    DeletedStudentSummary,
    Pagination,
    StudentCreate,
    StudentOut,
    StudentPage,
    StudentUpdate,
)

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = "id, name, email, subject, grade, created_at"

# Largest value a SQLite INTEGER primary key can hold
MAX_STUDENT_ID = 2**63 - 1


def translate_storage_error(
    exc: StorageError,
    check_message: str = "Invalid data provided - please check field values",
) -> DashboardError:
    """Map a gateway failure onto the API error taxonomy."""
    if exc.code == StorageError.UNIQUE:
        return ConflictError(context=exc.context)
    if exc.code == StorageError.CHECK:
        return ValidationError(message=check_message, context=exc.context)
    if exc.code == StorageError.LOCKED:
        return ServiceUnavailableError(context=exc.context)
    logger.error("Unhandled storage error [%s]: %s", exc.code, exc.message)
    return DatabaseError(context=exc.context)


def check_student_id(student_id: int) -> None:
    """Positive and within SQLite INTEGER range, otherwise a 400."""
    if (
        isinstance(student_id, bool)
        or not isinstance(student_id, int)
        or not 0 < student_id <= MAX_STUDENT_ID
    ):
        raise ValidationError(message="Invalid student ID provided", field="id")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_pagination(page: int, limit: int, total_items: int) -> Pagination:
    """totalPages = ceil(totalItems / limit); hasNext/hasPrev follow page bounds."""
    total_pages = math.ceil(total_items / limit) if limit else 0
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_items=total_items,
        items_per_page=limit,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


class StudentService:
    """
    Business logic layer for student records.

    Responsibilities:
        - list_students(): filtered, searched, sorted, paginated listing
        - create_student(): advisory duplicate check + transactional insert
        - update_student(): whitelisted partial update in a transaction
        - delete_student(): existence check + transactional delete
    """

    def __init__(self, student_self_scope: bool = True):
        self.student_self_scope = student_self_scope

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get(self, db: Database, student_id: int) -> Optional[Dict[str, Any]]:
        return await db.fetch_one(
            f"SELECT {STUDENT_COLUMNS} FROM students WHERE id = :id",
            {"id": student_id},
        )

    async def _email_taken(
        self, db: Database, email: str, exclude_id: Optional[int] = None
    ) -> bool:
        """Advisory, case-insensitive duplicate check. Storage stays the authority."""
        sql = "SELECT id FROM students WHERE LOWER(email) = LOWER(:email)"
        params: Dict[str, Any] = {"email": email}
        if exclude_id is not None:
            sql += " AND id != :exclude_id"
            params["exclude_id"] = exclude_id
        return await db.fetch_one(sql, params) is not None

    def _build_filters(
        self,
        identity: Optional[Identity],
        subject: Optional[Subject],
        search: Optional[str],
    ) -> Tuple[str, Dict[str, Any]]:
        """WHERE clause and its own parameter dict, shared by page and count queries."""
        conditions: List[str] = []
        params: Dict[str, Any] = {}

        if self.student_self_scope and identity is not None and identity.role == Role.STUDENT:
            conditions.append("id = :self_id")
            params["self_id"] = identity.id

        if subject is not None:
            conditions.append("subject = :subject")
            params["subject"] = Subject(subject).value

        term = search.strip() if search else ""
        if term:
            conditions.append(
                "(LOWER(name) LIKE :search ESCAPE '\\' OR LOWER(subject) LIKE :search ESCAPE '\\')"
            )
            params["search"] = f"%{_escape_like(term.lower())}%"

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        return where, params

    # ── List ──────────────────────────────────────────────────────────────

    async def list_students(
        self,
        db: Database,
        identity: Optional[Identity] = None,
        subject: Optional[Subject] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> StudentPage:
        """
        One page of students plus pagination metadata.

        Sorting:
            sort_by outside {created_at, name, subject, grade} → created_at
            sort_order other than "asc" → desc
            ties are broken by id in the same direction

        The count query gets its own copy of the filter parameters; the page
        query adds :limit and :offset on top. Both run as one awaited batch.
        """
        field = SortField.parse(sort_by)
        order = SortOrder.parse(sort_order)
        where, filter_params = self._build_filters(identity, subject, search)

        page_sql = (
            f"SELECT {STUDENT_COLUMNS} FROM students{where} "
            f"ORDER BY {field.value} {order.sql}, id {order.sql} "
            "LIMIT :limit OFFSET :offset"
        )
        page_params = {**filter_params, "limit": limit, "offset": (page - 1) * limit}
        count_sql = f"SELECT COUNT(*) AS total FROM students{where}"
        count_params = dict(filter_params)

        try:
            rows, count_row = await asyncio.gather(
                db.fetch_many(page_sql, page_params),
                db.fetch_one(count_sql, count_params),
            )
        except StorageError as e:
            raise translate_storage_error(e) from e
        except Exception as e:
            logger.error("Database error listing students: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Internal server error occurred while retrieving students",
                context={"error_type": type(e).__name__},
            ) from e

        total_items = int(count_row["total"]) if count_row else 0
        return StudentPage(
            students=[StudentOut.model_validate(row) for row in rows],
            pagination=build_pagination(page, limit, total_items),
        )

    # ── Create ────────────────────────────────────────────────────────────

    async def create_student(self, db: Database, payload: StudentCreate) -> StudentOut:
        """
        Insert a student; storage assigns id and created_at.

        Raises:
            ConflictError: email already present (advisory check or UNIQUE race)
            ValidationError: CHECK constraint rejected the row
            ServiceUnavailableError: database locked
            DatabaseError: anything else
        """
        email = payload.email.lower()
        try:
            if await self._email_taken(db, email):
                raise ConflictError(context={"email": email})

            async with db.transaction() as tx:
                result = await tx.execute(
                    "INSERT INTO students (name, email, subject, grade) "
                    "VALUES (:name, :email, :subject, :grade)",
                    {
                        "name": payload.name,
                        "email": email,
                        "subject": payload.subject.value,
                        "grade": payload.grade,
                    },
                )
                if not result.inserted_id:
                    raise DatabaseError(
                        message="Failed to create student - no ID returned",
                    )
                row = await tx.fetch_one(
                    f"SELECT {STUDENT_COLUMNS} FROM students WHERE id = :id",
                    {"id": result.inserted_id},
                )

        except StorageError as e:
            raise translate_storage_error(
                e, check_message="Invalid data provided - please check grade value"
            ) from e
        except DashboardError:
            raise
        except Exception as e:
            logger.error("Unexpected error creating student: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="An unexpected error occurred while creating the student",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Student %s created (%s)", row["id"], row["subject"])
        return StudentOut.model_validate(row)

    # ── Update ────────────────────────────────────────────────────────────

    async def update_student(
        self, db: Database, student_id: int, payload: StudentUpdate
    ) -> StudentOut:
        """
        Apply the whitelisted subset of `payload` to an existing student.

        Zero affected rows inside the transaction means the row disappeared
        after the existence check; that rolls back and fails rather than
        reporting a no-op success.
        """
        check_student_id(student_id)
        provided = payload.model_dump(exclude_unset=True, exclude_none=True)
        updates: List[Tuple[UpdatableField, Any]] = [
            (field, provided[field.value]) for field in UpdatableField if field.value in provided
        ]

        try:
            existing = await self._get(db, student_id)
            if existing is None:
                raise NotFoundError(resource="Student", resource_id=student_id)

            if not updates:
                raise ValidationError(message="No valid fields to update")

            values: Dict[str, Any] = {}
            for field, value in updates:
                if field is UpdatableField.EMAIL:
                    value = value.lower()
                elif field is UpdatableField.SUBJECT:
                    value = Subject(value).value
                values[field.value] = value

            new_email = values.get(UpdatableField.EMAIL.value)
            if new_email is not None and new_email != existing["email"].lower():
                if await self._email_taken(db, new_email, exclude_id=student_id):
                    raise ConflictError(context={"email": new_email})

            set_clause = ", ".join(f"{field.value} = :{field.value}" for field, _ in updates)
            async with db.transaction() as tx:
                result = await tx.execute(
                    f"UPDATE students SET {set_clause} WHERE id = :id",
                    {**values, "id": student_id},
                )
                if result.rows_affected == 0:
                    raise DatabaseError(
                        message="An unexpected error occurred while updating the student",
                        context={"student_id": student_id, "reason": "no rows updated"},
                    )
                row = await tx.fetch_one(
                    f"SELECT {STUDENT_COLUMNS} FROM students WHERE id = :id",
                    {"id": student_id},
                )

        except StorageError as e:
            raise translate_storage_error(e) from e
        except DashboardError:
            raise
        except Exception as e:
            logger.error(
                "Unexpected error updating student %s: %s", student_id, str(e), exc_info=True
            )
            raise DatabaseError(
                message="An unexpected error occurred while updating the student",
                context={"student_id": student_id},
            ) from e

        logger.info(
            "Student %s updated: %s", student_id, ", ".join(f.value for f, _ in updates)
        )
        return StudentOut.model_validate(row)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_student(self, db: Database, student_id: int) -> DeletedStudent:
        """
        Hard-delete a student and return a summary of what was removed.

        Raises:
            ValidationError: id is not positive or is beyond the INTEGER range
            NotFoundError: no such student
            ServiceUnavailableError: database locked (retryable)
            DatabaseError: row vanished between check and delete, or anything else
        """
        check_student_id(student_id)

        try:
            existing = await self._get(db, student_id)
            if existing is None:
                raise NotFoundError(resource="Student", resource_id=student_id)

            async with db.transaction() as tx:
                result = await tx.execute(
                    "DELETE FROM students WHERE id = :id", {"id": student_id}
                )
                if result.rows_affected == 0:
                    raise DatabaseError(
                        message="An unexpected error occurred while deleting the student",
                        context={
                            "student_id": student_id,
                            "reason": "no rows deleted - removed by another request",
                        },
                    )

        except StorageError as e:
            raise translate_storage_error(e) from e
        except DashboardError:
            raise
        except Exception as e:
            logger.error(
                "Unexpected error deleting student %s: %s", student_id, str(e), exc_info=True
            )
            raise DatabaseError(
                message="An unexpected error occurred while deleting the student",
                context={"student_id": student_id},
            ) from e

        logger.info("Student %s deleted", student_id)
        return DeletedStudent(
            deleted_id=student_id,
            deleted_student=DeletedStudentSummary(
                name=existing["name"],
                email=existing["email"],
                subject=existing["subject"],
            ),
        )


# ── Module Instance ───────────────────────────────────────────────────────
student_service = StudentService(student_self_scope=settings.student_self_scope)
