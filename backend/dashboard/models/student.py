"""
Teacher Dashboard Backend — Student SQLAlchemy Model
=====================================================

What:  ORM model representing the `students` table in SQLite.
How:   Inherits from the shared DeclarativeBase; `Database.initialize()` runs
       `create_all` on it and Alembic reads it for migrations.
Who:   Schema owner only. Request handlers talk to the table through the
       persistence gateway's parameterized SQL.

Constraints enforced by storage (the final authority):
    - email UNIQUE: emails are lowercased before every write, so this is the
      case-insensitive uniqueness guarantee
    - CHECK length(name) >= 2
    - CHECK grade BETWEEN 0 AND 100
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from dashboard.database import Base


class Student(Base):
    """
    A student record.

    Lifecycle:
        1. Created via POST /students (storage assigns id and created_at)
        2. Mutated only via PUT /students/{id} (name, email, subject, grade)
        3. Hard-deleted via DELETE /students/{id}
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)

    # Stored lowercased; NOCASE makes UNIQUE ignore letter case as well
    email: Mapped[str] = mapped_column(
        String(255, collation="NOCASE"), nullable=False, unique=True
    )

    # One of Subject.* values
    subject: Mapped[str] = mapped_column(Text, nullable=False)

    grade: Mapped[float] = mapped_column(Float, nullable=False)

    # Server-side default: storage assigns the creation time at insert
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=True,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("length(name) >= 2", name="ck_students_name_length"),
        CheckConstraint("grade >= 0 AND grade <= 100", name="ck_students_grade_range"),
        Index("idx_students_subject", "subject"),
        Index("idx_students_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, email='{self.email}', subject='{self.subject}')>"
