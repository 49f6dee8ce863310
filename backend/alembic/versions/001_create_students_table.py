"""Create students table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `students` table with its unique email, the name-length
       and grade-range checks, and the subject / created_at indexes.

Rollback: downgrade() drops the table (all student records are lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        # Stored lowercased by the service layer
        sa.Column("email", sa.String(255, collation="NOCASE"), nullable=False),
        sa.Column("subject", sa.Text(), nullable=False),
        sa.Column("grade", sa.Float(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.CheckConstraint("length(name) >= 2", name="ck_students_name_length"),
        sa.CheckConstraint("grade >= 0 AND grade <= 100", name="ck_students_grade_range"),
    )

    op.create_index("idx_students_subject", "students", ["subject"])
    op.create_index("idx_students_created_at", "students", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_students_created_at", table_name="students")
    op.drop_index("idx_students_subject", table_name="students")
    op.drop_table("students")
