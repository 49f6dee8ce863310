"""
Teacher Dashboard Backend — Closed Enumerations
================================================

What:  Every value set that reaches generated SQL or an authorization check.
How:   `str` enums, so members compare equal to their wire values and
       serialize as plain strings in JSON.

SQL safety:
    ORDER BY columns and UPDATE SET columns are only ever taken from
    `SortField.value` and `UpdatableField.value`; user input is mapped onto a
    member first, never interpolated directly.
"""

import enum
from typing import Optional


class Role(str, enum.Enum):
    ADMIN = "Admin"
    TEACHER = "Teacher"
    STUDENT = "Student"


class Subject(str, enum.Enum):
    MATH = "Math"
    SCIENCE = "Science"
    ENGLISH = "English"
    HISTORY = "History"


class SortField(str, enum.Enum):
    """Columns a student list may be ordered by."""

    CREATED_AT = "created_at"
    NAME = "name"
    SUBJECT = "subject"
    GRADE = "grade"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortField":
        """Unknown or missing values fall back to CREATED_AT."""
        try:
            return cls(value)
        except ValueError:
            return cls.CREATED_AT


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortOrder":
        """Only a case-insensitive "asc" yields ASC; everything else is DESC."""
        if isinstance(value, str) and value.lower() == cls.ASC.value:
            return cls.ASC
        return cls.DESC

    @property
    def sql(self) -> str:
        return self.value.upper()


class UpdatableField(str, enum.Enum):
    """Columns the update handler may write."""

    NAME = "name"
    EMAIL = "email"
    SUBJECT = "subject"
    GRADE = "grade"
