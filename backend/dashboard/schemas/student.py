"""
Teacher Dashboard Backend — Student Request/Response Schemas
=============================================================

What:  Pydantic models defining the students API contract.
How:   Request bodies are validated field by field before a handler runs;
       failures become a 400 envelope with one `errors` entry per field.

Field rules (shared by create and update):
    name:     trimmed, 2-100 chars, letters / spaces / hyphens / apostrophes
    email:    valid address, lowercased, at most 255 chars, no disposable domains
    subject:  Math | Science | English | History
    grade:    number between 0 and 100 inclusive
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from dashboard.models.enums import Subject
from dashboard.schemas.common import ApiResponse

NAME_PATTERN = re.compile(r"^[A-Za-z\s'-]+$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
DISPOSABLE_EMAIL_DOMAINS = frozenset({"tempmail.org", "10minutemail.com"})


# ══════════════════════════════════════════════════════════════════════════
# Field validators (plain functions so create and update share them)
# ══════════════════════════════════════════════════════════════════════════


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def check_name(value: str) -> str:
    if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
        raise ValueError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )
    if not NAME_PATTERN.match(value):
        raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes")
    return value


def check_email(value: str) -> str:
    email = value.lower()
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email must not exceed {EMAIL_MAX_LENGTH} characters")
    domain = email.rsplit("@", 1)[-1]
    if domain in DISPOSABLE_EMAIL_DOMAINS:
        raise ValueError("Disposable email addresses are not allowed")
    return email


def check_subject(value):
    value = _strip(value)
    allowed = [s.value for s in Subject]
    if value not in allowed:
        raise ValueError(f"Subject must be one of: {', '.join(allowed)}")
    return value


def check_grade_type(value):
    # Lax mode would turn JSON true/false into 1.0/0.0
    if isinstance(value, bool):
        raise ValueError("Grade must be a number")
    return value


def check_grade(value: float) -> float:
    if not 0 <= value <= 100:
        raise ValueError("Grade must be between 0 and 100")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class StudentCreate(BaseModel):
    """Body of POST /students. Every field is required."""

    name: str
    email: EmailStr
    subject: Subject
    grade: float

    @field_validator("name", "email", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return check_name(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)

    @field_validator("subject", mode="before")
    @classmethod
    def validate_subject(cls, value):
        return check_subject(value)

    @field_validator("grade", mode="before")
    @classmethod
    def grade_is_number(cls, value):
        return check_grade_type(value)

    @field_validator("grade")
    @classmethod
    def validate_grade(cls, value: float) -> float:
        return check_grade(value)


class StudentUpdate(BaseModel):
    """
    Body of PUT /students/{id}.

    Every field is optional. Keys outside the model are ignored, so a body
    with only unknown keys arrives here empty and the service rejects it.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    subject: Optional[Subject] = None
    grade: Optional[float] = None

    @field_validator("name", "email", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else check_name(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else check_email(value)

    @field_validator("subject", mode="before")
    @classmethod
    def validate_subject(cls, value):
        return None if value is None else check_subject(value)

    @field_validator("grade", mode="before")
    @classmethod
    def grade_is_number(cls, value):
        return check_grade_type(value)

    @field_validator("grade")
    @classmethod
    def validate_grade(cls, value: Optional[float]) -> Optional[float]:
        return None if value is None else check_grade(value)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class StudentOut(BaseModel):
    """A stored student row."""

    id: int
    name: str
    email: str
    subject: Subject
    grade: float
    created_at: Optional[datetime] = None


class Pagination(BaseModel):
    """Page metadata returned next to a list of students."""

    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    total_items: int = Field(alias="totalItems")
    items_per_page: int = Field(alias="itemsPerPage")
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class StudentPage(BaseModel):
    """Service-level result of a list query."""

    students: List[StudentOut]
    pagination: Pagination


class StudentListResponse(ApiResponse[List[StudentOut]]):
    """GET /students envelope: `data` is the page, `pagination` sits beside it."""

    pagination: Pagination


class DeletedStudentSummary(BaseModel):
    name: str
    email: str
    subject: Subject


class DeletedStudent(BaseModel):
    """`data` of DELETE /students/{id}."""

    model_config = ConfigDict(populate_by_name=True)

    deleted_id: int = Field(alias="deletedId")
    deleted_student: DeletedStudentSummary = Field(alias="deletedStudent")
