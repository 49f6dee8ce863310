"""
Teacher Dashboard Backend — Request/Response Schema Tests
==========================================================

What:  Field rules of the student and login bodies, and the camelCase wire
       names of the response models.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from dashboard.models.enums import SortField, SortOrder, Subject
from dashboard.schemas.auth import LoginRequest
from dashboard.schemas.student import Pagination, StudentCreate, StudentUpdate

VALID = {"name": "Mary O'Neil", "email": "Mary.ONeil@Example.com", "subject": "Math", "grade": 91.5}


def error_messages(exc_info) -> str:
    return " | ".join(e["msg"] for e in exc_info.value.errors())


class TestStudentCreate:

    def test_valid_body_is_normalized(self):
        student = StudentCreate(**{**VALID, "name": "  Mary O'Neil  "})
        assert student.name == "Mary O'Neil"
        assert student.email == "mary.oneil@example.com"
        assert student.subject is Subject.MATH

    @pytest.mark.parametrize("grade", [0, 100, 55.25])
    def test_grade_bounds_inclusive(self, grade):
        assert StudentCreate(**{**VALID, "grade": grade}).grade == grade

    @pytest.mark.parametrize("grade", [-0.1, 100.01, 150])
    def test_grade_out_of_range(self, grade):
        with pytest.raises(PydanticValidationError) as exc_info:
            StudentCreate(**{**VALID, "grade": grade})
        assert "Grade must be between 0 and 100" in error_messages(exc_info)

    @pytest.mark.parametrize("grade", [True, False])
    def test_boolean_grade_rejected(self, grade):
        """Booleans are not numbers here, even though pydantic would coerce them."""
        with pytest.raises(PydanticValidationError) as exc_info:
            StudentCreate(**{**VALID, "grade": grade})
        assert "Grade must be a number" in error_messages(exc_info)

    @pytest.mark.parametrize("name", ["J", "J0hn", "Robert; DROP TABLE", "x" * 101])
    def test_invalid_names(self, name):
        with pytest.raises(PydanticValidationError):
            StudentCreate(**{**VALID, "name": name})

    def test_hyphen_and_apostrophe_allowed(self):
        assert StudentCreate(**{**VALID, "name": "Anne-Marie D'Arcy"}).name == "Anne-Marie D'Arcy"

    def test_unknown_subject(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            StudentCreate(**{**VALID, "subject": "Art"})
        assert "Subject must be one of: Math, Science, English, History" in error_messages(exc_info)

    def test_subject_is_case_sensitive(self):
        with pytest.raises(PydanticValidationError):
            StudentCreate(**{**VALID, "subject": "math"})

    @pytest.mark.parametrize("email", ["not-an-email", "a@", "@example.com"])
    def test_malformed_email(self, email):
        with pytest.raises(PydanticValidationError):
            StudentCreate(**{**VALID, "email": email})

    @pytest.mark.parametrize("domain", ["tempmail.org", "10minutemail.com"])
    def test_disposable_email_rejected(self, domain):
        with pytest.raises(PydanticValidationError) as exc_info:
            StudentCreate(**{**VALID, "email": f"someone@{domain}"})
        assert "Disposable email addresses are not allowed" in error_messages(exc_info)

    def test_all_fields_required(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            StudentCreate()
        fields = {e["loc"][0] for e in exc_info.value.errors()}
        assert fields == {"name", "email", "subject", "grade"}


class TestStudentUpdate:

    def test_unknown_keys_are_dropped(self):
        update = StudentUpdate.model_validate({"id": 5, "created_at": "2020-01-01", "role": "Admin"})
        assert update.model_dump(exclude_unset=True, exclude_none=True) == {}

    def test_partial_body(self):
        update = StudentUpdate.model_validate({"grade": 77, "email": "NEW@Example.com"})
        assert update.model_dump(exclude_unset=True) == {"grade": 77.0, "email": "new@example.com"}

    def test_same_rules_as_create(self):
        with pytest.raises(PydanticValidationError):
            StudentUpdate.model_validate({"grade": 101})
        with pytest.raises(PydanticValidationError):
            StudentUpdate.model_validate({"subject": "Art"})

    def test_boolean_grade_rejected(self):
        with pytest.raises(PydanticValidationError):
            StudentUpdate.model_validate({"grade": False})

    def test_null_grade_is_unset(self):
        update = StudentUpdate.model_validate({"grade": None})
        assert update.model_dump(exclude_unset=True, exclude_none=True) == {}


class TestLoginRequest:

    def test_missing_username(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            LoginRequest(password="password123")
        assert "Username is required" in error_messages(exc_info)

    def test_blank_password(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            LoginRequest(username="teacher", password="")
        assert "Password is required" in error_messages(exc_info)


class TestWireNames:

    def test_pagination_uses_camel_case(self):
        pagination = Pagination(
            current_page=1, total_pages=2, total_items=6,
            items_per_page=4, has_next=True, has_prev=False,
        )
        assert pagination.model_dump(by_alias=True) == {
            "currentPage": 1,
            "totalPages": 2,
            "totalItems": 6,
            "itemsPerPage": 4,
            "hasNext": True,
            "hasPrev": False,
        }


class TestSortParsing:

    @pytest.mark.parametrize("raw,expected", [
        ("name", SortField.NAME),
        ("grade", SortField.GRADE),
        ("created_at", SortField.CREATED_AT),
        ("email", SortField.CREATED_AT),
        ("name; DROP TABLE students", SortField.CREATED_AT),
        (None, SortField.CREATED_AT),
    ])
    def test_sort_field_whitelist(self, raw, expected):
        assert SortField.parse(raw) is expected

    @pytest.mark.parametrize("raw,expected", [
        ("asc", SortOrder.ASC),
        ("ASC", SortOrder.ASC),
        ("desc", SortOrder.DESC),
        ("sideways", SortOrder.DESC),
        (None, SortOrder.DESC),
    ])
    def test_sort_order(self, raw, expected):
        assert SortOrder.parse(raw) is expected
