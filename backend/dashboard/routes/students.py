"""
Teacher Dashboard Backend — Students Route Handlers
====================================================

What:  GET/POST /students and PUT/DELETE /students/{id}.
How:   Router-level `authenticate` dependency, per-route role checks, query
       and body validation by FastAPI/Pydantic; the work itself is delegated
       to StudentService.

Access:
    GET     /students        Admin, Teacher, Student
    POST    /students        Admin, Teacher
    PUT     /students/{id}   Admin, Teacher
    DELETE  /students/{id}   Admin, Teacher
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from dashboard.auth import authenticate, require_roles
from dashboard.database import Database, get_database
from dashboard.models.enums import Role, Subject
from dashboard.schemas.auth import Identity
from dashboard.schemas.common import ApiResponse, ErrorResponse
from dashboard.schemas.student import (
    DeletedStudent,
    StudentCreate,
    StudentListResponse,
    StudentOut,
    StudentUpdate,
)
from dashboard.services.student_service import MAX_STUDENT_ID, student_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/students",
    tags=["Students"],
    dependencies=[Depends(authenticate)],
    responses={
        400: {"description": "Validation failed", "model": ErrorResponse},
        401: {"description": "Access token required", "model": ErrorResponse},
        403: {"description": "Invalid token or insufficient role", "model": ErrorResponse},
    },
)

allow_read = require_roles(Role.ADMIN, Role.TEACHER, Role.STUDENT)
allow_write = require_roles(Role.ADMIN, Role.TEACHER)


@router.get(
    "",
    response_model=StudentListResponse,
    response_model_exclude_none=True,
    summary="List students with filtering, search, sorting and pagination",
)
async def list_students(
    subject: Optional[Subject] = Query(default=None, description="Only this subject"),
    search: Optional[str] = Query(
        default=None, min_length=1, max_length=100,
        description="Case-insensitive substring of name or subject",
    ),
    sort_by: Optional[str] = Query(
        default=None, alias="sortBy",
        description="created_at, name, subject or grade (anything else: created_at)",
    ),
    sort_order: Optional[str] = Query(
        default=None, alias="sortOrder",
        description="asc or desc (anything else: desc)",
    ),
    page: int = Query(default=1, ge=1, le=1000, description="1-based page number"),
    limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
    identity: Identity = Depends(allow_read),
    db: Database = Depends(get_database),
) -> StudentListResponse:
    result = await student_service.list_students(
        db=db,
        identity=identity,
        subject=subject,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return StudentListResponse(
        data=result.students,
        pagination=result.pagination,
        message=(
            f"Retrieved {len(result.students)} of "
            f"{result.pagination.total_items} students"
        ),
    )


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[StudentOut],
    response_model_exclude_none=True,
    responses={409: {"description": "Email already exists", "model": ErrorResponse}},
    summary="Create a student",
)
async def create_student(
    body: StudentCreate,
    identity: Identity = Depends(allow_write),
    db: Database = Depends(get_database),
) -> ApiResponse[StudentOut]:
    """
    Error responses (handled by global exception handlers):
        HTTP 409: email already used (any letter case)
        HTTP 503: database locked
    """
    student = await student_service.create_student(db, body)
    return ApiResponse[StudentOut](data=student, message="Student created successfully")


@router.put(
    "/{student_id}",
    response_model=ApiResponse[StudentOut],
    response_model_exclude_none=True,
    responses={
        404: {"description": "Student not found", "model": ErrorResponse},
        409: {"description": "Email already exists", "model": ErrorResponse},
    },
    summary="Partially update a student",
)
async def update_student(
    body: StudentUpdate,
    student_id: int = Path(..., gt=0, le=MAX_STUDENT_ID, description="Student ID"),
    identity: Identity = Depends(allow_write),
    db: Database = Depends(get_database),
) -> ApiResponse[StudentOut]:
    student = await student_service.update_student(db, student_id, body)
    return ApiResponse[StudentOut](data=student, message="Student updated successfully")


@router.delete(
    "/{student_id}",
    response_model=ApiResponse[DeletedStudent],
    response_model_exclude_none=True,
    responses={
        404: {"description": "Student not found", "model": ErrorResponse},
        503: {"description": "Database temporarily locked", "model": ErrorResponse},
    },
    summary="Delete a student",
)
async def delete_student(
    student_id: int = Path(..., gt=0, le=MAX_STUDENT_ID, description="Student ID"),
    identity: Identity = Depends(allow_write),
    db: Database = Depends(get_database),
) -> ApiResponse[DeletedStudent]:
    result = await student_service.delete_student(db, student_id)
    logger.info("Student %s deleted by user %s", student_id, identity.id)
    return ApiResponse[DeletedStudent](data=result, message="Student deleted successfully")
