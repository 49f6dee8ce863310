"""
Teacher Dashboard Backend — Analytics Route Handler
====================================================

What:  GET /analytics — totals, per-subject averages and recent additions.
Access: Admin, Teacher.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from dashboard.auth import authenticate, require_roles
from dashboard.database import Database, get_database
from dashboard.models.enums import Role, Subject
from dashboard.schemas.analytics import Analytics
from dashboard.schemas.auth import Identity
from dashboard.schemas.common import ApiResponse, ErrorResponse
from dashboard.services.analytics_service import analytics_service

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
    dependencies=[Depends(authenticate)],
)


@router.get(
    "",
    response_model=ApiResponse[Analytics],
    response_model_exclude_none=True,
    responses={
        400: {"description": "Invalid subject or limit", "model": ErrorResponse},
        401: {"description": "Access token required", "model": ErrorResponse},
        403: {"description": "Invalid token or insufficient role", "model": ErrorResponse},
    },
    summary="Aggregate statistics over students",
)
async def get_analytics(
    subject: Optional[Subject] = Query(default=None, description="Only this subject"),
    limit: int = Query(default=10, ge=1, le=50, description="Number of recent additions"),
    identity: Identity = Depends(require_roles(Role.ADMIN, Role.TEACHER)),
    db: Database = Depends(get_database),
) -> ApiResponse[Analytics]:
    analytics = await analytics_service.get_analytics(db, subject=subject, limit=limit)
    suffix = f" for {subject.value}" if subject is not None else ""
    return ApiResponse[Analytics](
        data=analytics,
        message=f"Analytics retrieved successfully{suffix}",
    )
