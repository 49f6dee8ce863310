"""
Teacher Dashboard Backend — Analytics Service
==============================================

What:  Read-only aggregates for the dashboard's overview panel.
How:   Three independent queries (count, per-subject average, most recent
       rows) are issued together with asyncio.gather and merged into one
       Analytics payload. No transaction: each read sees whatever was
       committed when it ran.
Who:   Called by GET /analytics.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from dashboard.database import Database
from dashboard.exceptions import DatabaseError, StorageError
from dashboard.models.enums import Subject
from dashboard.schemas.analytics import Analytics
from dashboard.schemas.student import StudentOut
from dashboard.services.student_service import STUDENT_COLUMNS, translate_storage_error

logger = logging.getLogger(__name__)

RECENT_LIMIT_MIN = 1
RECENT_LIMIT_MAX = 50


class AnalyticsService:
    """Aggregate queries over the students table."""

    async def get_analytics(
        self,
        db: Database,
        subject: Optional[Subject] = None,
        limit: int = 10,
    ) -> Analytics:
        """
        Args:
            db: The persistence gateway
            subject: Restrict every aggregate to one subject
            limit: How many recent additions to return (clamped to 1-50)

        Returns:
            Analytics with totalStudents, averageGradeBySubject (2 decimals)
            and recentAdditions (newest first).
        """
        limit = max(RECENT_LIMIT_MIN, min(RECENT_LIMIT_MAX, limit))
        where = ""
        params: Dict[str, Any] = {}
        if subject is not None:
            where = " WHERE subject = :subject"
            params["subject"] = Subject(subject).value

        try:
            total_row, average_rows, recent_rows = await asyncio.gather(
                db.fetch_one(f"SELECT COUNT(*) AS count FROM students{where}", params),
                db.fetch_many(
                    f"SELECT subject, AVG(grade) AS average FROM students{where} "
                    "GROUP BY subject ORDER BY subject",
                    params,
                ),
                db.fetch_many(
                    f"SELECT {STUDENT_COLUMNS} FROM students{where} "
                    "ORDER BY created_at DESC, id DESC LIMIT :limit",
                    {**params, "limit": limit},
                ),
            )
        except StorageError as e:
            raise translate_storage_error(e) from e
        except Exception as e:
            logger.error("Database error computing analytics: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="An unexpected error occurred while retrieving analytics",
                context={"error_type": type(e).__name__},
            ) from e

        return Analytics(
            total_students=int(total_row["count"]) if total_row else 0,
            average_grade_by_subject={
                row["subject"]: round(float(row["average"]), 2)
                for row in average_rows
                if row["average"] is not None
            },
            recent_additions=[StudentOut.model_validate(row) for row in recent_rows],
        )


analytics_service = AnalyticsService()
