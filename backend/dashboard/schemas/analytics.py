"""
Teacher Dashboard Backend — Analytics Schemas
==============================================

What:  Payload of GET /analytics.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from dashboard.schemas.student import StudentOut


class Analytics(BaseModel):
    """
    Aggregates over the students table, optionally for one subject.

    averageGradeBySubject maps subject name → mean grade rounded to 2 decimals;
    subjects without students are absent rather than zero.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_students: int = Field(alias="totalStudents")
    average_grade_by_subject: Dict[str, float] = Field(alias="averageGradeBySubject")
    recent_additions: List[StudentOut] = Field(alias="recentAdditions")
