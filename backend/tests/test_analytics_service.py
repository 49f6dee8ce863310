"""
Teacher Dashboard Backend — Analytics Service Unit Tests
=========================================================

What:  Aggregates over the seeded sample set, the subject filter, the recent
       additions limit and error translation.
"""

import pytest

from dashboard.exceptions import DatabaseError, ServiceUnavailableError, StorageError
from dashboard.models.enums import Subject
from dashboard.services.analytics_service import AnalyticsService


class TestGetAnalytics:

    def setup_method(self):
        self.service = AnalyticsService()

    @pytest.mark.asyncio
    async def test_seeded_totals_and_averages(self, database):
        analytics = await self.service.get_analytics(database)
        assert analytics.total_students == 6
        assert analytics.average_grade_by_subject == {
            "English": 78.0,
            "History": 88.0,
            "Math": 90.0,
            "Science": 90.5,
        }

    @pytest.mark.asyncio
    async def test_recent_additions_newest_first(self, database):
        analytics = await self.service.get_analytics(database, limit=3)
        assert [s.id for s in analytics.recent_additions] == [6, 5, 4]

    @pytest.mark.asyncio
    async def test_subject_filter_applies_to_every_aggregate(self, database):
        analytics = await self.service.get_analytics(database, subject=Subject.SCIENCE)
        assert analytics.total_students == 2
        assert analytics.average_grade_by_subject == {"Science": 90.5}
        assert {s.name for s in analytics.recent_additions} == {"Jane Smith", "Diana Davis"}

    @pytest.mark.asyncio
    async def test_averages_rounded_to_two_decimals(self, database):
        for n, grade in enumerate((80, 81), start=1):
            await database.execute(
                "INSERT INTO students (name, email, subject, grade) "
                "VALUES (:name, :email, 'English', :grade)",
                {"name": f"Extra {'One' if n == 1 else 'Two'}",
                 "email": f"extra{n}@example.com", "grade": grade},
            )
        analytics = await self.service.get_analytics(database, subject=Subject.ENGLISH)
        # (78 + 80 + 81) / 3 = 79.666...
        assert analytics.average_grade_by_subject["English"] == 79.67

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested,returned", [(0, 1), (-3, 1), (100, 6)])
    async def test_limit_is_clamped(self, database, requested, returned):
        analytics = await self.service.get_analytics(database, limit=requested)
        assert len(analytics.recent_additions) == returned

    @pytest.mark.asyncio
    async def test_empty_table(self, empty_database):
        analytics = await self.service.get_analytics(empty_database)
        assert analytics.total_students == 0
        assert analytics.average_grade_by_subject == {}
        assert analytics.recent_additions == []

    @pytest.mark.asyncio
    async def test_locked_database(self, mock_db):
        mock_db.fetch_one.side_effect = StorageError(StorageError.LOCKED)
        with pytest.raises(ServiceUnavailableError):
            await self.service.get_analytics(mock_db)

    @pytest.mark.asyncio
    async def test_unexpected_error(self, mock_db):
        mock_db.fetch_many.side_effect = RuntimeError("boom")
        with pytest.raises(DatabaseError):
            await self.service.get_analytics(mock_db)
