"""Unit tests for common utils (pure conversions; no session needed)."""
from datetime import date, datetime
import pytest

from api.models.progress import LearningAnalytics, LessonProgress, LessonStatus, UserStreak
from api.utils.common import (
    daily_analytics_response,
    iso_date,
    iso_format,
    iso_or_none,
    lesson_progress_response,
    streak_response,
)


@pytest.mark.unit
class TestIsoFormat:
    def test_appends_z(self):
        dt = datetime(2025, 1, 15, 12, 30, 0)
        assert iso_format(dt) == "2025-01-15T12:30:00Z"

    def test_none_passthrough(self):
        assert iso_or_none(None) is None
        assert iso_date(None) is None
        assert iso_date(date(2024, 1, 10)) == "2024-01-10"


@pytest.mark.unit
class TestLessonProgressResponse:
    def test_in_progress_row(self):
        now = datetime(2024, 1, 10, 9, 0, 0)
        row = LessonProgress(
            id="row-1",
            user_id="u1",
            lesson_id="x",
            course_id="english-a1",
            topic_id="greetings",
            status=LessonStatus.IN_PROGRESS,
            started_at=now,
            completed_at=None,
            time_spent_minutes=0,
            attempts=1,
            created_at=now,
            updated_at=now,
        )
        response = lesson_progress_response(row)
        assert response.status == "in_progress"
        assert response.started_at == "2024-01-10T09:00:00Z"
        assert response.completed_at is None
        assert response.attempts == 1


@pytest.mark.unit
class TestStreakResponse:
    def test_missing_streak_is_zero(self):
        response = streak_response(None)
        assert (response.current_streak, response.longest_streak, response.last_activity_date) == (0, 0, None)

    def test_existing_streak(self):
        streak = UserStreak(user_id="u1", current_streak=2, longest_streak=5, last_activity_date=date(2024, 1, 11))
        assert streak_response(streak).last_activity_date == "2024-01-11"


@pytest.mark.unit
def test_daily_analytics_response():
    row = LearningAnalytics(
        user_id="u1",
        date=date(2024, 1, 10),
        lessons_completed=1,
        exercises_attempted=4,
        correct_answers=3,
        quizzes_completed=0,
        time_spent_minutes=12,
    )
    response = daily_analytics_response(row)
    assert response.date == "2024-01-10"
    assert response.correct_answers == 3
