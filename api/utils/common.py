"""
Common utility functions used across multiple routes.
"""

from datetime import date, datetime
from typing import Optional

from api.models.models import User as DbUser
from api.models.progress import LearningAnalytics, LessonProgress, UserStreak
from api.schemas.auth_schemas import UserResponse
from api.schemas.progress_schemas import DailyAnalyticsResponse, LessonProgressResponse, UserStreakResponse


def iso_format(dt: datetime) -> str:
    """Format datetime as ISO string with Z suffix."""
    return dt.isoformat() + "Z"


def iso_or_none(value: Optional[datetime]) -> Optional[str]:
    return iso_format(value) if value is not None else None


def iso_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def user_response(user: DbUser) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        created_at=iso_format(user.created_at),
    )


def lesson_progress_response(row: LessonProgress) -> LessonProgressResponse:
    status = row.status.value if hasattr(row.status, "value") else str(row.status)
    return LessonProgressResponse(
        id=row.id,
        user_id=row.user_id,
        lesson_id=row.lesson_id,
        course_id=row.course_id,
        topic_id=row.topic_id,
        status=status,
        started_at=iso_or_none(row.started_at),
        completed_at=iso_or_none(row.completed_at),
        time_spent_minutes=row.time_spent_minutes or 0,
        attempts=row.attempts or 0,
        created_at=iso_format(row.created_at),
        updated_at=iso_format(row.updated_at),
    )


def streak_response(streak: Optional[UserStreak]) -> UserStreakResponse:
    """A user with no recorded activity has a zero streak."""
    if streak is None:
        return UserStreakResponse(current_streak=0, longest_streak=0, last_activity_date=None)
    return UserStreakResponse(
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        last_activity_date=iso_date(streak.last_activity_date),
    )


def daily_analytics_response(row: LearningAnalytics) -> DailyAnalyticsResponse:
    return DailyAnalyticsResponse(
        date=row.date.isoformat(),
        lessons_completed=row.lessons_completed,
        exercises_attempted=row.exercises_attempted,
        correct_answers=row.correct_answers,
        quizzes_completed=row.quizzes_completed,
        time_spent_minutes=row.time_spent_minutes,
    )
