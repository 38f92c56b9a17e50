"""
API data models. Single import surface for DB entities.

DB entities (api.models.models):
- User

Progress (api.models.progress):
- LessonProgress, LessonStatus, UserStreak, ExerciseAttempt, QuizScore, LearningAnalytics
"""

from api.models.models import User
from api.models.progress import (
    LessonProgress,
    LessonStatus,
    UserStreak,
    ExerciseAttempt,
    QuizScore,
    LearningAnalytics,
)

__all__ = [
    "User",
    "LessonProgress",
    "LessonStatus",
    "UserStreak",
    "ExerciseAttempt",
    "QuizScore",
    "LearningAnalytics",
]
