"""
Progress request bodies and response shapes.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional


class StartLessonRequest(BaseModel):
    lesson_id: str = Field(min_length=1, max_length=50)
    course_id: str = Field(min_length=1, max_length=50)
    topic_id: str = Field(min_length=1, max_length=50)


class CompleteLessonRequest(BaseModel):
    lesson_id: str = Field(min_length=1, max_length=50)
    course_id: str = Field(min_length=1, max_length=50)
    topic_id: str = Field(min_length=1, max_length=50)
    time_spent_minutes: int = Field(default=0, ge=0)


class SubmitExerciseRequest(BaseModel):
    exercise_id: str = Field(min_length=1, max_length=50)
    lesson_id: str = Field(min_length=1, max_length=50)
    selected_answer: int
    correct_answer: int
    time_taken_seconds: Optional[int] = Field(default=None, ge=0)


class SubmitQuizRequest(BaseModel):
    lesson_id: str = Field(min_length=1, max_length=50)
    course_id: str = Field(min_length=1, max_length=50)
    score: float = Field(ge=0, le=100)
    total_questions: int = Field(ge=0)
    correct_answers: int = Field(ge=0)

    @model_validator(mode="after")
    def _correct_within_total(self) -> "SubmitQuizRequest":
        if self.correct_answers > self.total_questions:
            raise ValueError("correct_answers cannot exceed total_questions")
        return self


class LessonProgressResponse(BaseModel):
    id: str
    user_id: str
    lesson_id: str
    course_id: str
    topic_id: str
    status: str  # not_started|in_progress|completed
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    time_spent_minutes: int
    attempts: int
    created_at: str
    updated_at: str


class ExerciseResultResponse(BaseModel):
    is_correct: bool


class UserStreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[str] = None  # ISO date


class UserStatsResponse(BaseModel):
    """Read-only aggregate over the authoritative tables."""
    user_id: str
    lessons_started: int
    lessons_completed: int
    lessons_in_progress: int
    total_time_spent_minutes: int
    exercises_attempted: int
    correct_answers: int
    accuracy: float  # 0-100, over exercise attempts
    quizzes_taken: int
    average_quiz_score: Optional[float] = None  # over every submission
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[str] = None


class DailyAnalyticsResponse(BaseModel):
    date: str
    lessons_completed: int
    exercises_attempted: int
    correct_answers: int
    quizzes_completed: int
    time_spent_minutes: int
