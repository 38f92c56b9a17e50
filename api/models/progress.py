"""
Authoritative learning-progress tables.

user_lesson_progress is the only mutable per-lesson record; exercise attempts
and quiz scores are append-only event rows. user_streaks and learning_analytics
are derived bookkeeping updated in the same transaction as the event that
caused them.
"""

from api.config import Base
from api.models.models import utcnow
from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from enum import Enum
from uuid import uuid4


def _uuid() -> str:
    return str(uuid4())


class LessonStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class LessonProgress(Base):
    __tablename__ = "user_lesson_progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_user_lesson_progress_user_lesson"),)

    id = Column(String, primary_key=True, index=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    lesson_id = Column(String(50), nullable=False)
    course_id = Column(String(50), index=True, nullable=False)
    topic_id = Column(String(50), nullable=False)
    status = Column(SQLEnum(LessonStatus), default=LessonStatus.NOT_STARTED, nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)  # set whenever status == completed
    time_spent_minutes = Column(Integer, default=0, nullable=False)  # cumulative
    attempts = Column(Integer, default=0, nullable=False)  # +1 per (re)start
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", backref="lesson_progress", foreign_keys=[user_id])


class UserStreak(Base):
    __tablename__ = "user_streaks"
    user_id = Column(String, ForeignKey("users.id"), primary_key=True)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_activity_date = Column(Date, nullable=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class ExerciseAttempt(Base):
    __tablename__ = "user_exercise_attempts"
    id = Column(String, primary_key=True, index=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    exercise_id = Column(String(50), nullable=False)
    lesson_id = Column(String(50), index=True, nullable=False)
    selected_answer = Column(Integer, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    time_taken_seconds = Column(Integer, nullable=True)
    attempted_at = Column(DateTime, default=utcnow, nullable=False)


class QuizScore(Base):
    __tablename__ = "user_quiz_scores"
    id = Column(String, primary_key=True, index=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    lesson_id = Column(String(50), index=True, nullable=False)
    course_id = Column(String(50), nullable=False)
    score = Column(Float, nullable=False)  # 0-100
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    completed_at = Column(DateTime, default=utcnow, nullable=False)


class LearningAnalytics(Base):
    __tablename__ = "learning_analytics"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_learning_analytics_user_date"),)

    id = Column(String, primary_key=True, index=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    date = Column(Date, nullable=False)
    lessons_completed = Column(Integer, default=0, nullable=False)
    exercises_attempted = Column(Integer, default=0, nullable=False)
    correct_answers = Column(Integer, default=0, nullable=False)
    quizzes_completed = Column(Integer, default=0, nullable=False)
    time_spent_minutes = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
