"""
Authoritative learning-progress service.

Each mutating call is one transaction over the per-lesson row, the append-only
event tables, the daily analytics row and the user's streak: either all of it
is committed or none of it is.

Rows are read with SELECT ... FOR UPDATE so concurrent calls for the same
(user_id, lesson_id) serialise on databases with row locks. A lost race on the
first insert surfaces as an IntegrityError on the unique key; the whole
operation is then replayed once, taking the update path.
"""

import math
from datetime import date, datetime, timedelta
from typing import Callable, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from api.models.models import utcnow
from api.models.progress import (
    ExerciseAttempt,
    LearningAnalytics,
    LessonProgress,
    LessonStatus,
    QuizScore,
    UserStreak,
)
from api.schemas.progress_schemas import UserStatsResponse
from api.utils.logger import configure_logging, log_request
from learning.streak import advance_server_streak

logger = configure_logging()

T = TypeVar("T")

MAX_ANALYTICS_DAYS = 365


class ProgressValidationError(ValueError):
    """Bad input, detected before anything is written."""


class ProgressServiceError(Exception):
    """The operation was aborted and rolled back (database failure)."""


def _require(**fields: object) -> None:
    for name, value in fields.items():
        if not isinstance(value, str) or not value.strip():
            raise ProgressValidationError(f"{name} is required")


class ProgressService:
    """Service for the per-user, per-lesson progress record and its derived analytics."""

    def __init__(self, db: Session, now: Callable[[], datetime] = utcnow):
        self.db = db
        self.now = now

    # -----------------------------
    # Transactions
    # -----------------------------

    def _transaction(self, name: str, op: Callable[[], T]) -> T:
        """Run op and commit; on a unique-key race replay once; roll back on any DB error."""
        with log_request(logger, f"progress.{name}"):
            for attempt in (1, 2):
                try:
                    result = op()
                    self.db.commit()
                    return result
                except IntegrityError as e:
                    self.db.rollback()
                    if attempt == 1:
                        logger.info("progress.%s concurrent insert detected, replaying", name)
                        continue
                    raise ProgressServiceError(f"{name} failed") from e
                except SQLAlchemyError as e:
                    self.db.rollback()
                    raise ProgressServiceError(f"{name} failed") from e
        raise ProgressServiceError(f"{name} failed")  # unreachable

    def _locked_row(self, user_id: str, lesson_id: str) -> Optional[LessonProgress]:
        return (
            self.db.query(LessonProgress)
            .filter(LessonProgress.user_id == user_id, LessonProgress.lesson_id == lesson_id)
            .with_for_update()
            .first()
        )

    def _record_activity(
        self,
        user_id: str,
        day: date,
        *,
        lessons_completed: int = 0,
        exercises_attempted: int = 0,
        correct_answers: int = 0,
        quizzes_completed: int = 0,
        time_spent_minutes: int = 0,
    ) -> LearningAnalytics:
        row = (
            self.db.query(LearningAnalytics)
            .filter(LearningAnalytics.user_id == user_id, LearningAnalytics.date == day)
            .with_for_update()
            .first()
        )
        if row is None:
            row = LearningAnalytics(
                user_id=user_id,
                date=day,
                lessons_completed=0,
                exercises_attempted=0,
                correct_answers=0,
                quizzes_completed=0,
                time_spent_minutes=0,
            )
            self.db.add(row)
        row.lessons_completed += lessons_completed
        row.exercises_attempted += exercises_attempted
        row.correct_answers += correct_answers
        row.quizzes_completed += quizzes_completed
        row.time_spent_minutes += time_spent_minutes
        self.db.flush()
        return row

    def _advance_streak(self, user_id: str, today: date) -> UserStreak:
        streak = self.db.query(UserStreak).filter(UserStreak.user_id == user_id).with_for_update().first()
        if streak is None:
            streak = UserStreak(user_id=user_id, current_streak=0, longest_streak=0, last_activity_date=None)
            self.db.add(streak)
        state = advance_server_streak(
            streak.current_streak or 0,
            streak.longest_streak or 0,
            streak.last_activity_date,
            today,
        )
        streak.current_streak = state.current_streak
        streak.longest_streak = state.longest_streak
        streak.last_activity_date = state.last_activity_date
        streak.updated_at = self.now()
        self.db.flush()
        return streak

    # -----------------------------
    # Mutations
    # -----------------------------

    def start_lesson(self, user_id: str, lesson_id: str, course_id: str, topic_id: str) -> LessonProgress:
        """Create the row (attempts=1) or reopen it (attempts+1, back to in_progress)."""
        _require(user_id=user_id, lesson_id=lesson_id, course_id=course_id, topic_id=topic_id)

        def _op() -> LessonProgress:
            now = self.now()
            row = self._locked_row(user_id, lesson_id)
            if row is None:
                row = LessonProgress(
                    user_id=user_id,
                    lesson_id=lesson_id,
                    course_id=course_id,
                    topic_id=topic_id,
                    status=LessonStatus.IN_PROGRESS,
                    started_at=now,
                    time_spent_minutes=0,
                    attempts=1,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(row)
            else:
                row.status = LessonStatus.IN_PROGRESS
                row.attempts = (row.attempts or 0) + 1
                row.started_at = row.started_at or now
                row.updated_at = now
            self.db.flush()
            return row

        return self._transaction("start_lesson", _op)

    def complete_lesson(
        self,
        user_id: str,
        lesson_id: str,
        course_id: str,
        topic_id: str,
        time_spent_minutes: int = 0,
    ) -> LessonProgress:
        """
        Transition the lesson to completed, add the time spent, count it in the daily
        analytics and advance the streak.

        Completing a row that is already completed is a no-op: time is only added
        once per attempt. Starting the lesson again opens a new attempt.
        """
        _require(user_id=user_id, lesson_id=lesson_id, course_id=course_id, topic_id=topic_id)
        if time_spent_minutes is None or time_spent_minutes < 0:
            raise ProgressValidationError("time_spent_minutes must be >= 0")

        def _op() -> LessonProgress:
            now = self.now()
            row = self._locked_row(user_id, lesson_id)
            if row is None:
                # Completed without a recorded start: counts as the first attempt.
                row = LessonProgress(
                    user_id=user_id,
                    lesson_id=lesson_id,
                    course_id=course_id,
                    topic_id=topic_id,
                    status=LessonStatus.COMPLETED,
                    started_at=now,
                    completed_at=now,
                    time_spent_minutes=time_spent_minutes,
                    attempts=1,
                    created_at=now,
                    updated_at=now,
                )
                self.db.add(row)
            elif row.status == LessonStatus.COMPLETED:
                logger.info("complete_lesson ignored, already completed user_id=%s lesson_id=%s", user_id, lesson_id)
                return row
            else:
                row.status = LessonStatus.COMPLETED
                row.completed_at = now
                row.time_spent_minutes = (row.time_spent_minutes or 0) + time_spent_minutes
                row.attempts = max(row.attempts or 0, 1)
                row.updated_at = now
            self.db.flush()

            today = now.date()
            self._record_activity(user_id, today, lessons_completed=1, time_spent_minutes=time_spent_minutes)
            self._advance_streak(user_id, today)
            return row

        return self._transaction("complete_lesson", _op)

    def submit_exercise(
        self,
        user_id: str,
        exercise_id: str,
        lesson_id: str,
        selected_answer: int,
        correct_answer: int,
        time_taken_seconds: Optional[int] = None,
    ) -> bool:
        """Append an attempt; returns whether the selected answer was correct."""
        _require(user_id=user_id, exercise_id=exercise_id, lesson_id=lesson_id)
        if selected_answer is None or correct_answer is None:
            raise ProgressValidationError("selected_answer and correct_answer are required")
        if time_taken_seconds is not None and time_taken_seconds < 0:
            raise ProgressValidationError("time_taken_seconds must be >= 0")

        is_correct = selected_answer == correct_answer
        minutes = math.ceil(time_taken_seconds / 60) if time_taken_seconds else 0

        def _op() -> bool:
            now = self.now()
            self.db.add(
                ExerciseAttempt(
                    user_id=user_id,
                    exercise_id=exercise_id,
                    lesson_id=lesson_id,
                    selected_answer=selected_answer,
                    is_correct=is_correct,
                    time_taken_seconds=time_taken_seconds,
                    attempted_at=now,
                )
            )
            self.db.flush()
            today = now.date()
            self._record_activity(
                user_id,
                today,
                exercises_attempted=1,
                correct_answers=1 if is_correct else 0,
                time_spent_minutes=minutes,
            )
            self._advance_streak(user_id, today)
            return is_correct

        return self._transaction("submit_exercise", _op)

    def submit_quiz(
        self,
        user_id: str,
        lesson_id: str,
        course_id: str,
        score: float,
        total_questions: int,
        correct_answers: int,
    ) -> QuizScore:
        """Append a quiz result. Every submission is kept and counts toward the average."""
        _require(user_id=user_id, lesson_id=lesson_id, course_id=course_id)
        if score is None or not 0 <= score <= 100:
            raise ProgressValidationError("score must be between 0 and 100")
        if total_questions < 0 or correct_answers < 0 or correct_answers > total_questions:
            raise ProgressValidationError("correct_answers must be between 0 and total_questions")

        def _op() -> QuizScore:
            now = self.now()
            quiz = QuizScore(
                user_id=user_id,
                lesson_id=lesson_id,
                course_id=course_id,
                score=score,
                total_questions=total_questions,
                correct_answers=correct_answers,
                completed_at=now,
            )
            self.db.add(quiz)
            self.db.flush()
            today = now.date()
            self._record_activity(
                user_id,
                today,
                exercises_attempted=total_questions,
                correct_answers=correct_answers,
                quizzes_completed=1,
            )
            self._advance_streak(user_id, today)
            return quiz

        return self._transaction("submit_quiz", _op)

    # -----------------------------
    # Read-only projections
    # -----------------------------

    def get_user_progress(self, user_id: str, course_id: Optional[str] = None) -> list[LessonProgress]:
        """All lesson rows for the user, most recently updated first."""
        query = self.db.query(LessonProgress).filter(LessonProgress.user_id == user_id)
        if course_id:
            query = query.filter(LessonProgress.course_id == course_id)
        return query.order_by(LessonProgress.updated_at.desc(), LessonProgress.created_at.desc()).all()

    def get_user_streak(self, user_id: str) -> Optional[UserStreak]:
        return self.db.query(UserStreak).filter(UserStreak.user_id == user_id).first()

    def get_user_stats(self, user_id: str) -> UserStatsResponse:
        lessons_started, total_time = (
            self.db.query(
                func.count(LessonProgress.id),
                func.coalesce(func.sum(LessonProgress.time_spent_minutes), 0),
            )
            .filter(LessonProgress.user_id == user_id)
            .one()
        )
        lessons_completed = (
            self.db.query(func.count(LessonProgress.id))
            .filter(LessonProgress.user_id == user_id, LessonProgress.status == LessonStatus.COMPLETED)
            .scalar()
            or 0
        )

        exercises_attempted = (
            self.db.query(func.count(ExerciseAttempt.id)).filter(ExerciseAttempt.user_id == user_id).scalar() or 0
        )
        correct_answers = (
            self.db.query(func.count(ExerciseAttempt.id))
            .filter(ExerciseAttempt.user_id == user_id, ExerciseAttempt.is_correct.is_(True))
            .scalar()
            or 0
        )

        quizzes_taken, average_score = (
            self.db.query(func.count(QuizScore.id), func.avg(QuizScore.score))
            .filter(QuizScore.user_id == user_id)
            .one()
        )

        streak = self.get_user_streak(user_id)
        return UserStatsResponse(
            user_id=user_id,
            lessons_started=int(lessons_started or 0),
            lessons_completed=lessons_completed,
            lessons_in_progress=int(lessons_started or 0) - lessons_completed,
            total_time_spent_minutes=int(total_time or 0),
            exercises_attempted=int(exercises_attempted or 0),
            correct_answers=correct_answers,
            accuracy=round(100.0 * correct_answers / exercises_attempted, 2) if exercises_attempted else 0.0,
            quizzes_taken=int(quizzes_taken or 0),
            average_quiz_score=round(float(average_score), 2) if average_score is not None else None,
            current_streak=streak.current_streak if streak else 0,
            longest_streak=streak.longest_streak if streak else 0,
            last_activity_date=streak.last_activity_date.isoformat() if streak and streak.last_activity_date else None,
        )

    def get_daily_analytics(self, user_id: str, days: int = 30) -> list[LearningAnalytics]:
        """Daily activity rows for the last `days` days (today included), oldest first."""
        if days < 1 or days > MAX_ANALYTICS_DAYS:
            raise ProgressValidationError(f"days must be between 1 and {MAX_ANALYTICS_DAYS}")
        since = self.now().date() - timedelta(days=days - 1)
        return (
            self.db.query(LearningAnalytics)
            .filter(LearningAnalytics.user_id == user_id, LearningAnalytics.date >= since)
            .order_by(LearningAnalytics.date.asc())
            .all()
        )
