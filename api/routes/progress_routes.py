"""
Learning-progress endpoints. Mounted under /api/progress.
"""

from typing import Callable, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from api.config import get_db
from api.schemas.progress_schemas import (
    CompleteLessonRequest,
    ExerciseResultResponse,
    StartLessonRequest,
    SubmitExerciseRequest,
    SubmitQuizRequest,
)
from api.schemas.response_schemas import ok
from api.schemas.user_schemas import User
from api.services.progress_service import (
    MAX_ANALYTICS_DAYS,
    ProgressService,
    ProgressServiceError,
    ProgressValidationError,
)
from api.utils.auth import get_current_user
from api.utils.common import daily_analytics_response, lesson_progress_response, streak_response

progress_routes = APIRouter()

T = TypeVar("T")


def get_progress_service(db: Session = Depends(get_db)) -> ProgressService:
    return ProgressService(db)


def _run(call: Callable[[], T]) -> T:
    try:
        return call()
    except ProgressValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ProgressServiceError:
        # Details are in the log; the client only gets a generic message.
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


def _require_self(user_id: str, current_user: User) -> None:
    if user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: cannot access another user's progress")


@progress_routes.post("/lesson/start")
def start_lesson(
    req: StartLessonRequest,
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
) -> dict:
    """Start (or restart) a lesson for the current user."""
    row = _run(lambda: service.start_lesson(current_user.id, req.lesson_id, req.course_id, req.topic_id))
    return ok(lesson_progress_response(row), message="Lesson started")


@progress_routes.post("/lesson/complete")
def complete_lesson(
    req: CompleteLessonRequest,
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
) -> dict:
    """Complete a lesson. Repeating the call on a completed lesson changes nothing."""
    row = _run(
        lambda: service.complete_lesson(
            current_user.id, req.lesson_id, req.course_id, req.topic_id, req.time_spent_minutes
        )
    )
    return ok(lesson_progress_response(row), message="Lesson completed")


@progress_routes.post("/exercise/submit")
def submit_exercise(
    req: SubmitExerciseRequest,
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
) -> dict:
    is_correct = _run(
        lambda: service.submit_exercise(
            current_user.id,
            req.exercise_id,
            req.lesson_id,
            req.selected_answer,
            req.correct_answer,
            req.time_taken_seconds,
        )
    )
    return ok(ExerciseResultResponse(is_correct=is_correct), message="Exercise submitted")


@progress_routes.post("/quiz/submit")
def submit_quiz(
    req: SubmitQuizRequest,
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
) -> dict:
    _run(
        lambda: service.submit_quiz(
            current_user.id,
            req.lesson_id,
            req.course_id,
            req.score,
            req.total_questions,
            req.correct_answers,
        )
    )
    return ok(message="Quiz score saved")


@progress_routes.get("/{user_id}")
def get_user_progress(
    user_id: str,
    course_id: Optional[str] = Query(default=None, alias="courseId"),
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
) -> dict:
    """Lesson rows for the user, most recently updated first."""
    _require_self(user_id, current_user)
    rows = _run(lambda: service.get_user_progress(user_id, course_id))
    return ok([lesson_progress_response(r) for r in rows])


@progress_routes.get("/{user_id}/stats")
def get_user_stats(
    user_id: str,
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
) -> dict:
    _require_self(user_id, current_user)
    return ok(_run(lambda: service.get_user_stats(user_id)))


@progress_routes.get("/{user_id}/streak")
def get_user_streak(
    user_id: str,
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
) -> dict:
    _require_self(user_id, current_user)
    return ok(streak_response(_run(lambda: service.get_user_streak(user_id))))


@progress_routes.get("/{user_id}/analytics")
def get_daily_analytics(
    user_id: str,
    days: int = Query(default=30, ge=1, le=MAX_ANALYTICS_DAYS),
    current_user: User = Depends(get_current_user),
    service: ProgressService = Depends(get_progress_service),
) -> dict:
    _require_self(user_id, current_user)
    rows = _run(lambda: service.get_daily_analytics(user_id, days))
    return ok([daily_analytics_response(r) for r in rows])
