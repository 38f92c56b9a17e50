"""
API schemas package. Import from submodules or from this package.

Example:
    from api.schemas import CompleteLessonRequest, ok
    from api.schemas.progress_schemas import CompleteLessonRequest
"""

from api.schemas.auth_schemas import (
    AuthTokenPayload,
    LoginData,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from api.schemas.user_schemas import User
from api.schemas.progress_schemas import (
    StartLessonRequest,
    CompleteLessonRequest,
    SubmitExerciseRequest,
    SubmitQuizRequest,
    LessonProgressResponse,
    ExerciseResultResponse,
    UserStreakResponse,
    UserStatsResponse,
    DailyAnalyticsResponse,
)
from api.schemas.response_schemas import ApiResponse, ok, fail

__all__ = [
    # auth
    "AuthTokenPayload",
    "LoginData",
    "LoginRequest",
    "RegisterRequest",
    "UserResponse",
    # user
    "User",
    # progress
    "StartLessonRequest",
    "CompleteLessonRequest",
    "SubmitExerciseRequest",
    "SubmitQuizRequest",
    "LessonProgressResponse",
    "ExerciseResultResponse",
    "UserStreakResponse",
    "UserStatsResponse",
    "DailyAnalyticsResponse",
    # envelope
    "ApiResponse",
    "ok",
    "fail",
]
