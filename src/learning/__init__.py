"""
Learning-progress state model: rollups, streaks, the client-side progress store
and the sync client for the progress API. No dependency on the `api` package.
"""

from learning.aggregator import (
    calculate_course_progress,
    calculate_topic_progress,
    completion_percentage,
    update_all_topic_progress,
)
from learning.catalog import Course, CourseCatalog, Lesson, Topic
from learning.models import ProgressRecord, TopicProgress
from learning.store import ProgressStore
from learning.streak import advance_server_streak, advance_streak
from learning.sync_client import ProgressApiError, ProgressSyncClient

__all__ = [
    "calculate_course_progress",
    "calculate_topic_progress",
    "completion_percentage",
    "update_all_topic_progress",
    "Course",
    "CourseCatalog",
    "Lesson",
    "Topic",
    "ProgressRecord",
    "TopicProgress",
    "ProgressStore",
    "advance_server_streak",
    "advance_streak",
    "ProgressApiError",
    "ProgressSyncClient",
]
