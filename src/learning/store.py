"""
Client-side progress store.

One ProgressRecord per identity, kept as JSON in a KeyValueStorage. Every record
operation takes the identity explicitly; the "current user" pointer is only
session bookkeeping (login/logout) and is never consulted implicitly.

Mutations are optimistic: the local record is saved first, then pushed through
the sync client. A failed push leaves local state untouched.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Iterable, Optional, Sequence

from pydantic import ValidationError

from learning.aggregator import calculate_topic_progress, completion_percentage, update_all_topic_progress
from learning.events import ChangeNotifier, ProgressListener
from learning.models import ProgressRecord, TopicProgress
from learning.storage import KeyValueStorage
from learning.streak import advance_streak
from learning.sync_client import ProgressSyncClient

logger = logging.getLogger(__name__)

PROGRESS_KEY_PREFIX = "tvenglish_user_progress"
CURRENT_USER_KEY = "tvenglish_current_user"


def progress_key(identity: str) -> str:
    return f"{PROGRESS_KEY_PREFIX}:{identity}"


class ProgressStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        sync_client: Optional[ProgressSyncClient] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.storage = storage
        self.sync_client = sync_client
        self.clock = clock
        self.notifier = ChangeNotifier()

    # -----------------------------
    # Session pointer
    # -----------------------------

    def set_current_user(self, identity: str) -> None:
        self.storage.set(CURRENT_USER_KEY, identity)

    def get_current_user(self) -> Optional[str]:
        return self.storage.get(CURRENT_USER_KEY)

    def logout(self) -> None:
        """Clear the pointer. The identity's record stays in storage under its own key."""
        self.storage.delete(CURRENT_USER_KEY)

    # -----------------------------
    # Record persistence
    # -----------------------------

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        return self.notifier.subscribe(listener)

    def get_user_progress(self, identity: str) -> ProgressRecord:
        """Stored record or a fresh default. Never raises on missing or corrupt data."""
        raw = self.storage.get(progress_key(identity))
        if raw:
            try:
                return ProgressRecord.model_validate_json(raw)
            except ValidationError as e:
                logger.warning(
                    "discarding malformed progress record identity=%s errors=%s",
                    identity, e.error_count(),
                )
        return ProgressRecord.default(self.clock())

    def save_user_progress(self, identity: str, record: ProgressRecord) -> None:
        self.storage.set(progress_key(identity), record.model_dump_json())
        self.notifier.emit(identity, record)

    def reset_progress(self, identity: str) -> None:
        self.storage.delete(progress_key(identity))

    # -----------------------------
    # Mutations
    # -----------------------------

    def mark_lesson_complete(
        self,
        identity: str,
        lesson_id: str,
        topic_id: str,
        topic_lesson_ids: Sequence[str],
        course_id: Optional[str] = None,
        time_spent_minutes: int = 0,
    ) -> bool:
        """
        Complete a lesson locally and push it to the server.

        Returns False without touching anything (no save, no remote call) when the
        lesson is already completed.
        """
        if time_spent_minutes < 0:
            raise ValueError("time_spent_minutes must be >= 0")

        record = self.get_user_progress(identity)
        if record.is_completed(lesson_id):
            return False

        record.completed_lessons.append(lesson_id)
        streak = advance_streak(record.study_streak, record.last_study_date, self.clock())
        record.study_streak = streak.streak
        record.last_study_date = streak.last_date
        if time_spent_minutes:
            record.time_spent[lesson_id] = record.time_spent.get(lesson_id, 0) + time_spent_minutes
        record.topic_progress[topic_id] = calculate_topic_progress(
            topic_id, topic_lesson_ids, record.completed_lessons
        )
        self.save_user_progress(identity, record)

        if self.sync_client is not None and course_id is not None:
            self.sync_client.complete_lesson(lesson_id, course_id, topic_id, time_spent_minutes)
        return True

    def start_lesson(self, identity: str, lesson_id: str, course_id: str, topic_id: str) -> Optional[dict]:
        """Lesson start has no local state; it only reaches the server."""
        if self.sync_client is None:
            return None
        logger.debug("start lesson identity=%s lesson_id=%s", identity, lesson_id)
        return self.sync_client.start_lesson(lesson_id, course_id, topic_id)

    def update_all_topic_progress(self, identity: str, topics: Iterable[Any]) -> dict[str, TopicProgress]:
        """Full resync of topic rollups; topics not given are dropped from the record."""
        record = self.get_user_progress(identity)
        record.topic_progress = update_all_topic_progress(topics, record.completed_lessons)
        self.save_user_progress(identity, record)
        return record.topic_progress

    def add_quiz_score(
        self,
        identity: str,
        lesson_id: str,
        score: int,
        course_id: Optional[str] = None,
        total_questions: Optional[int] = None,
        correct_answers: Optional[int] = None,
    ) -> None:
        """Keep only the latest score locally; the server keeps every submission."""
        if not 0 <= score <= 100:
            raise ValueError("score must be between 0 and 100")
        record = self.get_user_progress(identity)
        record.quiz_scores[lesson_id] = score
        self.save_user_progress(identity, record)

        if self.sync_client is not None and course_id is not None and total_questions is not None:
            self.sync_client.submit_quiz(
                lesson_id, course_id, score, total_questions,
                correct_answers if correct_answers is not None else 0,
            )

    def add_words_learned(self, identity: str, count: int) -> int:
        if count < 0:
            raise ValueError("words learned can only grow")
        record = self.get_user_progress(identity)
        record.words_learned += count
        self.save_user_progress(identity, record)
        return record.words_learned

    def add_time_spent(self, identity: str, lesson_id: str, minutes: int) -> int:
        if minutes < 0:
            raise ValueError("minutes must be >= 0")
        record = self.get_user_progress(identity)
        record.time_spent[lesson_id] = record.time_spent.get(lesson_id, 0) + minutes
        self.save_user_progress(identity, record)
        return record.time_spent[lesson_id]

    # -----------------------------
    # Reads
    # -----------------------------

    def is_lesson_completed(self, identity: str, lesson_id: str) -> bool:
        return self.get_user_progress(identity).is_completed(lesson_id)

    def get_topic_progress(self, identity: str, topic_id: str) -> TopicProgress:
        return self.get_user_progress(identity).topic_progress.get(topic_id) or TopicProgress()

    def get_completion_percentage(self, identity: str, total_lessons: int) -> int:
        return completion_percentage(len(self.get_user_progress(identity).completed_lessons), total_lessons)
