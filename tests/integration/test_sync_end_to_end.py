"""
Client store + sync client talking to the real API through TestClient.
"""
from datetime import date

import pytest

from infra.storage.memory_storage import InMemoryStorage
from learning.store import ProgressStore
from learning.sync_client import ProgressApiError, ProgressSyncClient

GREETINGS = ["l1", "l2", "l3"]


@pytest.fixture
def synced_store(api_client, auth_user):
    user_id, headers = auth_user
    token = headers["Authorization"].split(" ", 1)[1]
    sync = ProgressSyncClient(token=token, client=api_client, max_retries=0)
    store = ProgressStore(InMemoryStorage(), sync_client=sync, clock=lambda: date(2024, 1, 10))
    return user_id, store, sync


@pytest.mark.integration
class TestSyncEndToEnd:
    def test_completion_reaches_server(self, synced_store):
        user_id, store, sync = synced_store
        store.start_lesson(user_id, "l1", "english-a1", "greetings")
        for lesson_id in GREETINGS:
            store.mark_lesson_complete(user_id, lesson_id, "greetings", GREETINGS, course_id="english-a1", time_spent_minutes=5)
        # Duplicate local completion never reaches the server.
        store.mark_lesson_complete(user_id, "l1", "greetings", GREETINGS, course_id="english-a1", time_spent_minutes=5)

        assert store.get_topic_progress(user_id, "greetings").percentage == 100
        rows = sync.get_progress(user_id, course_id="english-a1")
        assert {r["lesson_id"] for r in rows} == set(GREETINGS)
        assert all(r["status"] == "completed" for r in rows)

        stats = sync.get_stats(user_id)
        assert stats["lessons_completed"] == 3
        assert stats["total_time_spent_minutes"] == 15

    def test_quiz_scores_keep_latest_locally_and_all_remotely(self, synced_store):
        user_id, store, sync = synced_store
        store.add_quiz_score(user_id, "l1", 80, course_id="english-a1", total_questions=5, correct_answers=4)
        store.add_quiz_score(user_id, "l1", 60, course_id="english-a1", total_questions=5, correct_answers=3)

        assert store.get_user_progress(user_id).quiz_scores == {"l1": 60}
        assert sync.get_stats(user_id)["average_quiz_score"] == 70.0

    def test_rejected_push_keeps_local_progress(self, api_client, auth_user):
        user_id, _ = auth_user
        sync = ProgressSyncClient(token="expired-or-bogus", client=api_client, max_retries=0)
        store = ProgressStore(InMemoryStorage(), sync_client=sync)

        assert store.mark_lesson_complete(user_id, "l1", "greetings", GREETINGS, course_id="english-a1") is True
        assert store.is_lesson_completed(user_id, "l1")
        with pytest.raises(ProgressApiError) as excinfo:
            sync.get_streak(user_id)
        assert excinfo.value.status_code == 401

    def test_exercise_verdict_from_server(self, synced_store):
        user_id, _, sync = synced_store
        assert sync.submit_exercise("e1", "l1", 3, 3, time_taken_seconds=20) is True
        assert sync.get_streak(user_id)["current_streak"] == 1
