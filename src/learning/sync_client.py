"""
HTTP client for the authoritative progress API.

Push operations (start/complete/submit) are best effort: a failure is logged as
a sync divergence and reported as None, never raised, because local progress
stays the source of truth for the UI. Read operations raise ProgressApiError so
dashboards can show an error state.

Transport errors and 5xx responses are retried a bounded number of times with
exponential backoff; 4xx responses are final.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Union

import httpx

from learning.config import SyncSettings, get_sync_settings

logger = logging.getLogger(__name__)

TokenSource = Union[str, Callable[[], Optional[str]], None]

API_PREFIX = "/api"


class ProgressApiError(Exception):
    """A progress API call failed (transport, non-2xx, or success=false envelope)."""

    def __init__(self, message: str, status_code: Optional[int] = None, *, retryable: Optional[bool] = None):
        super().__init__(message)
        self.status_code = status_code
        self._retryable = retryable

    @property
    def retryable(self) -> bool:
        if self._retryable is not None:
            return self._retryable
        return self.status_code is None or self.status_code >= 500


class ProgressSyncClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        token: TokenSource = None,
        *,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        client: Optional[httpx.Client] = None,
        settings: Optional[SyncSettings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        settings = settings or get_sync_settings()
        self.timeout = settings.timeout if timeout is None else timeout
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.backoff_seconds = settings.backoff_seconds if backoff_seconds is None else backoff_seconds
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._token = token
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url or settings.base_url, timeout=self.timeout)

    # -----------------------------
    # Plumbing
    # -----------------------------

    def _headers(self) -> dict[str, str]:
        token = self._token() if callable(self._token) else self._token
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send_once(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> dict:
        try:
            headers = self._headers()
        except Exception as e:
            raise ProgressApiError(f"token source failed: {e}", retryable=False) from e

        try:
            response = self._client.request(method, API_PREFIX + path, json=json, params=params, headers=headers)
        except httpx.TransportError as e:
            raise ProgressApiError(f"transport error: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # Undecodable body, redirect loop or bad URL: resending will not help.
            raise ProgressApiError(f"http error: {e}", retryable=False) from e

        try:
            body = response.json()
        except ValueError:
            raise ProgressApiError(f"invalid JSON response (status {response.status_code})", response.status_code)

        if not response.is_success or not isinstance(body, dict) or not body.get("success"):
            detail = body.get("error") or body.get("message") if isinstance(body, dict) else None
            raise ProgressApiError(detail or f"request failed with status {response.status_code}", response.status_code)
        return body

    def _request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> dict:
        """Send with bounded retry. Returns the response envelope."""
        attempt = 0
        while True:
            try:
                return self._send_once(method, path, json=json, params=params)
            except ProgressApiError as e:
                if not e.retryable or attempt >= self.max_retries:
                    raise
                delay = self.backoff_seconds * (2 ** attempt)
                logger.info(
                    "progress api retry method=%s path=%s attempt=%s delay=%.2fs error=%s",
                    method, path, attempt + 1, delay, e,
                )
                self._sleep(delay)
                attempt += 1

    def _push(self, operation: str, path: str, payload: dict) -> Optional[dict]:
        try:
            return self._request("POST", path, json=payload)
        except ProgressApiError as e:
            logger.warning(
                "sync divergence op=%s lesson_id=%s status=%s error=%s",
                operation, payload.get("lesson_id"), e.status_code, e,
            )
            return None

    # -----------------------------
    # Push operations (best effort)
    # -----------------------------

    def start_lesson(self, lesson_id: str, course_id: str, topic_id: str) -> Optional[dict]:
        """Returns the server row, or None if the push failed."""
        envelope = self._push(
            "start_lesson",
            "/progress/lesson/start",
            {"lesson_id": lesson_id, "course_id": course_id, "topic_id": topic_id},
        )
        return envelope.get("data") if envelope else None

    def complete_lesson(
        self, lesson_id: str, course_id: str, topic_id: str, time_spent_minutes: int = 0
    ) -> Optional[dict]:
        envelope = self._push(
            "complete_lesson",
            "/progress/lesson/complete",
            {
                "lesson_id": lesson_id,
                "course_id": course_id,
                "topic_id": topic_id,
                "time_spent_minutes": time_spent_minutes,
            },
        )
        return envelope.get("data") if envelope else None

    def submit_exercise(
        self,
        exercise_id: str,
        lesson_id: str,
        selected_answer: int,
        correct_answer: int,
        time_taken_seconds: Optional[int] = None,
    ) -> Optional[bool]:
        """Returns the server's is_correct verdict, or None if the push failed."""
        payload = {
            "exercise_id": exercise_id,
            "lesson_id": lesson_id,
            "selected_answer": selected_answer,
            "correct_answer": correct_answer,
        }
        if time_taken_seconds is not None:
            payload["time_taken_seconds"] = time_taken_seconds
        envelope = self._push("submit_exercise", "/progress/exercise/submit", payload)
        if not envelope:
            return None
        return bool((envelope.get("data") or {}).get("is_correct"))

    def submit_quiz(
        self,
        lesson_id: str,
        course_id: str,
        score: float,
        total_questions: int,
        correct_answers: int,
    ) -> bool:
        """True once the server acknowledged the quiz."""
        envelope = self._push(
            "submit_quiz",
            "/progress/quiz/submit",
            {
                "lesson_id": lesson_id,
                "course_id": course_id,
                "score": score,
                "total_questions": total_questions,
                "correct_answers": correct_answers,
            },
        )
        return envelope is not None

    # -----------------------------
    # Reads (raise on failure)
    # -----------------------------

    def get_progress(self, user_id: str, course_id: Optional[str] = None) -> list[dict]:
        params = {"courseId": course_id} if course_id else None
        return self._request("GET", f"/progress/{user_id}", params=params).get("data") or []

    def get_stats(self, user_id: str) -> Optional[dict]:
        return self._request("GET", f"/progress/{user_id}/stats").get("data")

    def get_streak(self, user_id: str) -> Optional[dict]:
        return self._request("GET", f"/progress/{user_id}/streak").get("data")

    # -----------------------------
    # Lifecycle
    # -----------------------------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ProgressSyncClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
