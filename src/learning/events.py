"""
In-process change notification for progress records.
Subscribers are called synchronously after every save; there is no cross-process delivery.
"""

from __future__ import annotations

import logging
from typing import Callable

from learning.models import ProgressRecord

logger = logging.getLogger(__name__)

ProgressListener = Callable[[str, ProgressRecord], None]


class ChangeNotifier:
    """Keeps listeners and fans out (identity, record) on every change."""

    def __init__(self) -> None:
        self._listeners: list[ProgressListener] = []

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, identity: str, record: ProgressRecord) -> None:
        for listener in list(self._listeners):
            try:
                listener(identity, record)
            except Exception:
                # One broken observer must not block the save or the others.
                logger.exception("progress listener failed identity=%s", identity)

    def __len__(self) -> int:
        return len(self._listeners)
