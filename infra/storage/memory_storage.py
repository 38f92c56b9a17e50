from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from learning.storage import KeyValueStorage


@dataclass
class InMemoryStorage(KeyValueStorage):
    """Process-local storage. Useful for tests and for ephemeral sessions."""

    _data: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
