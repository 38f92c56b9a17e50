from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """
    Durable string key -> string value contract used by the progress store.

    The interface lives in the `learning` library; concrete backends live in
    `infra.storage`.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the key. Deleting a missing key is not an error."""
        raise NotImplementedError
