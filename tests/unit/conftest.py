"""
Unit test fixtures. In-memory storage and mocked HTTP; no server, no real DB file.
"""
import pytest

from infra.storage.memory_storage import InMemoryStorage
from learning.catalog import CourseCatalog


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def catalog():
    """Two courses: three lessons in 'greetings', eight in 'numbers', one empty topic."""
    return CourseCatalog.from_dicts(
        [
            {
                "id": "english-a1",
                "title": "English A1",
                "level": "A1",
                "topics": [
                    {"id": "greetings", "name": "Greetings", "lessons": ["l1", "l2", "l3"]},
                    {"id": "numbers", "name": "Numbers", "lessons": [f"n{i}" for i in range(1, 9)]},
                ],
            },
            {
                "id": "english-a2",
                "title": "English A2",
                "level": "A2",
                "topics": [{"id": "coming-soon", "name": "Coming soon", "lessons": []}],
            },
        ]
    )
