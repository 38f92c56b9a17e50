"""Unit tests for topic/course rollups (pure functions)."""
import pytest

from learning.aggregator import (
    calculate_course_progress,
    calculate_topic_progress,
    completion_percentage,
    lesson_ids_of,
    round_half_up,
    update_all_topic_progress,
)
from learning.catalog import Lesson, Topic
from learning.models import TopicProgress


@pytest.mark.unit
class TestCompletionPercentage:
    @pytest.mark.parametrize(
        "completed,total,expected",
        [(0, 3, 0), (1, 3, 33), (2, 3, 67), (3, 3, 100), (1, 8, 13), (3, 8, 38), (1, 2, 50)],
    )
    def test_rounds_half_up(self, completed, total, expected):
        assert completion_percentage(completed, total) == expected

    def test_zero_total_is_zero(self):
        assert completion_percentage(0, 0) == 0

    def test_round_half_up_rejects_zero_denominator(self):
        with pytest.raises(ValueError):
            round_half_up(1, 0)


@pytest.mark.unit
class TestCalculateTopicProgress:
    def test_counts_only_lessons_of_the_topic(self):
        result = calculate_topic_progress("greetings", ["l1", "l2", "l3"], ["l1", "other-topic-lesson"])
        assert result == TopicProgress(completed=1, total=3, percentage=33)

    def test_all_completed(self):
        result = calculate_topic_progress("greetings", ["l1", "l2", "l3"], ["l3", "l2", "l1"])
        assert result.percentage == 100
        assert result.completed == result.total == 3

    def test_zero_lesson_topic(self):
        result = calculate_topic_progress("empty", [], ["l1"])
        assert result == TopicProgress(completed=0, total=0, percentage=0)


@pytest.mark.unit
class TestUpdateAllTopicProgress:
    def test_accepts_dicts_and_objects(self):
        topics = [
            {"id": "greetings", "lessons": [{"id": "l1"}, {"id": "l2"}]},
            Topic(id="numbers", name="Numbers", lessons=[Lesson("n1"), Lesson("n2"), Lesson("n3")]),
        ]
        result = update_all_topic_progress(topics, ["l1", "n1", "n2"])
        assert result["greetings"].percentage == 50
        assert result["numbers"].completed == 2
        assert result["numbers"].percentage == 67

    def test_result_only_contains_given_topics(self):
        result = update_all_topic_progress([{"id": "greetings", "lessons": ["l1"]}], ["l1"])
        assert list(result) == ["greetings"]

    def test_topic_without_lessons_key(self):
        result = update_all_topic_progress([{"id": "empty"}], [])
        assert result["empty"].total == 0


@pytest.mark.unit
class TestLessonIdsOf:
    def test_mixed_shapes(self):
        assert lesson_ids_of(["a", {"id": "b"}, Lesson("c")]) == ["a", "b", "c"]

    def test_none(self):
        assert lesson_ids_of(None) == []


@pytest.mark.unit
def test_course_progress_spans_topics(catalog):
    course = catalog.get_course("english-a1")
    result = calculate_course_progress(course, ["l1", "l2", "n1"])
    assert result.total == 11
    assert result.completed == 3
    assert result.percentage == 27
