"""Unit tests for the course/topic/lesson index."""
import pytest

from learning.catalog import Course, CourseCatalog, Lesson, Topic


@pytest.mark.unit
class TestLookups:
    def test_lesson_to_topic_to_course(self, catalog):
        assert catalog.find_topic_by_lesson_id("n4").id == "numbers"
        assert catalog.find_course_by_topic_id("numbers").id == "english-a1"
        assert catalog.find_course_by_lesson_id("l2").level == "A1"

    def test_unknown_ids(self, catalog):
        assert catalog.find_topic_by_lesson_id("missing") is None
        assert catalog.find_course_by_topic_id("missing") is None
        assert catalog.find_course_by_lesson_id("missing") is None
        assert catalog.get_course("missing") is None
        assert catalog.get_topic("missing") is None

    def test_topics_and_totals(self, catalog):
        assert [t.id for t in catalog.topics] == ["greetings", "numbers", "coming-soon"]
        assert catalog.total_lessons() == 11
        assert catalog.get_topic("greetings").lesson_ids == ["l1", "l2", "l3"]


@pytest.mark.unit
class TestNavigation:
    def test_next_and_previous_within_topic(self, catalog):
        assert catalog.next_lesson("l1") == "l2"
        assert catalog.previous_lesson("l2") == "l1"

    def test_edges(self, catalog):
        assert catalog.next_lesson("l3") is None
        assert catalog.previous_lesson("l1") is None
        assert catalog.next_lesson("missing") is None


@pytest.mark.unit
class TestCourseProgress:
    def test_course_rollup(self, catalog):
        result = catalog.course_progress("english-a1", ["l1", "l2", "l3", "n1"])
        assert (result.completed, result.total, result.percentage) == (4, 11, 36)

    def test_empty_course(self, catalog):
        assert catalog.course_progress("english-a2", ["l1"]).percentage == 0

    def test_unknown_course(self, catalog):
        with pytest.raises(KeyError):
            catalog.course_progress("missing", [])


@pytest.mark.unit
class TestConstruction:
    def test_duplicate_lesson_ids_rejected(self):
        courses = [
            Course(
                id="c1",
                title="C1",
                topics=[
                    Topic(id="t1", name="T1", lessons=[Lesson("x")]),
                    Topic(id="t2", name="T2", lessons=[Lesson("x")]),
                ],
            )
        ]
        with pytest.raises(ValueError, match="Duplicate lesson id"):
            CourseCatalog(courses)

    def test_duplicate_topic_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate topic id"):
            CourseCatalog.from_dicts(
                [
                    {"id": "c1", "topics": [{"id": "t1", "lessons": []}]},
                    {"id": "c2", "topics": [{"id": "t1", "lessons": []}]},
                ]
            )

    def test_from_dicts_lesson_titles(self):
        catalog = CourseCatalog.from_dicts(
            [{"id": "c1", "title": "C1", "topics": [{"id": "t1", "name": "T1", "lessons": [{"id": "a", "title": "Hello"}, "b"]}]}]
        )
        assert catalog.get_topic("t1").lessons == [Lesson(id="a", title="Hello"), Lesson(id="b", title="")]
