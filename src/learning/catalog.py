"""
Course -> topic -> lesson content index.

Built once from the nested course structure; lookups by lesson or topic id are
dictionary hits instead of scans over the nested lists.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from learning.aggregator import calculate_course_progress
from learning.models import TopicProgress


@dataclass(frozen=True)
class Lesson:
    id: str
    title: str = ""


@dataclass
class Topic:
    id: str
    name: str
    lessons: list[Lesson] = field(default_factory=list)

    @property
    def lesson_ids(self) -> list[str]:
        return [lesson.id for lesson in self.lessons]


@dataclass
class Course:
    id: str
    title: str
    level: Optional[str] = None  # CEFR level, e.g. "A1"
    topics: list[Topic] = field(default_factory=list)


class CourseCatalog:
    """Reverse indexes over a list of courses. Lesson and topic ids must be unique across the catalog."""

    def __init__(self, courses: Iterable[Course]):
        self.courses: list[Course] = list(courses)
        self._courses_by_id: dict[str, Course] = {}
        self._topics_by_id: dict[str, Topic] = {}
        self._course_by_topic: dict[str, str] = {}
        self._topic_by_lesson: dict[str, str] = {}

        for course in self.courses:
            self._courses_by_id[course.id] = course
            for topic in course.topics:
                if topic.id in self._topics_by_id:
                    raise ValueError(f"Duplicate topic id in catalog: {topic.id}")
                self._topics_by_id[topic.id] = topic
                self._course_by_topic[topic.id] = course.id
                for lesson in topic.lessons:
                    if lesson.id in self._topic_by_lesson:
                        raise ValueError(f"Duplicate lesson id in catalog: {lesson.id}")
                    self._topic_by_lesson[lesson.id] = topic.id

    @classmethod
    def from_dicts(cls, raw_courses: Iterable[dict[str, Any]]) -> "CourseCatalog":
        """Build from plain data, e.g. a JSON content export."""
        courses: list[Course] = []
        for c in raw_courses:
            topics = []
            for t in c.get("topics") or []:
                lessons = [
                    Lesson(id=lesson, title="") if isinstance(lesson, str)
                    else Lesson(id=str(lesson["id"]), title=lesson.get("title", ""))
                    for lesson in t.get("lessons") or []
                ]
                topics.append(Topic(id=str(t["id"]), name=t.get("name", ""), lessons=lessons))
            courses.append(Course(id=str(c["id"]), title=c.get("title", ""), level=c.get("level"), topics=topics))
        return cls(courses)

    @property
    def topics(self) -> list[Topic]:
        return list(self._topics_by_id.values())

    def get_course(self, course_id: str) -> Optional[Course]:
        return self._courses_by_id.get(course_id)

    def get_topic(self, topic_id: str) -> Optional[Topic]:
        return self._topics_by_id.get(topic_id)

    def find_topic_by_lesson_id(self, lesson_id: str) -> Optional[Topic]:
        topic_id = self._topic_by_lesson.get(lesson_id)
        return self._topics_by_id.get(topic_id) if topic_id else None

    def find_course_by_topic_id(self, topic_id: str) -> Optional[Course]:
        course_id = self._course_by_topic.get(topic_id)
        return self._courses_by_id.get(course_id) if course_id else None

    def find_course_by_lesson_id(self, lesson_id: str) -> Optional[Course]:
        topic_id = self._topic_by_lesson.get(lesson_id)
        return self.find_course_by_topic_id(topic_id) if topic_id else None

    def next_lesson(self, lesson_id: str) -> Optional[str]:
        """Next lesson id within the same topic, or None at the end / for unknown ids."""
        topic = self.find_topic_by_lesson_id(lesson_id)
        if topic is None:
            return None
        ids = topic.lesson_ids
        idx = ids.index(lesson_id)
        return ids[idx + 1] if idx + 1 < len(ids) else None

    def previous_lesson(self, lesson_id: str) -> Optional[str]:
        topic = self.find_topic_by_lesson_id(lesson_id)
        if topic is None:
            return None
        ids = topic.lesson_ids
        idx = ids.index(lesson_id)
        return ids[idx - 1] if idx > 0 else None

    def course_progress(self, course_id: str, completed_lessons: Iterable[str]) -> TopicProgress:
        course = self._courses_by_id.get(course_id)
        if course is None:
            raise KeyError(f"Unknown course: {course_id}")
        return calculate_course_progress(course, completed_lessons)

    def total_lessons(self) -> int:
        return len(self._topic_by_lesson)
