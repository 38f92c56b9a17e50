"""
Topic and course rollups.

Pure functions over lesson-id collections; no storage access, so they can be
used by the progress store, by dashboards and by tests alike.
"""

from typing import Any, Iterable, Mapping, Sequence

from learning.models import TopicProgress


def round_half_up(numerator: int, denominator: int) -> int:
    """
    Integer division rounded half away from zero for non-negative inputs.

    Uses exact integer arithmetic (no float error), so 100*1/8 = 12.5 rounds to 13
    where Python's built-in round() would give 12.
    """
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    return (2 * numerator + denominator) // (2 * denominator)


def completion_percentage(completed: int, total: int) -> int:
    """Percentage 0-100 of completed over total; 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    return round_half_up(100 * completed, total)


def calculate_topic_progress(
    topic_id: str,
    topic_lesson_ids: Sequence[str],
    completed_lessons: Iterable[str],
) -> TopicProgress:
    """Rollup for one topic: how many of its lessons are in the completed set."""
    completed_set = set(completed_lessons)
    total = len(topic_lesson_ids)
    completed = sum(1 for lesson_id in topic_lesson_ids if lesson_id in completed_set)
    return TopicProgress(
        completed=completed,
        total=total,
        percentage=completion_percentage(completed, total),
    )


def lesson_ids_of(lessons: Iterable[Any]) -> list[str]:
    """Accept lessons as plain ids, dicts with an "id" key, or objects with an .id attribute."""
    ids: list[str] = []
    for lesson in lessons or []:
        if isinstance(lesson, str):
            ids.append(lesson)
        elif isinstance(lesson, Mapping):
            ids.append(str(lesson["id"]))
        else:
            ids.append(str(getattr(lesson, "id")))
    return ids


def update_all_topic_progress(
    topics: Iterable[Any],
    completed_lessons: Iterable[str],
) -> dict[str, TopicProgress]:
    """
    Recompute the rollup of every given topic.

    The returned mapping is meant to replace the stored one wholesale: topics not
    present in `topics` are not carried over.
    """
    completed = list(completed_lessons)
    result: dict[str, TopicProgress] = {}
    for topic in topics:
        if isinstance(topic, Mapping):
            topic_id, lessons = str(topic["id"]), topic.get("lessons") or []
        else:
            topic_id, lessons = str(topic.id), getattr(topic, "lessons", None) or []
        result[topic_id] = calculate_topic_progress(topic_id, lesson_ids_of(lessons), completed)
    return result


def calculate_course_progress(course: Any, completed_lessons: Iterable[str]) -> TopicProgress:
    """Course rollup over all lessons of all its topics."""
    lesson_ids: list[str] = []
    for topic in course.topics:
        lesson_ids.extend(lesson_ids_of(topic.lessons))
    return calculate_topic_progress(str(course.id), lesson_ids, completed_lessons)
