"""
Client-side progress record. Serialised as JSON into the key-value store.
"""

from datetime import date

from pydantic import BaseModel, Field, field_validator


class TopicProgress(BaseModel):
    """Completed/total/percentage rollup for a topic (or a whole course)."""
    completed: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    percentage: int = Field(default=0, ge=0, le=100)


class ProgressRecord(BaseModel):
    """Per-identity learning progress cached on the client."""
    completed_lessons: list[str] = Field(default_factory=list)
    topic_progress: dict[str, TopicProgress] = Field(default_factory=dict)
    study_streak: int = Field(default=1, ge=0)
    last_study_date: date = Field(default_factory=date.today)
    quiz_scores: dict[str, int] = Field(default_factory=dict)  # lesson_id -> latest score 0-100
    time_spent: dict[str, int] = Field(default_factory=dict)  # lesson_id -> cumulative minutes
    words_learned: int = Field(default=0, ge=0)

    @field_validator("completed_lessons")
    @classmethod
    def _unique_in_order(cls, value: list[str]) -> list[str]:
        # Set semantics for membership, first-seen order for display.
        return list(dict.fromkeys(value))

    @field_validator("quiz_scores")
    @classmethod
    def _scores_in_range(cls, value: dict[str, int]) -> dict[str, int]:
        for lesson_id, score in value.items():
            if not 0 <= score <= 100:
                raise ValueError(f"quiz score for {lesson_id} out of range: {score}")
        return value

    @field_validator("time_spent")
    @classmethod
    def _non_negative_minutes(cls, value: dict[str, int]) -> dict[str, int]:
        for lesson_id, minutes in value.items():
            if minutes < 0:
                raise ValueError(f"negative time spent for {lesson_id}: {minutes}")
        return value

    @classmethod
    def default(cls, today: date) -> "ProgressRecord":
        """Zero state: streak starts at 1 on the creation day so the first completion does not count twice."""
        return cls(study_streak=1, last_study_date=today)

    def is_completed(self, lesson_id: str) -> bool:
        return lesson_id in self.completed_lessons
