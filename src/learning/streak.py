"""
Daily study streak transitions.

One transition per qualifying study event; "today" is always passed in by the
caller so the rule stays deterministic and testable.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class StreakState:
    streak: int
    last_date: date


@dataclass(frozen=True)
class ServerStreakState:
    current_streak: int
    longest_streak: int
    last_activity_date: date


def days_between(earlier: date, later: date) -> int:
    """Whole calendar days from `earlier` to `later` (negative if `later` is before)."""
    return (later - earlier).days


def advance_streak(streak: int, last_date: Optional[date], today: date) -> StreakState:
    """
    Apply one study event to (streak, last_date).

    - same day: unchanged
    - next day: streak + 1
    - any other gap, including a negative one from clock skew: reset to 1
    A missing last_date starts a fresh streak of 1.
    """
    if last_date is None:
        return StreakState(streak=1, last_date=today)

    diff = days_between(last_date, today)
    if diff == 0:
        return StreakState(streak=streak, last_date=last_date)
    if diff == 1:
        return StreakState(streak=streak + 1, last_date=today)
    return StreakState(streak=1, last_date=today)


def advance_server_streak(
    current_streak: int,
    longest_streak: int,
    last_activity_date: Optional[date],
    today: date,
) -> ServerStreakState:
    """Same adjacency rule as advance_streak, plus a running maximum."""
    state = advance_streak(current_streak, last_activity_date, today)
    return ServerStreakState(
        current_streak=state.streak,
        longest_streak=max(longest_streak, state.streak),
        last_activity_date=state.last_date,
    )
