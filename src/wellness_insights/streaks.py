"""Consecutive-day streaks.

A streak counts calendar days in a row with at least one qualifying record.
The current streak stays alive until the end of the day after the last
activity: it is anchored at today or yesterday, so logging nothing yet
today does not reset it. Nothing is persisted, the streak is recomputed
from the full set of activity days every time.
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import Iterable, List, Optional

from .dates import DateLike, days_between, to_date, today as local_today


@dataclass
class StreakState:
    """Current and best run of consecutive active days."""
    current_streak: int = 0
    longest_streak: int = 0

    @property
    def is_active(self) -> bool:
        return self.current_streak > 0

    def to_dict(self) -> dict:
        return asdict(self)


def _distinct_days_desc(day_keys: Iterable[DateLike]) -> List[date]:
    return sorted({to_date(key) for key in day_keys}, reverse=True)


def calculate_streak(day_keys: Iterable[DateLike], today: Optional[date] = None) -> StreakState:
    """Compute current and longest streak from activity days.

    Args:
        day_keys: Days with activity, in any order, duplicates allowed
        today: Reference day (defaults to the local calendar day)

    Returns:
        StreakState; (0, 0) for no activity
    """
    today = today or local_today()
    days = _distinct_days_desc(day_keys)
    if not days:
        return StreakState(current_streak=0, longest_streak=0)

    current_streak = 0
    if days_between(today, days[0]) in (0, 1):
        current_streak = 1
        for previous, current in zip(days, days[1:]):
            if days_between(previous, current) == 1:
                current_streak += 1
            else:
                break

    # Longest run anywhere in history, independent of the anchor above
    longest_streak = 0
    run = 1
    for previous, current in zip(days, days[1:]):
        if days_between(previous, current) == 1:
            run += 1
        else:
            longest_streak = max(longest_streak, run)
            run = 1
    longest_streak = max(longest_streak, run, current_streak)

    return StreakState(current_streak=current_streak, longest_streak=longest_streak)
