"""Composite per-family summaries.

Builds the stats blocks shown next to the charts: journal counters, the
exercise dashboard with achievements, the weekly wellness comparison and
the mood calendar. All functions are pure over typed records.
"""

import calendar
from dataclasses import dataclass, asdict, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .dates import day_key, days_between, format_clock_time, format_relative_date, parse_day_key
from .db.models import ExerciseRecord, JournalRecord, MoodRecord, WellnessRecord
from .normalizer import round_half_up
from .streaks import calculate_streak
from .trends import DEFAULT_CHANGE_THRESHOLD_PCT, TrendDirection, classify_percent_change


# =============================================================================
# Journal
# =============================================================================

@dataclass
class JournalStats:
    """Journal counters."""
    total_entries: int = 0
    this_week: int = 0
    streak: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class JournalEntryView:
    """A journal entry prepared for listing."""
    id: Optional[int]
    date_label: str
    time_label: str
    content: str
    mood: str
    sentiment: str
    created_at: datetime
    analysis: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        return d


def journal_stats(records: Sequence[JournalRecord], now: datetime) -> JournalStats:
    """Total entries, entries in the last 7x24h and the current writing streak."""
    week_ago = now - timedelta(days=7)
    streak = calculate_streak((r.day_key for r in records), today=now.date())
    return JournalStats(
        total_entries=len(records),
        this_week=sum(1 for r in records if r.created_at >= week_ago),
        streak=streak.current_streak,
    )


def journal_entry_views(records: Iterable[JournalRecord], today: date) -> List[JournalEntryView]:
    """Entries newest first with relative date and clock time labels."""
    ordered = sorted(records, key=lambda r: r.created_at, reverse=True)
    return [
        JournalEntryView(
            id=r.record_id,
            date_label=format_relative_date(r.created_at, today),
            time_label=format_clock_time(r.created_at),
            content=r.content,
            mood=r.mood,
            sentiment=r.sentiment_label,
            created_at=r.created_at,
            analysis=r.analysis,
        )
        for r in ordered
    ]


# =============================================================================
# Exercises
# =============================================================================

@dataclass(frozen=True)
class Achievement:
    """Unlockable exercise milestone."""
    id: str
    name: str
    description: str
    requirement: Optional[int] = None  # total completions
    streak_requirement: Optional[int] = None  # longest streak in days

    def is_unlocked(self, total_completions: int, longest_streak: int) -> bool:
        if self.requirement:
            return total_completions >= self.requirement
        if self.streak_requirement:
            return longest_streak >= self.streak_requirement
        return False

    def progress(self, total_completions: int, longest_streak: int) -> float:
        """Progress towards the milestone, 0..1."""
        if self.requirement:
            return min(total_completions / self.requirement, 1.0)
        if self.streak_requirement:
            return min(longest_streak / self.streak_requirement, 1.0)
        return 0.0

    def to_dict(self) -> dict:
        return asdict(self)


ACHIEVEMENTS: Sequence[Achievement] = (
    Achievement("first-step", "First Step", "Complete your first exercise", requirement=1),
    Achievement("week-warrior", "Week Warrior", "Complete 7 exercises", requirement=7),
    Achievement("zen-master", "Zen Master", "Complete 30 exercises", requirement=30),
    Achievement("streak-starter", "Streak Starter", "3-day streak", streak_requirement=3),
    Achievement("streak-champion", "Streak Champion", "7-day streak", streak_requirement=7),
)


@dataclass
class ExerciseStats:
    """Exercise dashboard numbers."""
    total_completions: int = 0
    today_count: int = 0
    week_count: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    unlocked_achievements: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def exercise_stats(records: Sequence[ExerciseRecord], now: datetime) -> ExerciseStats:
    """Counts, streaks and unlocked achievement ids for exercise completions."""
    today_key = day_key(now)
    week_ago = now - timedelta(days=7)
    streak = calculate_streak((r.day_key for r in records), today=now.date())
    total = len(records)

    return ExerciseStats(
        total_completions=total,
        today_count=sum(1 for r in records if r.day_key == today_key),
        week_count=sum(1 for r in records if r.created_at >= week_ago),
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        unlocked_achievements=[
            a.id for a in ACHIEVEMENTS if a.is_unlocked(total, streak.longest_streak)
        ],
    )


# =============================================================================
# Wellness
# =============================================================================

@dataclass
class WellnessSummary:
    """This week's wellness averages compared with last week."""
    avg_sleep: float = 0.0
    avg_water: float = 0.0
    avg_exercise: int = 0
    sleep_trend: TrendDirection = TrendDirection.STABLE
    water_trend: TrendDirection = TrendDirection.STABLE
    exercise_trend: TrendDirection = TrendDirection.STABLE
    days_logged: int = 0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["sleep_trend"] = self.sleep_trend.value
        d["water_trend"] = self.water_trend.value
        d["exercise_trend"] = self.exercise_trend.value
        return d


def _averages(records: Sequence[WellnessRecord]) -> tuple:
    if not records:
        return 0.0, 0.0, 0.0
    count = len(records)
    return (
        sum(r.sleep_hours for r in records) / count,
        sum(r.water_glasses for r in records) / count,
        sum(r.exercise_minutes for r in records) / count,
    )


def weekly_wellness_summary(
    records: Iterable[WellnessRecord],
    today: date,
    threshold_pct: float = DEFAULT_CHANGE_THRESHOLD_PCT,
) -> WellnessSummary:
    """Compare ``[today-7, today]`` with ``[today-14, today-7)``.

    Averages are per logged day. Trends use the unrounded averages.
    """
    this_week: List[WellnessRecord] = []
    last_week: List[WellnessRecord] = []
    for record in records:
        days_ago = days_between(today, record.day_key)
        if 0 <= days_ago <= 7:
            this_week.append(record)
        elif 7 < days_ago <= 14:
            last_week.append(record)

    sleep, water, exercise = _averages(this_week)
    last_sleep, last_water, last_exercise = _averages(last_week)

    return WellnessSummary(
        avg_sleep=round_half_up(sleep, 1),
        avg_water=round_half_up(water, 1),
        avg_exercise=int(round_half_up(exercise)),
        sleep_trend=classify_percent_change(sleep, last_sleep, threshold_pct),
        water_trend=classify_percent_change(water, last_water, threshold_pct),
        exercise_trend=classify_percent_change(exercise, last_exercise, threshold_pct),
        days_logged=len(this_week),
    )


# =============================================================================
# Mood calendar
# =============================================================================

@dataclass
class MoodCalendarMonth:
    """Logged moods of one calendar month with summary counts."""
    year: int
    month: int
    days: Dict[str, MoodRecord] = field(default_factory=dict)
    avg_mood: float = 0.0
    days_logged: int = 0
    best_days: int = 0
    challenging_days: int = 0

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "days": {k: v.to_dict() for k, v in self.days.items()},
            "avg_mood": self.avg_mood,
            "days_logged": self.days_logged,
            "best_days": self.best_days,
            "challenging_days": self.challenging_days,
        }


def month_bounds(year: int, month: int) -> tuple:
    """First and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def mood_calendar_month(records: Iterable[MoodRecord], year: int, month: int) -> MoodCalendarMonth:
    """One mood per day of the month (latest wins) and the month's counters.

    Best days have a mood of 4 or more, challenging days 2 or less.
    """
    start, end = month_bounds(year, month)
    days: Dict[str, MoodRecord] = {}
    for record in sorted(records, key=lambda r: r.created_at):
        if start <= parse_day_key(record.day_key) <= end:
            days[record.day_key] = record

    values = [r.mood_value for r in days.values()]
    return MoodCalendarMonth(
        year=year,
        month=month,
        days=dict(sorted(days.items())),
        avg_mood=round_half_up(sum(values) / len(values), 1) if values else 0.0,
        days_logged=len(values),
        best_days=sum(1 for v in values if v >= 4),
        challenging_days=sum(1 for v in values if v <= 2),
    )
