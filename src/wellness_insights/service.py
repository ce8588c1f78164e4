"""
Insights service.

Fetches raw records from the store, pushes them through the normalizer and
computes the per-family analytics. Every ``get_*`` call recomputes from
scratch; caching is the controller's job. Writes validate caller input and
go straight to the store, whose change notification triggers recomputes.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Union

from .config import Settings, get_settings
from .dates import day_key, days_before
from .db.models import (
    DailyRecord,
    ExerciseRecord,
    JournalRecord,
    MetricFamily,
    MoodRecord,
    WellnessRecord,
)
from .db.store import RecordStore
from .exceptions import ConfigurationError, NotFoundError, ValidationError
from .integrations.journal_analysis import JournalAnalysis, JournalAnalysisClient
from .normalizer import (
    STRESS_TO_NUMBER,
    NEUTRAL_STRESS,
    is_known_mood,
    latest_per_day,
    mood_display_label,
    mood_to_number,
    normalize_mood,
    sentiment_to_mood,
    to_exercise_record,
    to_journal_record,
    to_mood_record,
    to_wellness_record,
)
from .rollup import monthly_mood_series, monthly_sentiment_series
from .series import SentimentPoint, SeriesPoint, build_daily_series, build_daily_sentiment_series
from .streaks import StreakState, calculate_streak
from .summaries import (
    ExerciseStats,
    JournalEntryView,
    JournalStats,
    MoodCalendarMonth,
    WellnessSummary,
    exercise_stats,
    journal_entry_views,
    journal_stats,
    month_bounds,
    mood_calendar_month,
    weekly_wellness_summary,
)
from .trends import TrendDirection, classify_series_trend

logger = logging.getLogger(__name__)


# Field name -> (stored column, maximum accepted value)
WELLNESS_FIELDS: Dict[str, tuple] = {
    "sleep": ("sleep_hours", 24),
    "water": ("water_glasses", 20),
    "exercise": ("exercise_minutes", 300),
}

# Score stored with a new journal entry; any other label stores 0
JOURNAL_SENTIMENT_SCORES: Dict[str, float] = {
    "positive": 0.7,
    "negative": -0.5,
}


@dataclass
class MoodAnalytics:
    """Everything the mood dashboard shows."""
    todays_mood: Optional[MoodRecord]
    weekly_series: List[SeriesPoint] = field(default_factory=list)
    monthly_series: List[SeriesPoint] = field(default_factory=list)
    streak: StreakState = field(default_factory=StreakState)
    trend: TrendDirection = TrendDirection.STABLE

    def to_dict(self) -> dict:
        return {
            "todays_mood": self.todays_mood.to_dict() if self.todays_mood else None,
            "weekly_series": [p.to_dict() for p in self.weekly_series],
            "monthly_series": [p.to_dict() for p in self.monthly_series],
            "streak": self.streak.to_dict(),
            "trend": self.trend.value,
        }


@dataclass
class JournalAnalytics:
    """Journal entries, counters and sentiment charts."""
    entries: List[JournalEntryView] = field(default_factory=list)
    stats: JournalStats = field(default_factory=JournalStats)
    weekly_series: List[SentimentPoint] = field(default_factory=list)
    monthly_series: List[SentimentPoint] = field(default_factory=list)
    streak: StreakState = field(default_factory=StreakState)
    trend: TrendDirection = TrendDirection.STABLE

    def to_dict(self) -> dict:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "stats": self.stats.to_dict(),
            "weekly_series": [p.to_dict() for p in self.weekly_series],
            "monthly_series": [p.to_dict() for p in self.monthly_series],
            "streak": self.streak.to_dict(),
            "trend": self.trend.value,
        }


FamilyResult = Union[MoodAnalytics, JournalAnalytics, WellnessSummary, ExerciseStats]


class InsightsService:
    """Compute analytics for one user and metric family at a time."""

    def __init__(
        self,
        store: RecordStore,
        analysis_client: Optional[JournalAnalysisClient] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.analysis_client = analysis_client
        self.settings = settings or get_settings()
        self._clock = clock or datetime.now

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self.now().date()

    def _history(self, user_id: str, family: MetricFamily, start: Optional[date] = None) -> List[DailyRecord]:
        return self.store.query_daily_records(user_id, family, start, self.today())

    def compute(self, user_id: str, family: MetricFamily) -> FamilyResult:
        """Recompute the analytics of one family."""
        family = MetricFamily(family)
        if family == MetricFamily.MOOD:
            return self.get_mood_analytics(user_id)
        if family == MetricFamily.JOURNAL:
            return self.get_journal_analytics(user_id)
        if family == MetricFamily.WELLNESS:
            return self.get_wellness_summary(user_id)
        return self.get_exercise_stats(user_id)

    # =========================================================================
    # Mood
    # =========================================================================

    def _mood_records(self, user_id: str, start: Optional[date] = None, end: Optional[date] = None) -> List[MoodRecord]:
        rows = self.store.query_daily_records(user_id, MetricFamily.MOOD, start, end or self.today())
        return [to_mood_record(r) for r in latest_per_day(rows)]

    def get_todays_mood(self, user_id: str) -> Optional[MoodRecord]:
        today = self.today()
        records = self._mood_records(user_id, start=today, end=today)
        return records[-1] if records else None

    def save_mood(self, user_id: str, mood: str) -> MoodRecord:
        """Set today's mood, replacing an earlier check-in of the same day.

        Raises:
            ValidationError: If the mood label is not on the mood scale
        """
        if not is_known_mood(mood):
            raise ValidationError(f"Unknown mood '{mood}'", field="mood")
        label = normalize_mood(mood)
        row = self.store.upsert_daily_record(
            user_id,
            day_key(self.today()),
            MetricFamily.MOOD,
            {"mood": label, "mood_value": mood_to_number(label)},
        )
        return to_mood_record(row)

    def get_mood_analytics(self, user_id: str) -> MoodAnalytics:
        today = self.today()
        records = self._mood_records(user_id)
        window_start = day_key(days_before(today, self.settings.monthly_window_days - 1))
        recent = [r for r in records if r.day_key >= window_start]

        weekly = build_daily_series(
            {r.day_key: r.mood_value for r in recent},
            today,
            window=self.settings.weekly_window_days,
            ndigits=0,
            describe=mood_display_label,
        )
        todays_key = day_key(today)
        return MoodAnalytics(
            todays_mood=next((r for r in records if r.day_key == todays_key), None),
            weekly_series=weekly,
            monthly_series=monthly_mood_series(recent, today, self.settings.rollup_weeks),
            streak=calculate_streak((r.day_key for r in records), today=today),
            trend=classify_series_trend(
                [p.value for p in weekly], self.settings.sentiment_trend_threshold
            ),
        )

    def get_mood_calendar(self, user_id: str, year: int, month: int) -> MoodCalendarMonth:
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month {month}", field="month")
        start, end = month_bounds(year, month)
        return mood_calendar_month(self._mood_records(user_id, start=start, end=end), year, month)

    # =========================================================================
    # Journal
    # =========================================================================

    def _journal_records(self, user_id: str) -> List[JournalRecord]:
        return [to_journal_record(r) for r in self._history(user_id, MetricFamily.JOURNAL)]

    def save_journal_entry(
        self,
        user_id: str,
        content: str,
        analysis: Optional[Union[JournalAnalysis, Dict[str, Any]]] = None,
    ) -> JournalRecord:
        """Append a journal entry with the readings derived from its analysis."""
        if not content or not content.strip():
            raise ValidationError("Journal entry is required", field="content")

        if isinstance(analysis, JournalAnalysis):
            analysis = analysis.model_dump(by_alias=True)

        sentiment = (analysis or {}).get("sentiment")
        stress = (analysis or {}).get("stressLevel")
        # An unrecognized label is still a reading and counts as neutral 50;
        # only an entry without any stress label stores None.
        if analysis and stress:
            stress_level = STRESS_TO_NUMBER.get(str(stress).lower(), NEUTRAL_STRESS)
        else:
            stress_level = None

        values = {
            "content": content,
            "mood": sentiment_to_mood(sentiment) if sentiment else "okay",
            "sentiment": JOURNAL_SENTIMENT_SCORES.get(str(sentiment).lower(), 0.0) if sentiment else 0.0,
            "stress_level": stress_level,
            "ai_analysis": analysis,
        }
        row = self.store.add_daily_record(user_id, MetricFamily.JOURNAL, values, created_at=self.now())
        logger.debug("Saved journal entry %s for %s", row.record_id, user_id)
        return to_journal_record(row)

    def delete_journal_entry(self, user_id: str, entry_id: int) -> None:
        """Remove one of the user's journal entries."""
        if not self.store.delete_daily_record(user_id, entry_id, family=MetricFamily.JOURNAL):
            raise NotFoundError("Journal entry", str(entry_id))
        logger.debug("Deleted journal entry %s for %s", entry_id, user_id)

    def analyze_entry(self, content: str, mood_hint: Optional[str] = None) -> JournalAnalysis:
        if self.analysis_client is None:
            raise ConfigurationError("analysis_service_url")
        return self.analysis_client.analyze(content, mood_hint)

    def analyze_and_save(self, user_id: str, content: str, mood_hint: Optional[str] = None) -> JournalRecord:
        """Run the AI analysis, then store the entry with its readings.

        Analysis errors propagate and nothing is saved.
        """
        if not content or not content.strip():
            raise ValidationError("Journal entry is required", field="content")
        analysis = self.analyze_entry(content, mood_hint)
        return self.save_journal_entry(user_id, content, analysis)

    def get_journal_analytics(self, user_id: str) -> JournalAnalytics:
        now = self.now()
        today = now.date()
        records = self._journal_records(user_id)
        window_start = day_key(days_before(today, self.settings.monthly_window_days - 1))
        recent = [r for r in records if r.day_key >= window_start]
        weekly = build_daily_sentiment_series(recent, today, window=self.settings.weekly_window_days)

        return JournalAnalytics(
            entries=journal_entry_views(records, today),
            stats=journal_stats(records, now),
            weekly_series=weekly,
            monthly_series=monthly_sentiment_series(recent, today, self.settings.rollup_weeks),
            streak=calculate_streak((r.day_key for r in records), today=today),
            trend=classify_series_trend(
                [p.sentiment for p in weekly], self.settings.sentiment_trend_threshold
            ),
        )

    # =========================================================================
    # Wellness
    # =========================================================================

    def log_wellness(self, user_id: str, field_name: str, value: float) -> WellnessRecord:
        """Set one of today's wellness values (sleep, water or exercise).

        Raises:
            ValidationError: Unknown field or value outside ``0..max``
        """
        if field_name not in WELLNESS_FIELDS:
            raise ValidationError(f"Unknown wellness field '{field_name}'", field="field")
        column, max_value = WELLNESS_FIELDS[field_name]
        if value < 0 or value > max_value:
            raise ValidationError(
                f"Maximum value is {max_value}",
                field=field_name,
                details={"min": 0, "max": max_value},
            )
        if column != "sleep_hours":
            value = int(value)

        row = self.store.upsert_daily_record(
            user_id, day_key(self.today()), MetricFamily.WELLNESS, {column: value}
        )
        return to_wellness_record(row)

    def get_wellness_summary(self, user_id: str) -> WellnessSummary:
        today = self.today()
        rows = self._history(user_id, MetricFamily.WELLNESS, start=days_before(today, 14))
        records = [to_wellness_record(r) for r in latest_per_day(rows)]
        return weekly_wellness_summary(records, today, self.settings.wellness_trend_threshold_pct)

    # =========================================================================
    # Exercises
    # =========================================================================

    def record_exercise_completion(
        self,
        user_id: str,
        exercise_id: str,
        exercise_name: str,
        duration_seconds: int,
    ) -> ExerciseRecord:
        if not exercise_id:
            raise ValidationError("Exercise id is required", field="exercise_id")
        if duration_seconds < 0:
            raise ValidationError("Duration must not be negative", field="duration_seconds")
        row = self.store.add_daily_record(
            user_id,
            MetricFamily.EXERCISE,
            {
                "exercise_id": exercise_id,
                "exercise_name": exercise_name,
                "duration_seconds": int(duration_seconds),
            },
            created_at=self.now(),
        )
        return to_exercise_record(row)

    def get_exercise_stats(self, user_id: str) -> ExerciseStats:
        records = [to_exercise_record(r) for r in self._history(user_id, MetricFamily.EXERCISE)]
        return exercise_stats(records, self.now())
