"""Temporal rollups over daily mood, journal, wellness and exercise records."""

from wellness_insights.db.database import SqliteRecordStore
from wellness_insights.db.models import (
    DailyRecord,
    MetricFamily,
    MoodRecord,
    JournalRecord,
    WellnessRecord,
    ExerciseRecord,
)
from wellness_insights.dates import (
    day_key,
    days_before,
    days_between,
    parse_day_key,
)
from wellness_insights.series import (
    SeriesPoint,
    SentimentPoint,
    build_daily_series,
    build_daily_sentiment_series,
)
from wellness_insights.rollup import (
    week_index,
    rollup_weeks,
    monthly_mood_series,
    monthly_sentiment_series,
)
from wellness_insights.streaks import StreakState, calculate_streak
from wellness_insights.trends import (
    TrendDirection,
    classify_series_trend,
    classify_percent_change,
)
from wellness_insights.normalizer import (
    mood_to_number,
    number_to_mood,
    sentiment_to_score,
    sentiment_to_mood,
    stress_to_number,
)
from wellness_insights.service import InsightsService, MoodAnalytics, JournalAnalytics
from wellness_insights.controller import RecomputeController

__version__ = "0.1.0"

__all__ = [
    "SqliteRecordStore",
    "DailyRecord",
    "MetricFamily",
    "MoodRecord",
    "JournalRecord",
    "WellnessRecord",
    "ExerciseRecord",
    "day_key",
    "days_before",
    "days_between",
    "parse_day_key",
    "SeriesPoint",
    "SentimentPoint",
    "build_daily_series",
    "build_daily_sentiment_series",
    "week_index",
    "rollup_weeks",
    "monthly_mood_series",
    "monthly_sentiment_series",
    "StreakState",
    "calculate_streak",
    "TrendDirection",
    "classify_series_trend",
    "classify_percent_change",
    "mood_to_number",
    "number_to_mood",
    "sentiment_to_score",
    "sentiment_to_mood",
    "stress_to_number",
    "InsightsService",
    "MoodAnalytics",
    "JournalAnalytics",
    "RecomputeController",
]
