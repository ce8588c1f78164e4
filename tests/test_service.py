"""Tests for the insights service."""

from datetime import datetime

import pytest

from wellness_insights.db.models import MetricFamily
from wellness_insights.exceptions import (
    AnalysisRateLimitError,
    ConfigurationError,
    NotFoundError,
    ValidationError,
)
from wellness_insights.integrations.journal_analysis import JournalAnalysis
from wellness_insights.service import InsightsService, JournalAnalytics, MoodAnalytics
from wellness_insights.summaries import ExerciseStats, WellnessSummary
from wellness_insights.trends import TrendDirection

USER = "user-1"


class FakeAnalysisClient:
    """Stands in for the HTTP client."""

    def __init__(self, analysis=None, error=None):
        self.analysis = analysis
        self.error = error
        self.calls = []

    def analyze(self, text, mood_hint=None):
        self.calls.append((text, mood_hint))
        if self.error:
            raise self.error
        return self.analysis


def put_mood(store, day, mood):
    values = {"mood": mood, "mood_value": {"great": 5, "good": 4, "okay": 3, "low": 2, "bad": 1}[mood]}
    store.upsert_daily_record(USER, day, MetricFamily.MOOD, values)


def add_journal(store, created_at, sentiment, stress_label=None, content="entry"):
    analysis = {"sentiment": sentiment}
    if stress_label:
        analysis["stressLevel"] = stress_label
    store.add_daily_record(
        USER,
        MetricFamily.JOURNAL,
        {
            "content": content,
            "ai_analysis": analysis,
            "stress_level": {"low": 25, "medium": 50, "high": 75}.get(stress_label),
        },
        created_at=created_at,
    )


class TestMood:
    """Tests for mood check-ins and analytics."""

    def test_save_mood_replaces_same_day(self, service, store):
        service.save_mood(USER, "low")
        saved = service.save_mood(USER, " GREAT ")

        assert saved.mood == "great"
        assert saved.mood_value == 5
        assert saved.day_key == "2024-03-15"
        assert len(store.query_daily_records(USER, MetricFamily.MOOD)) == 1
        assert service.get_todays_mood(USER).mood == "great"

    def test_save_unknown_mood(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.save_mood(USER, "ecstatic")

        assert exc_info.value.details == {"field": "mood"}

    def test_no_mood_today(self, service, store):
        put_mood(store, "2024-03-14", "good")
        assert service.get_todays_mood(USER) is None

    def test_analytics(self, service, store):
        put_mood(store, "2024-01-02", "bad")
        put_mood(store, "2024-03-13", "good")
        put_mood(store, "2024-03-14", "great")
        put_mood(store, "2024-03-15", "good")

        analytics = service.get_mood_analytics(USER)

        assert analytics.todays_mood.mood == "good"
        assert [(p.label, p.value, p.description) for p in analytics.weekly_series] == [
            ("Wed", 4, "Good"), ("Thu", 5, "Great"), ("Fri", 4, "Good"),
        ]
        assert [(p.label, p.value) for p in analytics.monthly_series] == [("Week 4", 4)]
        assert analytics.streak.current_streak == 3
        assert analytics.streak.longest_streak == 3
        assert analytics.trend == TrendDirection.STABLE

    def test_improving_week(self, service, store):
        for day in ("2024-03-09", "2024-03-10", "2024-03-11"):
            put_mood(store, day, "bad")
        for day in ("2024-03-13", "2024-03-14", "2024-03-15"):
            put_mood(store, day, "great")

        assert service.get_mood_analytics(USER).trend == TrendDirection.UP

    def test_future_records_are_ignored(self, service, store):
        put_mood(store, "2024-03-20", "great")
        analytics = service.get_mood_analytics(USER)

        assert analytics.weekly_series == []
        assert analytics.streak.longest_streak == 0

    def test_empty_analytics(self, service):
        analytics = service.get_mood_analytics(USER)

        assert analytics.to_dict() == {
            "todays_mood": None,
            "weekly_series": [],
            "monthly_series": [],
            "streak": {"current_streak": 0, "longest_streak": 0},
            "trend": "stable",
        }

    def test_calendar(self, service, store):
        put_mood(store, "2024-02-28", "bad")
        put_mood(store, "2024-03-01", "great")
        put_mood(store, "2024-03-02", "low")

        month = service.get_mood_calendar(USER, 2024, 3)

        assert list(month.days) == ["2024-03-01", "2024-03-02"]
        assert month.avg_mood == 3.5
        assert month.best_days == 1
        assert month.challenging_days == 1

    def test_calendar_invalid_month(self, service):
        with pytest.raises(ValidationError):
            service.get_mood_calendar(USER, 2024, 13)


class TestJournal:
    """Tests for journal entries and analytics."""

    def test_save_with_analysis(self, service, now):
        analysis = JournalAnalysis(sentiment="positive", sentiment_score=0.8, stress_level="high")
        record = service.save_journal_entry(USER, "Great run today", analysis)

        assert record.mood == "great"
        assert record.sentiment_label == "positive"
        assert record.sentiment == 0.7
        assert record.stress_level == 75
        assert record.created_at == now
        assert record.analysis["stressLevel"] == "high"
        assert record.record_id is not None

    def test_save_without_analysis(self, service, store):
        record = service.save_journal_entry(USER, "Just a note")

        assert record.mood == "okay"
        assert record.sentiment_label == "neutral"
        assert record.sentiment == 0.1
        assert record.stress_level is None
        assert store.query_daily_records(USER, MetricFamily.JOURNAL)[0].values["sentiment"] == 0.0

    def test_unknown_stress_label_is_neutral(self, service):
        record = service.save_journal_entry(USER, "Hmm", {"sentiment": "mixed", "stressLevel": "extreme"})

        assert record.stress_level == 50
        assert record.mood == "okay"
        assert record.sentiment == 0.0

    def test_analysis_without_stress_label_has_no_reading(self, service):
        record = service.save_journal_entry(USER, "Fine", {"sentiment": "positive"})

        assert record.stress_level is None

    def test_delete_entry(self, service, store):
        first = service.save_journal_entry(USER, "First")
        service.save_journal_entry(USER, "Second")

        service.delete_journal_entry(USER, first.record_id)

        rows = store.query_daily_records(USER, MetricFamily.JOURNAL)
        assert [r.values["content"] for r in rows] == ["Second"]

    def test_delete_missing_entry(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.delete_journal_entry(USER, 999)

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["resource_id"] == "999"

    def test_delete_only_removes_journal_entries(self, service, store):
        service.save_mood(USER, "good")
        row = store.query_daily_records(USER, MetricFamily.MOOD)[0]

        with pytest.raises(NotFoundError):
            service.delete_journal_entry(USER, row.record_id)

        assert service.get_todays_mood(USER).mood == "good"

    @pytest.mark.parametrize("content", ["", "   "])
    def test_empty_entry_is_rejected(self, service, content):
        with pytest.raises(ValidationError):
            service.save_journal_entry(USER, content)

    def test_analyze_and_save(self, store, settings, now):
        client = FakeAnalysisClient(JournalAnalysis(sentiment="negative", stress_level="low"))
        service = InsightsService(store, analysis_client=client, settings=settings, clock=lambda: now)

        record = service.analyze_and_save(USER, "Rough meeting", mood_hint="low")

        assert client.calls == [("Rough meeting", "low")]
        assert record.mood == "low"
        assert record.sentiment == -0.5
        assert record.stress_level == 25

    def test_failed_analysis_saves_nothing(self, store, settings, now):
        client = FakeAnalysisClient(error=AnalysisRateLimitError())
        service = InsightsService(store, analysis_client=client, settings=settings, clock=lambda: now)

        with pytest.raises(AnalysisRateLimitError):
            service.analyze_and_save(USER, "Rough meeting")

        assert store.query_daily_records(USER, MetricFamily.JOURNAL) == []

    def test_analysis_requires_client(self, service):
        with pytest.raises(ConfigurationError):
            service.analyze_and_save(USER, "Rough meeting")

    def test_analytics(self, service, store):
        add_journal(store, datetime(2024, 1, 10, 8), "neutral", content="old")
        add_journal(store, datetime(2024, 3, 13, 9), "negative", "low", content="rough")
        service.save_journal_entry(USER, "good day", {"sentiment": "positive", "stressLevel": "high"})

        analytics = service.get_journal_analytics(USER)

        assert [e.content for e in analytics.entries] == ["good day", "rough", "old"]
        assert analytics.entries[1].date_label == "2 days ago"
        assert analytics.stats.to_dict() == {"total_entries": 3, "this_week": 2, "streak": 1}

        assert [(p.label, p.sentiment, p.stress_level, p.mood) for p in analytics.weekly_series] == [
            ("Wed", -0.5, 25, 2),
            ("Fri", 0.7, 75, 5),
        ]
        assert [(p.label, p.sentiment, p.stress_level, p.mood) for p in analytics.monthly_series] == [
            ("Week 4", 0.1, 50, 4),
        ]
        assert analytics.streak.current_streak == 1
        assert analytics.trend == TrendDirection.STABLE

    def test_old_entries_stay_out_of_monthly_series(self, service, store):
        add_journal(store, datetime(2023, 12, 1, 8), "negative")
        analytics = service.get_journal_analytics(USER)

        assert analytics.monthly_series == []
        assert analytics.stats.total_entries == 1

    def test_declining_sentiment(self, service, store):
        for day in (9, 10, 11):
            add_journal(store, datetime(2024, 3, day, 20), "positive")
        for day in (13, 14, 15):
            add_journal(store, datetime(2024, 3, day, 8), "negative")

        assert service.get_journal_analytics(USER).trend == TrendDirection.DOWN


class TestWellness:
    """Tests for wellness logging and the weekly summary."""

    def test_log_merges_fields(self, service, store):
        service.log_wellness(USER, "sleep", 7.5)
        service.log_wellness(USER, "water", 6.7)
        record = service.log_wellness(USER, "exercise", 30)

        assert record.sleep_hours == 7.5
        assert record.water_glasses == 6
        assert record.exercise_minutes == 30
        assert len(store.query_daily_records(USER, MetricFamily.WELLNESS)) == 1

    def test_value_above_maximum(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.log_wellness(USER, "water", 25)

        assert exc_info.value.message == "Maximum value is 20"
        assert exc_info.value.details == {"min": 0, "max": 20, "field": "water"}

    def test_negative_value(self, service):
        with pytest.raises(ValidationError):
            service.log_wellness(USER, "sleep", -1)

    def test_unknown_field(self, service):
        with pytest.raises(ValidationError):
            service.log_wellness(USER, "steps", 1000)

    def test_summary(self, service, store):
        store.upsert_daily_record(
            USER, "2024-03-05", MetricFamily.WELLNESS,
            {"sleep_hours": 6, "water_glasses": 7, "exercise_minutes": 10},
        )
        store.upsert_daily_record(
            USER, "2024-03-12", MetricFamily.WELLNESS,
            {"sleep_hours": 7, "water_glasses": 8, "exercise_minutes": 10},
        )
        service.log_wellness(USER, "sleep", 8)
        service.log_wellness(USER, "water", 6)
        service.log_wellness(USER, "exercise", 20)

        summary = service.get_wellness_summary(USER)

        assert (summary.avg_sleep, summary.avg_water, summary.avg_exercise) == (7.5, 7.0, 15)
        assert summary.sleep_trend == TrendDirection.UP
        assert summary.water_trend == TrendDirection.STABLE
        assert summary.exercise_trend == TrendDirection.UP
        assert summary.days_logged == 2


class TestExercises:
    """Tests for exercise completions."""

    def test_record_and_stats(self, service, now):
        record = service.record_exercise_completion(USER, "box-breathing", "Box Breathing", 240)
        stats = service.get_exercise_stats(USER)

        assert record.exercise_name == "Box Breathing"
        assert record.created_at == now
        assert stats.total_completions == 1
        assert stats.today_count == 1
        assert stats.current_streak == 1
        assert stats.unlocked_achievements == ["first-step"]

    def test_negative_duration(self, service):
        with pytest.raises(ValidationError):
            service.record_exercise_completion(USER, "box-breathing", "Box Breathing", -5)


class TestCompute:
    """Tests for per-family dispatch."""

    @pytest.mark.parametrize("family,result_type", [
        (MetricFamily.MOOD, MoodAnalytics),
        (MetricFamily.JOURNAL, JournalAnalytics),
        ("wellness", WellnessSummary),
        (MetricFamily.EXERCISE, ExerciseStats),
    ])
    def test_compute(self, service, family, result_type):
        assert isinstance(service.compute(USER, family), result_type)
