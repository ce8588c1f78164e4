"""Categorical to numeric metric scales.

Stored rows are loosely typed (labels chosen by a client, payloads returned
by an AI service). Everything entering the rollup pipeline passes through
here first and comes out as a typed record with every field defaulted:
an unknown mood is "okay" (3), an unknown sentiment scores 0. Stress is the
exception, a missing stress label stays ``None`` per record and only becomes
50 when a weekly bucket has no reading at all (see ``rollup``).
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from .db.models import (
    DailyRecord,
    ExerciseRecord,
    JournalRecord,
    MoodRecord,
    WellnessRecord,
)

logger = logging.getLogger(__name__)


MOOD_TO_NUMBER: Dict[str, int] = {
    "great": 5,
    "good": 4,
    "okay": 3,
    "low": 2,
    "bad": 1,
}
NUMBER_TO_MOOD: Dict[int, str] = {v: k for k, v in MOOD_TO_NUMBER.items()}
MOOD_DISPLAY_LABELS: Dict[int, str] = {
    1: "Bad",
    2: "Low",
    3: "Okay",
    4: "Good",
    5: "Great",
}
DEFAULT_MOOD = "okay"

SENTIMENT_TO_SCORE: Dict[str, float] = {
    "positive": 0.7,
    "neutral": 0.1,
    "negative": -0.5,
    "mixed": 0.0,
}
SENTIMENT_TO_MOOD: Dict[str, str] = {
    "positive": "great",
    "neutral": "okay",
    "negative": "low",
    "mixed": "okay",
}
DEFAULT_SENTIMENT = "neutral"

STRESS_TO_NUMBER: Dict[str, int] = {
    "low": 25,
    "medium": 50,
    "high": 75,
}
NEUTRAL_STRESS = 50


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves towards positive infinity (2.5 -> 3, -2.5 -> -2).

    Matches the rounding the charts were designed around; ``round()`` would
    send 2.5 to 2.
    """
    factor = 10 ** ndigits
    # Pre-rounding absorbs float noise such as 0.285 * 100 == 28.499999...
    return math.floor(round(value * factor, 9) + 0.5) / factor


def _clean_label(label: Any) -> str:
    if label is None:
        return ""
    return str(label).strip().lower()


# Mood scale

def mood_to_number(mood: Any) -> int:
    """Map a mood label to 1..5, unknown labels to 3."""
    return MOOD_TO_NUMBER.get(_clean_label(mood), MOOD_TO_NUMBER[DEFAULT_MOOD])


def number_to_mood(value: Any) -> str:
    """Inverse of ``mood_to_number``; rounds and clamps to 1..5."""
    try:
        n = int(round_half_up(float(value)))
    except (TypeError, ValueError):
        return DEFAULT_MOOD
    return NUMBER_TO_MOOD[min(5, max(1, n))]


def is_known_mood(mood: Any) -> bool:
    return _clean_label(mood) in MOOD_TO_NUMBER


def normalize_mood(mood: Any) -> str:
    label = _clean_label(mood)
    return label if label in MOOD_TO_NUMBER else DEFAULT_MOOD


def mood_display_label(value: Any) -> str:
    """Capitalised label for a 1..5 mood value ("Unknown" outside the scale)."""
    try:
        return MOOD_DISPLAY_LABELS.get(int(value), "Unknown")
    except (TypeError, ValueError):
        return "Unknown"


# Sentiment scale

def normalize_sentiment(label: Any) -> str:
    cleaned = _clean_label(label)
    return cleaned if cleaned in SENTIMENT_TO_SCORE else DEFAULT_SENTIMENT


def sentiment_to_score(label: Any) -> float:
    """Representative score for a sentiment label, 0 when unknown."""
    return SENTIMENT_TO_SCORE.get(_clean_label(label), 0.0)


def sentiment_to_mood(label: Any) -> str:
    return SENTIMENT_TO_MOOD.get(_clean_label(label), DEFAULT_MOOD)


def sentiment_display_label(score: float) -> str:
    if score >= 0.5:
        return "Very Positive"
    if score >= 0.2:
        return "Positive"
    if score >= -0.2:
        return "Neutral"
    if score >= -0.5:
        return "Negative"
    return "Very Negative"


# Stress scale

def stress_to_number(label: Any) -> Optional[int]:
    """Map a stress label to 25/50/75; absent or unknown labels give None."""
    return STRESS_TO_NUMBER.get(_clean_label(label))


def stress_display_label(value: float) -> str:
    if value >= 70:
        return "High"
    if value >= 40:
        return "Moderate"
    return "Low"


# Record boundary

def _as_number(value: Any, default: float = 0) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _stress_reading(values: Dict[str, Any]) -> Optional[int]:
    raw = values.get("stress_level")
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        try:
            raw = float(raw)
        except ValueError:
            return stress_to_number(raw)
    number = _as_number(raw, default=-1)
    # Zero is the "no reading" sentinel of the stored column
    if number <= 0:
        return None
    return int(round_half_up(min(100.0, number)))


def _analysis_sentiment(values: Dict[str, Any]) -> str:
    analysis = values.get("ai_analysis")
    if isinstance(analysis, dict) and analysis.get("sentiment"):
        return normalize_sentiment(analysis.get("sentiment"))
    return normalize_sentiment(values.get("sentiment_label"))


def to_mood_record(record: DailyRecord) -> MoodRecord:
    mood = normalize_mood(record.values.get("mood"))
    if not is_known_mood(record.values.get("mood")):
        logger.debug("Unknown mood label on %s, using %s", record.day_key, mood)
    return MoodRecord(
        day_key=record.day_key,
        created_at=record.created_at,
        mood=mood,
        mood_value=mood_to_number(mood),
    )


def to_journal_record(record: DailyRecord) -> JournalRecord:
    """Typed journal entry.

    Sentiment is re-derived from the AI analysis label; the score stored
    at save time is ignored.
    """
    values = record.values
    sentiment_label = _analysis_sentiment(values)
    mood = normalize_mood(values.get("mood") or sentiment_to_mood(sentiment_label))
    analysis = values.get("ai_analysis")
    return JournalRecord(
        day_key=record.day_key,
        created_at=record.created_at,
        sentiment_label=sentiment_label,
        sentiment=sentiment_to_score(sentiment_label),
        stress_level=_stress_reading(values),
        mood=mood,
        mood_value=mood_to_number(mood),
        content=str(values.get("content") or ""),
        record_id=record.record_id,
        analysis=analysis if isinstance(analysis, dict) else None,
    )


def to_wellness_record(record: DailyRecord) -> WellnessRecord:
    values = record.values
    return WellnessRecord(
        day_key=record.day_key,
        created_at=record.created_at,
        sleep_hours=max(0.0, _as_number(values.get("sleep_hours"))),
        water_glasses=int(max(0.0, _as_number(values.get("water_glasses")))),
        exercise_minutes=int(max(0.0, _as_number(values.get("exercise_minutes")))),
    )


def to_exercise_record(record: DailyRecord) -> ExerciseRecord:
    values = record.values
    return ExerciseRecord(
        day_key=record.day_key,
        created_at=record.created_at,
        exercise_id=str(values.get("exercise_id") or "unknown"),
        exercise_name=str(values.get("exercise_name") or values.get("exercise_id") or "Exercise"),
        duration_seconds=int(max(0.0, _as_number(values.get("duration_seconds")))),
    )


def latest_per_day(records: Iterable[DailyRecord]) -> List[DailyRecord]:
    """Keep the most recently created record per day, oldest day first."""
    latest: Dict[str, DailyRecord] = {}
    for record in records:
        current = latest.get(record.day_key)
        if current is None or record.created_at >= current.created_at:
            latest[record.day_key] = record
    return [latest[key] for key in sorted(latest)]

