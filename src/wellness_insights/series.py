"""Day-by-day series over a rolling window.

Days without any sample are left out of the series instead of being
zero-filled, so a 7-day series can hold fewer than 7 points and a gap in
time is a gap in the sequence.
"""

from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .dates import day_key, day_range, weekday_short_label
from .db.models import JournalRecord
from .normalizer import NEUTRAL_STRESS, round_half_up


@dataclass
class SeriesPoint:
    """One chart point."""
    label: str  # 'Mon' for day series, 'Week 1' for week series
    value: float
    key: Union[str, int]  # day key, or 1-based week number
    description: Optional[str] = None  # e.g. 'Great' for a mood of 5

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SentimentPoint:
    """Aligned journal metrics for one day or week."""
    label: str
    key: Union[str, int]
    sentiment: float  # -1..1, 2 decimals
    stress_level: int  # 0..100
    mood: int  # 1..5

    def to_dict(self) -> dict:
        return asdict(self)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def build_daily_series(
    values_by_day: Mapping[str, Union[float, Sequence[float]]],
    today: date,
    window: int = 7,
    ndigits: Optional[int] = None,
    describe: Optional[Callable[[float], str]] = None,
) -> List[SeriesPoint]:
    """Dense-ordered, sparse-valued series for ``today-(window-1)`` .. ``today``.

    Args:
        values_by_day: Day key to a value or to a list of samples (averaged)
        today: Last day of the window
        window: Number of days covered (7 for the weekly chart)
        ndigits: Round the day average half-up to this many digits
        describe: Optional label for a value, e.g. the mood display name

    Returns:
        Points oldest first, only for days that have at least one sample
    """
    points: List[SeriesPoint] = []
    for day in day_range(today, window):
        key = day_key(day)
        raw = values_by_day.get(key)
        if raw is None:
            continue
        samples = [raw] if isinstance(raw, (int, float)) else list(raw)
        if not samples:
            continue

        value = _mean(samples)
        if ndigits is not None:
            value = round_half_up(value, ndigits)
            if ndigits == 0:
                value = int(value)

        points.append(SeriesPoint(
            label=weekday_short_label(day),
            value=value,
            key=key,
            description=describe(value) if describe else None,
        ))
    return points


def summarize_journal_samples(records: Sequence[JournalRecord]) -> Tuple[float, int, int]:
    """Sentiment (2dp), stress (int, 50 without readings) and mood (int) averages."""
    sentiment = round_half_up(_mean([r.sentiment for r in records]), 2)
    stress_readings = [r.stress_level for r in records if r.stress_level is not None]
    stress = int(round_half_up(_mean(stress_readings))) if stress_readings else NEUTRAL_STRESS
    mood = int(round_half_up(_mean([r.mood_value for r in records])))
    return sentiment, stress, mood


def build_daily_sentiment_series(
    records: Iterable[JournalRecord],
    today: date,
    window: int = 7,
) -> List[SentimentPoint]:
    """Per-day journal averages for the last ``window`` days, empty days omitted."""
    by_day: Dict[str, List[JournalRecord]] = defaultdict(list)
    for record in records:
        by_day[record.day_key].append(record)

    points: List[SentimentPoint] = []
    for day in day_range(today, window):
        key = day_key(day)
        day_records = by_day.get(key)
        if not day_records:
            continue
        sentiment, stress, mood = summarize_journal_samples(day_records)
        points.append(SentimentPoint(
            label=weekday_short_label(day),
            key=key,
            sentiment=sentiment,
            stress_level=stress,
            mood=mood,
        ))
    return points
