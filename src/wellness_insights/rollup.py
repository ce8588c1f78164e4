"""4-week rollups over a rolling 28-day window.

The window ``today-27`` .. ``today`` is split into four 7-day buckets counted
back from today: week index 0 is ``today-6`` .. ``today``, index 3 the oldest.
Buckets are emitted oldest first as "Week 1" .. "Week 4", and a bucket with
no records is left out.

Journal rollups carry sentiment, stress and mood on the same partition so
the three stay aligned by week. A bucket that has entries but no stress
reading gets the neutral stress of 50 instead of being dropped.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Generic, Iterable, List, Optional, Tuple, TypeVar

from .dates import DateLike, days_between
from .db.models import JournalRecord, MoodRecord
from .normalizer import mood_display_label, round_half_up
from .series import SentimentPoint, SeriesPoint, summarize_journal_samples

T = TypeVar("T")

DAYS_PER_WEEK = 7
DEFAULT_WEEKS = 4


@dataclass
class WeekBucket(Generic[T]):
    """Records that fell into one week of the rollup window."""
    number: int  # 1 = oldest week
    records: List[T] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"Week {self.number}"

    @property
    def is_empty(self) -> bool:
        return not self.records


def week_index(record_day: DateLike, today: DateLike, weeks: int = DEFAULT_WEEKS) -> Optional[int]:
    """Weeks back from today a record falls in, clamped to the oldest bucket.

    ``today-7`` gives 1, not 0. Days after ``today`` give None.
    """
    days_ago = days_between(today, record_day)
    if days_ago < 0:
        return None
    return min(weeks - 1, days_ago // DAYS_PER_WEEK)


def rollup_weeks(
    samples: Iterable[Tuple[DateLike, T]],
    today: date,
    weeks: int = DEFAULT_WEEKS,
) -> List[WeekBucket[T]]:
    """Partition ``(day, record)`` samples into week buckets, oldest first.

    Returns every bucket, empty ones included; callers drop the empty ones
    when building series.
    """
    buckets = [WeekBucket(number=i + 1) for i in range(weeks)]
    for day, record in samples:
        index = week_index(day, today, weeks)
        if index is None:
            continue
        buckets[weeks - 1 - index].records.append(record)
    return buckets


def monthly_mood_series(
    records: Iterable[MoodRecord],
    today: date,
    weeks: int = DEFAULT_WEEKS,
) -> List[SeriesPoint]:
    """Average mood per week, rounded to the nearest whole mood."""
    buckets = rollup_weeks(((r.day_key, r.mood_value) for r in records), today, weeks)
    points = []
    for bucket in buckets:
        if bucket.is_empty:
            continue
        avg_mood = int(round_half_up(sum(bucket.records) / len(bucket.records)))
        points.append(SeriesPoint(
            label=bucket.label,
            value=avg_mood,
            key=bucket.number,
            description=mood_display_label(avg_mood),
        ))
    return points


def monthly_sentiment_series(
    records: Iterable[JournalRecord],
    today: date,
    weeks: int = DEFAULT_WEEKS,
) -> List[SentimentPoint]:
    """Sentiment, stress and mood per week over one shared partition."""
    buckets = rollup_weeks(((r.day_key, r) for r in records), today, weeks)
    points = []
    for bucket in buckets:
        if bucket.is_empty:
            continue
        sentiment, stress, mood = summarize_journal_samples(bucket.records)
        points.append(SentimentPoint(
            label=bucket.label,
            key=bucket.number,
            sentiment=sentiment,
            stress_level=stress,
            mood=mood,
        ))
    return points

