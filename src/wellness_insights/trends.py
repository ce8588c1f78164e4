"""Trend direction indicators.

Two rules are used:
- Series trend: mean of the last 3 points vs mean of the first 3 points of
  the same series, with an absolute threshold (0.1 on the -1..1 sentiment
  scale). With fewer than 6 points the two windows overlap.
- Week-over-week: relative change of this week's average vs last week's,
  significant beyond +/-10%.
"""

from enum import Enum
from typing import Optional, Sequence

SERIES_WINDOW = 3
DEFAULT_SERIES_THRESHOLD = 0.1
DEFAULT_CHANGE_THRESHOLD_PCT = 10.0


class TrendDirection(str, Enum):
    """Direction of a metric compared with an earlier period."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def classify_series_trend(
    values: Sequence[float],
    threshold: float = DEFAULT_SERIES_THRESHOLD,
) -> TrendDirection:
    """Classify an oldest-to-newest series.

    Args:
        values: Scalar samples, oldest first
        threshold: Absolute difference needed to call a direction

    Returns:
        TrendDirection; STABLE for fewer than 2 points
    """
    if len(values) < 2:
        return TrendDirection.STABLE

    recent_avg = _mean(values[-SERIES_WINDOW:])
    earlier_avg = _mean(values[:SERIES_WINDOW])

    if recent_avg > earlier_avg + threshold:
        return TrendDirection.UP
    if recent_avg < earlier_avg - threshold:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def percent_change(current: float, previous: float) -> Optional[float]:
    """Relative change in percent, None when there is no baseline."""
    if previous == 0:
        return None
    return ((current - previous) / previous) * 100


def classify_percent_change(
    current: float,
    previous: float,
    threshold_pct: float = DEFAULT_CHANGE_THRESHOLD_PCT,
) -> TrendDirection:
    """Week-over-week direction.

    A zero previous value counts as UP when there is any current activity,
    otherwise STABLE.
    """
    change_pct = percent_change(current, previous)
    if change_pct is None:
        return TrendDirection.UP if current > 0 else TrendDirection.STABLE

    if change_pct > threshold_pct:
        return TrendDirection.UP
    if change_pct < -threshold_pct:
        return TrendDirection.DOWN
    return TrendDirection.STABLE
