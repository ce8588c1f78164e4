"""Data models for per-user daily records."""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class MetricFamily(str, Enum):
    """Category of tracked data, aggregated independently."""
    MOOD = "mood"
    JOURNAL = "journal"
    WELLNESS = "wellness"
    EXERCISE = "exercise"


@dataclass
class DailyRecord:
    """One raw sample for a user and metric family on a calendar day."""
    user_id: str
    family: MetricFamily
    day_key: str
    created_at: datetime
    values: Dict[str, Any] = field(default_factory=dict)
    record_id: Optional[int] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["family"] = self.family.value
        d["created_at"] = self.created_at.isoformat()
        return d


@dataclass
class MoodRecord:
    """Validated daily mood check-in."""
    day_key: str
    created_at: datetime
    mood: str
    mood_value: int

    def to_dict(self) -> dict:
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        return d


@dataclass
class JournalRecord:
    """Validated journal entry with its AI-derived readings."""
    day_key: str
    created_at: datetime
    sentiment_label: str
    sentiment: float  # -1..1
    stress_level: Optional[int]  # 0..100, None when the entry had no reading
    mood: str
    mood_value: int
    content: str = ""
    record_id: Optional[int] = None
    analysis: Optional[Dict[str, Any]] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        return d


@dataclass
class WellnessRecord:
    """Validated daily wellness log."""
    day_key: str
    created_at: datetime
    sleep_hours: float = 0
    water_glasses: int = 0
    exercise_minutes: int = 0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        return d


@dataclass
class ExerciseRecord:
    """Validated wellness exercise completion."""
    day_key: str
    created_at: datetime
    exercise_id: str
    exercise_name: str
    duration_seconds: int = 0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["created_at"] = self.created_at.isoformat()
        return d
