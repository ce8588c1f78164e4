"""Storage layer."""

from .database import SqliteRecordStore
from .models import (
    DailyRecord,
    ExerciseRecord,
    JournalRecord,
    MetricFamily,
    MoodRecord,
    WellnessRecord,
)
from .store import ChangeNotifier, RecordStore

__all__ = [
    "ChangeNotifier",
    "DailyRecord",
    "ExerciseRecord",
    "JournalRecord",
    "MetricFamily",
    "MoodRecord",
    "RecordStore",
    "SqliteRecordStore",
    "WellnessRecord",
]
