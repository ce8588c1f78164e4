"""
API schemas for request/response validation.

Responses use camelCase field names; requests accept either spelling.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..integrations.journal_analysis import JournalAnalysis
from ..summaries import ACHIEVEMENTS, ExerciseStats


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# Base Response Models
# ============================================================================

class ErrorDetail(BaseModel):
    """Error detail for API responses."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "DATA_FETCH_FAILED",
                    "message": "Failed to query mood records",
                }
            }
        }
    )


class SeriesPointResponse(CamelModel):
    label: str = Field(..., description="Weekday ('Mon') or week ('Week 1') label")
    value: float
    key: Union[int, str] = Field(..., description="Day key or 1-based week number")
    description: Optional[str] = None


class SentimentPointResponse(CamelModel):
    label: str
    key: Union[int, str]
    sentiment: float = Field(..., ge=-1, le=1)
    stress_level: int = Field(..., ge=0, le=100)
    mood: int = Field(..., ge=1, le=5)


class StreakResponse(CamelModel):
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)


# ============================================================================
# Mood
# ============================================================================

class MoodEntryResponse(CamelModel):
    day_key: str
    created_at: datetime
    mood: str
    mood_value: int


class MoodAnalyticsResponse(CamelModel):
    todays_mood: Optional[MoodEntryResponse] = None
    weekly_series: List[SeriesPointResponse] = Field(default_factory=list)
    monthly_series: List[SeriesPointResponse] = Field(default_factory=list)
    streak: StreakResponse
    trend: str


class MoodUpdateRequest(CamelModel):
    mood: str = Field(..., description="great, good, okay, low or bad")


class MoodCalendarResponse(CamelModel):
    year: int
    month: int
    days: Dict[str, MoodEntryResponse] = Field(default_factory=dict)
    avg_mood: float
    days_logged: int
    best_days: int
    challenging_days: int


# ============================================================================
# Journal
# ============================================================================

class JournalEntryResponse(CamelModel):
    id: Optional[int] = None
    date_label: str
    time_label: str
    content: str
    mood: str
    sentiment: str
    created_at: datetime
    analysis: Optional[JournalAnalysis] = None


class JournalStatsResponse(CamelModel):
    total_entries: int = 0
    this_week: int = 0
    streak: int = 0


class JournalAnalyticsResponse(CamelModel):
    entries: List[JournalEntryResponse] = Field(default_factory=list)
    stats: JournalStatsResponse
    weekly_series: List[SentimentPointResponse] = Field(default_factory=list)
    monthly_series: List[SentimentPointResponse] = Field(default_factory=list)
    streak: StreakResponse
    trend: str


class JournalCreateRequest(CamelModel):
    content: str = Field(..., min_length=1)
    analysis: Optional[JournalAnalysis] = Field(None, description="Analysis computed by the client")
    analyze: bool = Field(False, description="Run the AI analysis before saving")
    mood_hint: Optional[str] = None


class JournalSavedResponse(CamelModel):
    id: Optional[int] = None
    day_key: str
    created_at: datetime
    mood: str
    sentiment_label: str
    sentiment: float
    stress_level: Optional[int] = None
    analysis: Optional[JournalAnalysis] = None


# ============================================================================
# Wellness
# ============================================================================

class WellnessSummaryResponse(CamelModel):
    avg_sleep: float
    avg_water: float
    avg_exercise: int
    sleep_trend: str
    water_trend: str
    exercise_trend: str
    days_logged: int


class WellnessUpdateRequest(CamelModel):
    field: Literal["sleep", "water", "exercise"]
    value: float = Field(..., ge=0)


class WellnessLogResponse(CamelModel):
    day_key: str
    sleep_hours: float
    water_glasses: int
    exercise_minutes: int


# ============================================================================
# Exercises
# ============================================================================

class AchievementResponse(CamelModel):
    id: str
    name: str
    description: str
    unlocked: bool
    progress: float = Field(..., ge=0, le=1)


class ExerciseStatsResponse(CamelModel):
    total_completions: int
    today_count: int
    week_count: int
    current_streak: int
    longest_streak: int
    unlocked_achievements: List[str] = Field(default_factory=list)
    achievements: List[AchievementResponse] = Field(default_factory=list)

    @classmethod
    def from_stats(cls, stats: ExerciseStats) -> "ExerciseStatsResponse":
        return cls(
            **stats.to_dict(),
            achievements=[
                AchievementResponse(
                    id=a.id,
                    name=a.name,
                    description=a.description,
                    unlocked=a.id in stats.unlocked_achievements,
                    progress=a.progress(stats.total_completions, stats.longest_streak),
                )
                for a in ACHIEVEMENTS
            ],
        )


class ExerciseCompletionRequest(CamelModel):
    exercise_id: str = Field(..., min_length=1)
    exercise_name: str = Field(..., min_length=1)
    duration_seconds: int = Field(..., ge=0)


class ExerciseCompletionResponse(CamelModel):
    day_key: str
    created_at: datetime
    exercise_id: str
    exercise_name: str
    duration_seconds: int
