"""
Per-user analytics routes.

Reads go through the recompute controller: a failed store read returns the
error response while the controller keeps the last good snapshot. Writes go
through the service; the store's change notification refreshes watchers.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..controller import RecomputeController
from ..db.models import MetricFamily
from ..service import InsightsService
from .deps import get_controller, get_service
from .schemas import (
    ExerciseCompletionRequest,
    ExerciseCompletionResponse,
    ExerciseStatsResponse,
    JournalAnalyticsResponse,
    JournalCreateRequest,
    JournalSavedResponse,
    MoodAnalyticsResponse,
    MoodCalendarResponse,
    MoodEntryResponse,
    MoodUpdateRequest,
    WellnessLogResponse,
    WellnessSummaryResponse,
    WellnessUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _refresh(controller: RecomputeController, user_id: str, family: MetricFamily):
    controller.watch(user_id, family)
    return controller.refresh(user_id, family)


# ============================================================================
# Mood
# ============================================================================

@router.get("/mood", response_model=MoodAnalyticsResponse)
def get_mood(
    user_id: str,
    controller: RecomputeController = Depends(get_controller),
) -> MoodAnalyticsResponse:
    """Today's mood, weekly and 4-week series, streak and trend."""
    analytics = _refresh(controller, user_id, MetricFamily.MOOD)
    return MoodAnalyticsResponse.model_validate(analytics.to_dict())


@router.put("/mood", response_model=MoodEntryResponse)
def put_mood(
    user_id: str,
    body: MoodUpdateRequest,
    service: InsightsService = Depends(get_service),
) -> MoodEntryResponse:
    """Set today's mood."""
    record = service.save_mood(user_id, body.mood)
    return MoodEntryResponse.model_validate(record.to_dict())


@router.get("/mood/calendar", response_model=MoodCalendarResponse)
def get_mood_calendar(
    user_id: str,
    year: Optional[int] = Query(None, ge=1970, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    service: InsightsService = Depends(get_service),
) -> MoodCalendarResponse:
    """Moods of one calendar month, the current month by default."""
    today = service.today()
    calendar_month = service.get_mood_calendar(user_id, year or today.year, month or today.month)
    return MoodCalendarResponse.model_validate(calendar_month.to_dict())


# ============================================================================
# Journal
# ============================================================================

@router.get("/journal", response_model=JournalAnalyticsResponse)
def get_journal(
    user_id: str,
    controller: RecomputeController = Depends(get_controller),
) -> JournalAnalyticsResponse:
    """Entries, stats and sentiment series."""
    analytics = _refresh(controller, user_id, MetricFamily.JOURNAL)
    return JournalAnalyticsResponse.model_validate(analytics.to_dict())


@router.post("/journal", response_model=JournalSavedResponse, status_code=201)
def post_journal(
    user_id: str,
    body: JournalCreateRequest,
    service: InsightsService = Depends(get_service),
) -> JournalSavedResponse:
    """
    Save a journal entry.

    With ``analyze`` set the entry is sent to the AI analysis service first
    and nothing is saved if the analysis fails.
    """
    if body.analyze:
        record = service.analyze_and_save(user_id, body.content, body.mood_hint)
    else:
        record = service.save_journal_entry(user_id, body.content, body.analysis)

    return JournalSavedResponse(
        id=record.record_id,
        day_key=record.day_key,
        created_at=record.created_at,
        mood=record.mood,
        sentiment_label=record.sentiment_label,
        sentiment=record.sentiment,
        stress_level=record.stress_level,
        analysis=record.analysis,
    )



@router.delete("/journal/{entry_id}", status_code=204)
def delete_journal(
    user_id: str,
    entry_id: int,
    service: InsightsService = Depends(get_service),
) -> Response:
    """Delete a journal entry."""
    service.delete_journal_entry(user_id, entry_id)
    return Response(status_code=204)


# ============================================================================
# Wellness
# ============================================================================

@router.get("/wellness/summary", response_model=WellnessSummaryResponse)
def get_wellness_summary(
    user_id: str,
    controller: RecomputeController = Depends(get_controller),
) -> WellnessSummaryResponse:
    """This week's averages and trends against last week."""
    summary = _refresh(controller, user_id, MetricFamily.WELLNESS)
    return WellnessSummaryResponse.model_validate(summary.to_dict())


@router.put("/wellness", response_model=WellnessLogResponse)
def put_wellness(
    user_id: str,
    body: WellnessUpdateRequest,
    service: InsightsService = Depends(get_service),
) -> WellnessLogResponse:
    """Set one of today's wellness values."""
    record = service.log_wellness(user_id, body.field, body.value)
    return WellnessLogResponse.model_validate(record.to_dict())


# ============================================================================
# Exercises
# ============================================================================

@router.get("/exercises/stats", response_model=ExerciseStatsResponse)
def get_exercise_stats(
    user_id: str,
    controller: RecomputeController = Depends(get_controller),
) -> ExerciseStatsResponse:
    """Completion counts, streaks and achievements."""
    stats = _refresh(controller, user_id, MetricFamily.EXERCISE)
    return ExerciseStatsResponse.from_stats(stats)


@router.post("/exercises", response_model=ExerciseCompletionResponse, status_code=201)
def post_exercise(
    user_id: str,
    body: ExerciseCompletionRequest,
    service: InsightsService = Depends(get_service),
) -> ExerciseCompletionResponse:
    """Record a completed wellness exercise."""
    record = service.record_exercise_completion(
        user_id, body.exercise_id, body.exercise_name, body.duration_seconds
    )
    return ExerciseCompletionResponse.model_validate(record.to_dict())
