"""Dependency injection for API routes."""

import logging
from functools import lru_cache
from typing import Optional

from ..config import get_settings
from ..controller import RecomputeController
from ..db.database import SqliteRecordStore
from ..integrations.journal_analysis import JournalAnalysisClient
from ..scheduler import ChangePollingScheduler
from ..service import InsightsService

logger = logging.getLogger(__name__)


@lru_cache
def get_store() -> SqliteRecordStore:
    """Get the record store instance."""
    settings = get_settings()
    return SqliteRecordStore(str(settings.db_path))


@lru_cache
def get_analysis_client() -> Optional[JournalAnalysisClient]:
    """Get the journal analysis client, None when no service is configured."""
    settings = get_settings()
    if not settings.analysis_service_url:
        logger.info("Journal analysis service not configured")
        return None
    return JournalAnalysisClient.from_settings(settings)


@lru_cache
def get_service() -> InsightsService:
    """Get the insights service instance."""
    return InsightsService(
        store=get_store(),
        analysis_client=get_analysis_client(),
        settings=get_settings(),
    )


@lru_cache
def get_controller() -> RecomputeController:
    """Get the recompute controller instance."""
    return RecomputeController(get_service())


@lru_cache
def get_polling_scheduler() -> ChangePollingScheduler:
    """Get the change polling scheduler instance."""
    return ChangePollingScheduler(get_store(), get_settings())
