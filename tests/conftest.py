"""Shared fixtures for wellness insights tests."""

from datetime import date, datetime
from typing import Any, Dict, Optional

import pytest

from wellness_insights.config import Settings
from wellness_insights.db.database import SqliteRecordStore
from wellness_insights.db.models import DailyRecord, MetricFamily
from wellness_insights.service import InsightsService

# Friday
TODAY = date(2024, 3, 15)
NOW = datetime(2024, 3, 15, 18, 30)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a temporary database, ignoring any .env file."""
    return Settings(db_path=tmp_path / "insights.db", _env_file=None)


@pytest.fixture
def store(settings) -> SqliteRecordStore:
    """Create a temporary record store."""
    return SqliteRecordStore(str(settings.db_path))


@pytest.fixture
def service(store, settings) -> InsightsService:
    """Service with the clock pinned to NOW."""
    return InsightsService(store, settings=settings, clock=lambda: NOW)


@pytest.fixture
def make_record():
    """Factory for raw DailyRecords."""

    def _make(
        family: MetricFamily,
        day: str,
        values: Optional[Dict[str, Any]] = None,
        hour: int = 12,
        minute: int = 0,
        user_id: str = "user-1",
        record_id: Optional[int] = None,
    ) -> DailyRecord:
        created_at = datetime.strptime(day, "%Y-%m-%d").replace(hour=hour, minute=minute)
        return DailyRecord(
            user_id=user_id,
            family=family,
            day_key=day,
            created_at=created_at,
            values=values or {},
            record_id=record_id,
        )

    return _make
