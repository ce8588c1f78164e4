"""Configuration settings for wellness insights."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    db_path: Path = Path("wellness_insights.db")

    # Rollup windows
    weekly_window_days: int = 7
    monthly_window_days: int = 28
    rollup_weeks: int = 4

    # Trend significance
    sentiment_trend_threshold: float = 0.1
    wellness_trend_threshold_pct: float = 10.0

    # AI journal analysis service
    analysis_service_url: Optional[str] = None
    analysis_api_key: Optional[str] = None
    analysis_model: str = "google/gemini-2.5-flash"
    analysis_timeout_seconds: float = 30.0

    # Change polling for rows written by other processes
    change_polling_enabled: bool = False
    change_poll_interval_seconds: int = 30

    # API settings
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    log_level: str = "INFO"

    class Config:
        env_prefix = "WELLNESS_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
