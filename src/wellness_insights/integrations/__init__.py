"""External service integrations."""

from .journal_analysis import (
    JournalAnalysis,
    JournalAnalysisClient,
    fallback_analysis,
    parse_analysis_content,
)

__all__ = [
    "JournalAnalysis",
    "JournalAnalysisClient",
    "fallback_analysis",
    "parse_analysis_content",
]
