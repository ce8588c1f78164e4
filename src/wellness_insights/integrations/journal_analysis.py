"""
AI journal analysis client.

Sends a journal entry to an OpenAI-compatible chat completions endpoint and
parses the structured analysis out of the reply. The model is asked for
JSON; replies that cannot be parsed fall back to a neutral analysis that
keeps the raw reply as the supportive response.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import Settings, get_settings
from ..exceptions import (
    AnalysisQuotaError,
    AnalysisRateLimitError,
    AnalysisServiceError,
    ConfigurationError,
)

logger = logging.getLogger(__name__)


DISCLAIMER = (
    "This analysis is for self-reflection only and is not a substitute "
    "for professional mental health care."
)

DEFAULT_RECOMMENDATIONS = [
    "Take a few deep breaths",
    "Go for a short walk",
    "Connect with someone you trust",
]

SYSTEM_PROMPT = f"""You are a compassionate mental health support AI assistant. Your role is to:
1. Analyze journal entries for emotional sentiment and stress indicators
2. Detect patterns that might indicate anxiety, depression, or elevated stress
3. Provide warm, supportive, and non-clinical feedback
4. Suggest personalized self-care activities

IMPORTANT: You are NOT a replacement for professional mental health care. Always encourage seeking professional help for serious concerns.

Respond in JSON format with this structure:
{{
  "sentiment": "positive" | "neutral" | "negative" | "mixed",
  "sentimentScore": number between -1 (very negative) and 1 (very positive),
  "stressLevel": "low" | "medium" | "high",
  "emotionsDetected": string[],
  "supportiveResponse": string (a warm, empathetic 2-3 sentence response),
  "selfCareRecommendations": string[] (3-5 personalized suggestions),
  "patterns": string[],
  "disclaimer": "{DISCLAIMER}"
}}"""

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")


class JournalAnalysis(BaseModel):
    """Structured analysis of one journal entry."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sentiment: str = "neutral"
    sentiment_score: float = Field(default=0.0, ge=-1.0, le=1.0)
    stress_level: str = "medium"
    emotions_detected: List[str] = Field(default_factory=list)
    supportive_response: str = ""
    self_care_recommendations: List[str] = Field(default_factory=list)
    patterns: List[str] = Field(default_factory=list)
    disclaimer: str = DISCLAIMER


def fallback_analysis(content: str = "") -> JournalAnalysis:
    """Neutral analysis used when the model reply is not valid JSON."""
    return JournalAnalysis(
        sentiment="neutral",
        sentiment_score=0.0,
        stress_level="medium",
        emotions_detected=["reflective"],
        supportive_response=content,
        self_care_recommendations=list(DEFAULT_RECOMMENDATIONS),
        patterns=[],
        disclaimer=DISCLAIMER,
    )


def parse_analysis_content(content: str) -> JournalAnalysis:
    """Parse a model reply, optionally wrapped in a markdown code fence."""
    match = _FENCED_JSON.search(content) or _FENCED_ANY.search(content)
    json_string = match.group(1) if match else content
    try:
        data = json.loads(json_string.strip())
        if not isinstance(data, dict):
            raise ValueError("analysis is not a JSON object")
        return JournalAnalysis.model_validate(data)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError too
        logger.warning("Falling back to neutral analysis: %s", e)
        return fallback_analysis(content)


def build_user_prompt(text: str, mood_hint: Optional[str] = None) -> str:
    mood_part = f" (user's self-reported mood: {mood_hint})" if mood_hint else ""
    return (
        f"Please analyze this journal entry{mood_part}:\n\n"
        f"\"{text}\"\n\n"
        "Provide a compassionate analysis focusing on emotional well-being and helpful suggestions."
    )


class JournalAnalysisClient:
    """Synchronous client for the journal analysis model."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        model: str = "google/gemini-2.5-flash",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.Client] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "JournalAnalysisClient":
        """Build a client from settings.

        Raises:
            ConfigurationError: If no analysis service URL is configured
        """
        settings = settings or get_settings()
        if not settings.analysis_service_url:
            raise ConfigurationError("analysis_service_url")
        return cls(
            base_url=settings.analysis_service_url,
            api_key=settings.analysis_api_key,
            model=settings.analysis_model,
            timeout=settings.analysis_timeout_seconds,
        )

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.Client(timeout=self.timeout, transport=self._transport)
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None and not self._http_client.is_closed:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> "JournalAnalysisClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def analyze(self, text: str, mood_hint: Optional[str] = None) -> JournalAnalysis:
        """
        Analyze a journal entry.

        Args:
            text: Journal entry text
            mood_hint: The user's self-reported mood, if any

        Returns:
            Parsed analysis, or the neutral fallback for unparsable replies

        Raises:
            AnalysisRateLimitError: On HTTP 429
            AnalysisQuotaError: On HTTP 402
            AnalysisServiceError: On any other failure
        """
        if not text or not text.strip():
            raise AnalysisServiceError(
                "Journal entry is required",
                status_code=400,
            )

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(text, mood_hint)},
            ],
            "temperature": 0.7,
        }

        try:
            response = self._get_client().post(
                f"{self.base_url}/chat/completions",
                headers=self._headers(),
                json=payload,
            )
        except httpx.HTTPError as e:
            raise AnalysisServiceError(
                "Failed to reach the analysis service",
                details={"reason": str(e)},
            ) from e

        if response.status_code == 429:
            raise AnalysisRateLimitError()
        if response.status_code == 402:
            raise AnalysisQuotaError()
        if response.status_code != 200:
            logger.error("Analysis service error: %s", response.status_code)
            raise AnalysisServiceError(
                "Failed to analyze journal entry",
                details={"status": response.status_code},
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AnalysisServiceError("No response from AI") from e
        if not content:
            raise AnalysisServiceError("No response from AI")

        return parse_analysis_content(content)
