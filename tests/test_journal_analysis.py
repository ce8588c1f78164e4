"""Tests for the AI journal analysis client."""

import json

import httpx
import pytest

from wellness_insights.config import Settings
from wellness_insights.exceptions import (
    AnalysisQuotaError,
    AnalysisRateLimitError,
    AnalysisServiceError,
    ConfigurationError,
    ErrorCode,
)
from wellness_insights.integrations.journal_analysis import (
    DEFAULT_RECOMMENDATIONS,
    DISCLAIMER,
    JournalAnalysis,
    JournalAnalysisClient,
    build_user_prompt,
    fallback_analysis,
    parse_analysis_content,
)

ANALYSIS_JSON = {
    "sentiment": "positive",
    "sentimentScore": 0.6,
    "stressLevel": "low",
    "emotionsDetected": ["calm", "grateful"],
    "supportiveResponse": "It sounds like a good day.",
    "selfCareRecommendations": ["Keep walking"],
    "patterns": [],
    "disclaimer": DISCLAIMER,
}


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(handler, api_key="sk-test-key"):
    return JournalAnalysisClient(
        base_url="https://ai.example.com/v1/",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


class TestParseAnalysisContent:
    """Tests for parsing model replies."""

    def test_fenced_json(self):
        content = "Here you go:\n```json\n" + json.dumps(ANALYSIS_JSON) + "\n```"
        analysis = parse_analysis_content(content)

        assert analysis.sentiment == "positive"
        assert analysis.sentiment_score == 0.6
        assert analysis.emotions_detected == ["calm", "grateful"]

    def test_plain_json(self):
        assert parse_analysis_content(json.dumps(ANALYSIS_JSON)).stress_level == "low"

    def test_unparsable_reply_falls_back(self):
        analysis = parse_analysis_content("You seem to be doing well today.")

        assert analysis.sentiment == "neutral"
        assert analysis.sentiment_score == 0.0
        assert analysis.stress_level == "medium"
        assert analysis.emotions_detected == ["reflective"]
        assert analysis.supportive_response == "You seem to be doing well today."
        assert analysis.self_care_recommendations == DEFAULT_RECOMMENDATIONS

    def test_out_of_range_score_falls_back(self):
        data = dict(ANALYSIS_JSON, sentimentScore=3)
        assert parse_analysis_content(json.dumps(data)).sentiment == "neutral"

    def test_non_object_json_falls_back(self):
        assert parse_analysis_content("[1, 2, 3]").emotions_detected == ["reflective"]


class TestJournalAnalysisModel:
    """Tests for the analysis model."""

    def test_dump_uses_camel_case(self):
        dumped = JournalAnalysis.model_validate(ANALYSIS_JSON).model_dump(by_alias=True)
        assert dumped == ANALYSIS_JSON

    def test_accepts_snake_case(self):
        assert JournalAnalysis(stress_level="high").stress_level == "high"

    def test_fallback_without_content(self):
        assert fallback_analysis().supportive_response == ""


class TestBuildUserPrompt:
    """Tests for the user prompt."""

    def test_with_mood_hint(self):
        prompt = build_user_prompt("Long day", "low")
        assert "(user's self-reported mood: low)" in prompt
        assert '"Long day"' in prompt

    def test_without_mood_hint(self):
        assert "self-reported" not in build_user_prompt("Long day")


class TestJournalAnalysisClient:
    """Tests for the HTTP client."""

    def test_analyze_posts_chat_completion(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("```json\n" + json.dumps(ANALYSIS_JSON) + "\n```"))

        with make_client(handler) as client:
            analysis = client.analyze("Walked by the sea", mood_hint="good")

        assert analysis.sentiment == "positive"
        assert seen["url"] == "https://ai.example.com/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test-key"
        assert seen["body"]["model"] == "google/gemini-2.5-flash"
        assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]
        assert "Walked by the sea" in seen["body"]["messages"][1]["content"]

    def test_no_auth_header_without_key(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json=completion(json.dumps(ANALYSIS_JSON)))

        make_client(handler, api_key=None).analyze("entry")
        assert seen["auth"] is None

    def test_unparsable_reply_falls_back(self):
        client = make_client(lambda request: httpx.Response(200, json=completion("Be kind to yourself.")))
        analysis = client.analyze("entry")

        assert analysis.sentiment == "neutral"
        assert analysis.supportive_response == "Be kind to yourself."

    def test_rate_limited(self):
        client = make_client(lambda request: httpx.Response(429))
        with pytest.raises(AnalysisRateLimitError) as exc_info:
            client.analyze("entry")

        assert exc_info.value.status_code == 429
        assert exc_info.value.code == ErrorCode.ANALYSIS_RATE_LIMITED

    def test_quota_exhausted(self):
        client = make_client(lambda request: httpx.Response(402))
        with pytest.raises(AnalysisQuotaError) as exc_info:
            client.analyze("entry")

        assert exc_info.value.status_code == 402

    def test_server_error(self):
        client = make_client(lambda request: httpx.Response(500, text="oops"))
        with pytest.raises(AnalysisServiceError) as exc_info:
            client.analyze("entry")

        assert exc_info.value.status_code == 502
        assert exc_info.value.details == {"status": 500}

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AnalysisServiceError) as exc_info:
            make_client(handler).analyze("entry")

        assert "connection refused" in exc_info.value.details["reason"]

    @pytest.mark.parametrize("body", [
        {"choices": []},
        completion(""),
        {"unexpected": True},
    ])
    def test_empty_reply(self, body):
        client = make_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(AnalysisServiceError, match="No response from AI"):
            client.analyze("entry")

    def test_empty_text_is_rejected_before_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(AnalysisServiceError) as exc_info:
            make_client(handler).analyze("   ")

        assert exc_info.value.status_code == 400

    def test_close_is_idempotent(self):
        client = make_client(lambda request: httpx.Response(200, json=completion("{}")))
        client.analyze("entry")
        client.close()
        client.close()

        assert client._http_client is None


class TestFromSettings:
    """Tests for building the client from settings."""

    def test_requires_url(self):
        with pytest.raises(ConfigurationError) as exc_info:
            JournalAnalysisClient.from_settings(Settings(_env_file=None))

        assert exc_info.value.details == {"setting": "analysis_service_url"}

    def test_uses_settings(self):
        settings = Settings(
            analysis_service_url="https://ai.example.com/v1",
            analysis_api_key="sk-abc",
            analysis_model="test-model",
            analysis_timeout_seconds=5,
            _env_file=None,
        )
        client = JournalAnalysisClient.from_settings(settings)

        assert client.base_url == "https://ai.example.com/v1"
        assert client.model == "test-model"
        assert client.timeout == 5
