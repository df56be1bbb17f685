"""Tests for the market analysis pipeline."""

import asyncio
import json

import pytest

from tam.analysis.errors import (
    AnalysisFailed,
    ContentFlagged,
    InvalidInput,
    MalformedSegmentData,
    NoProviderConfigured,
    ProviderUnavailable,
    UnparsableResponse,
)
from tam.analysis.prompts import SYSTEM_PROMPT, build_user_prompt
from tam.core.models import ProviderId

ONE_SEGMENT = '{"totalPopulation":1000,"segments":[{"name":"A","count":1000,"color":"#fff"}]}'


def make_reply(total=335_000_000):
    return json.dumps({
        "totalPopulation": total,
        "segments": [
            {"name": "Not in market", "count": total - 5_000_000, "color": "#6b7280"},
            {"name": "Developers", "count": 4_000_000, "color": "#22c55e"},
            {"name": "Paying teams", "count": 1_000_000, "color": "#f59e0b"},
        ],
    })


def test_analyze_end_to_end(make_pipeline):
    pipeline = make_pipeline(reply=ONE_SEGMENT, moderation_reply="safe")

    result = asyncio.run(pipeline.analyze_market("AI market"))

    assert result.total_population == 1000
    assert result.provider == ProviderId.GROQ
    assert result.model == "llama-3.3-70b-versatile"
    assert result.to_response()["segments"] == [{"name": "A", "count": 1000, "color": "#fff"}]


def test_analyze_sends_prompts(make_pipeline):
    pipeline = make_pipeline(reply=make_reply())

    asyncio.run(pipeline.analyze_market("  AI coding tools ", population=335_000_000))

    call = pipeline.fake_completion.calls[0]
    assert call["system_prompt"] == SYSTEM_PROMPT
    assert call["prompt"] == build_user_prompt("AI coding tools", 335_000_000)
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 1024


def test_user_prompt_contents():
    prompt = build_user_prompt("AI coding tools", 335_000_000)

    assert "Population base: 335,000,000 (335M)" in prompt
    assert "Market: AI coding tools" in prompt
    assert "Segments must sum to exactly 335000000." in prompt


@pytest.mark.parametrize("population", [None, 0, -5, "335M", True])
def test_population_defaults_to_world(make_pipeline, population):
    pipeline = make_pipeline(reply=make_reply())

    asyncio.run(pipeline.analyze_market("AI market", population=population))

    assert "Population base: 8,100,000,000 (~8.1B)" in pipeline.fake_completion.calls[0]["prompt"]


def test_requested_provider_and_model(make_pipeline):
    pipeline = make_pipeline(reply=ONE_SEGMENT, available=(ProviderId.GROQ, ProviderId.OPENAI))

    result = asyncio.run(pipeline.analyze_market("AI market", provider="openai", model="gpt-4o"))

    assert pipeline.fake_builder.requests == [(ProviderId.OPENAI, "gpt-4o")]
    assert result.provider == ProviderId.OPENAI
    assert result.model == "gpt-4o"


def test_unknown_model_falls_back_to_default(make_pipeline):
    pipeline = make_pipeline(reply=ONE_SEGMENT)

    result = asyncio.run(pipeline.analyze_market("AI market", model="gpt-4o"))

    assert result.model == "llama-3.3-70b-versatile"


@pytest.mark.parametrize("query", [None, "", "   ", 42])
def test_invalid_query_makes_no_calls(make_pipeline, query):
    pipeline = make_pipeline(reply=ONE_SEGMENT)

    with pytest.raises(InvalidInput, match="Query required"):
        asyncio.run(pipeline.analyze_market(query))

    assert pipeline.fake_builder.requests == []


def test_no_provider_configured(make_pipeline):
    pipeline = make_pipeline(reply=ONE_SEGMENT, available=())

    with pytest.raises(NoProviderConfigured):
        asyncio.run(pipeline.analyze_market("AI market"))

    assert pipeline.fake_builder.requests == []


def test_provider_unavailable(make_pipeline):
    pipeline = make_pipeline(reply=ONE_SEGMENT)

    with pytest.raises(ProviderUnavailable):
        asyncio.run(pipeline.analyze_market("AI market", provider="anthropic"))

    assert pipeline.fake_builder.requests == []


def test_flagged_content_discards_segments(make_pipeline):
    pipeline = make_pipeline(reply=ONE_SEGMENT, moderation_reply="unsafe\nS1\nS2")

    with pytest.raises(ContentFlagged) as exc:
        asyncio.run(pipeline.analyze_market("AI market"))

    assert exc.value.categories == ["S1", "S2"]
    assert exc.value.status_code == 422
    assert pipeline.fake_moderation.calls[0]["prompt"] == ONE_SEGMENT


def test_moderation_outage_does_not_block(make_pipeline, transport_error):
    pipeline = make_pipeline(reply=ONE_SEGMENT, moderation_error=transport_error)

    result = asyncio.run(pipeline.analyze_market("AI market"))

    assert result.total_population == 1000


def test_completion_failure(make_pipeline, transport_error):
    pipeline = make_pipeline(completion_error=transport_error, moderation_reply="safe")

    with pytest.raises(AnalysisFailed, match="Analysis failed"):
        asyncio.run(pipeline.analyze_market("AI market"))

    assert pipeline.fake_moderation.calls == []


def test_prose_response_is_unparsable(make_pipeline):
    pipeline = make_pipeline(reply="I think the market is about two million people.")

    with pytest.raises(UnparsableResponse):
        asyncio.run(pipeline.analyze_market("AI market"))


def test_malformed_segments(make_pipeline):
    pipeline = make_pipeline(reply='{"totalPopulation": 100, "segments": [{"name": "A"}]}')

    with pytest.raises(MalformedSegmentData):
        asyncio.run(pipeline.analyze_market("AI market"))


def test_estimate_population_returns_raw_text_unmoderated(make_pipeline):
    pipeline = make_pipeline(reply="unsafe-looking raw text", moderation_reply="unsafe\nS1")

    text = asyncio.run(pipeline.estimate_population("How many nurses are in California?"))

    assert text == "unsafe-looking raw text"
    assert pipeline.fake_moderation.calls == []
    call = pipeline.fake_completion.calls[0]
    assert call["prompt"] == "How many nurses are in California?"
    assert call["system_prompt"] is None


def test_resolve_population(make_pipeline):
    pipeline = make_pipeline(reply='{"label": "Nurses in California", "value": 450000}')

    estimate = asyncio.run(pipeline.resolve_population("nurses in California"))

    assert estimate.value == 450000
    assert '"nurses in California"' in pipeline.fake_completion.calls[0]["prompt"]


def test_resolve_population_unparsable(make_pipeline):
    pipeline = make_pipeline(reply="No idea.")

    with pytest.raises(UnparsableResponse, match="Could not resolve population"):
        asyncio.run(pipeline.resolve_population("dragons"))


@pytest.mark.parametrize("reply", [
    '{"totalPopulation": 1000, "segments": [{"name": "A", "count": 900, "color": "#fff"}, {"name": "B", "cou',
    '{"totalPopulation": 1000, "segments": [{"name": "A", "count": 1000, "color": "#fff"},]}',
])
def test_broken_json_reply_is_unparsable(make_pipeline, reply):
    pipeline = make_pipeline(reply=reply)

    with pytest.raises(UnparsableResponse, match="Failed to parse AI response"):
        asyncio.run(pipeline.analyze_market("AI market"))
