import json

import pytest

from camerpulse.generation.domain.signal import SignalSource
from camerpulse.generation.domain.styles import PollStyle
from camerpulse.generation.errors import MalformedResponse, UpstreamFailure
from camerpulse.generation.services.content_synthesizer import ContentSynthesizer, parse_poll_payload
from camerpulse.generation.services.prompt_template_registry import POLL_USER_TEMPLATE_ID, PromptTemplateRegistry
from camerpulse.generation.services.runtime_config_loader import RuntimeConfigLoader
from camerpulse.generation.store.in_memory_runtime_config_store import InMemoryRuntimeConfigStore
from camerpulse.generation.tests.support import FakeCompletionClient, config_rows, make_signal, poll_json


def _config():
    return RuntimeConfigLoader(InMemoryRuntimeConfigStore(config_rows())).load()


def test_synthesizer_builds_prompt_from_signal_and_calls_client_once():
    client = FakeCompletionClient()
    synthesizer = ContentSynthesizer(client, model="gpt-test", temperature=0.3, max_tokens=321)
    signal = make_signal(topic="Road repairs in Douala", category="infrastructure", region="Littoral")

    result = synthesizer.synthesize(signal, _config())

    assert len(client.requests) == 1
    request = client.requests[0]
    assert request.model == "gpt-test"
    assert request.temperature == 0.3
    assert request.max_tokens == 321
    assert "Road repairs in Douala" in request.user_message
    assert "infrastructure" in request.user_message
    assert "Littoral" in request.user_message
    assert "citizen complaint" in request.user_message
    assert "JSON" in request.system_message
    assert result.prompt == request.user_message


def test_synthesizer_maps_style_and_scores_confidence():
    synthesizer = ContentSynthesizer(FakeCompletionClient())

    result = synthesizer.synthesize(make_signal(strength=1.0, category="infrastructure"), _config())

    assert result.style == PollStyle.CHART
    assert result.confidence_score == pytest.approx(0.9)
    assert result.options == ["Yes", "No", "Only in the dry season", "Not sure"]
    assert result.reasoning.startswith("Complaints about water")


def test_unmapped_category_gets_default_style():
    synthesizer = ContentSynthesizer(FakeCompletionClient())
    result = synthesizer.synthesize(make_signal(category="sports"), _config())
    assert result.style == PollStyle.CARD


def test_sentiment_trend_prompt_uses_national_region_when_missing():
    client = FakeCompletionClient()
    signal = make_signal(source=SignalSource.SENTIMENT_TREND, region=None)
    ContentSynthesizer(client).synthesize(signal, _config())
    assert "Region: National" in client.requests[0].user_message
    assert "public sentiment trend" in client.requests[0].user_message


def test_upstream_failure_propagates():
    client = FakeCompletionClient(error=UpstreamFailure(503, "Service Unavailable"))
    with pytest.raises(UpstreamFailure) as excinfo:
        ContentSynthesizer(client).synthesize(make_signal(), _config())
    assert "503" in str(excinfo.value)


def test_non_json_content_is_malformed():
    client = FakeCompletionClient(content="Here is your poll: Should we...?")
    with pytest.raises(MalformedResponse):
        ContentSynthesizer(client).synthesize(make_signal(), _config())


@pytest.mark.parametrize(
    "content",
    [
        json.dumps(["question", "options"]),
        json.dumps({"options": ["a", "b"], "reasoning": "r"}),
        json.dumps({"question": "", "options": ["a", "b"], "reasoning": "r"}),
        json.dumps({"question": "q", "options": "a, b", "reasoning": "r"}),
        json.dumps({"question": "q", "options": ["only one"], "reasoning": "r"}),
        json.dumps({"question": "q", "options": ["a", ""], "reasoning": "r"}),
        json.dumps({"question": "q", "options": ["a", "b"]}),
        json.dumps({"question": "q", "options": ["a", "b"], "reasoning": 12}),
        "```json\n" + poll_json() + "\n```",
    ],
)
def test_parse_rejects_invalid_documents(content):
    with pytest.raises(MalformedResponse):
        parse_poll_payload(content)


def test_parse_accepts_empty_reasoning_and_optional_description():
    payload = parse_poll_payload(
        json.dumps({"question": " Q? ", "options": [" a ", "b"], "reasoning": "", "description": "d"})
    )
    assert payload.question == "Q?"
    assert payload.options == ["a", "b"]
    assert payload.reasoning == ""
    assert payload.description == "d"


def test_overridden_user_template_is_sent_to_client():
    client = FakeCompletionClient()
    templates = PromptTemplateRegistry(
        overrides={POLL_USER_TEMPLATE_ID: "Draft a poll about ${topic} (${region}). Topic: ${topic}"}
    )

    ContentSynthesizer(client, templates=templates).synthesize(make_signal(topic="Fuel prices"), _config())

    assert client.requests[0].user_message == "Draft a poll about Fuel prices (Northwest). Topic: Fuel prices"
    assert "JSON" in client.requests[0].system_message


def test_unknown_template_id_raises():
    with pytest.raises(KeyError):
        PromptTemplateRegistry().render("missing", {})
