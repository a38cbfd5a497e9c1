import pytest

from camerpulse.generation.domain.audit import GENERATION_METHOD
from camerpulse.generation.domain.run_result import RunStatus
from camerpulse.generation.domain.signal import SignalSource
from camerpulse.generation.domain.styles import PollStyle
from camerpulse.generation.errors import MalformedResponse, PersistenceFailure, UpstreamFailure
from camerpulse.generation.services.poll_writer import WriteMode
from camerpulse.generation.store.in_memory_poll_store import InMemoryPollStore
from camerpulse.generation.tests.support import (
    NOW,
    FailingAuditPollStore,
    FakeCompletionClient,
    build_pipeline,
    config_rows,
    make_signal,
)


def test_disabled_system_returns_message_without_any_work():
    client = FakeCompletionClient()
    store = InMemoryPollStore()
    pipeline = build_pipeline(
        [make_signal()],
        rows=config_rows(system_enabled={"enabled": False}),
        client=client,
        poll_store=store,
    )

    result = pipeline.run()

    assert result.status == RunStatus.DISABLED
    assert result.to_response() == {"message": "Autonomous poll generation is disabled"}
    assert client.requests == []
    assert store.polls == {}


def test_generates_one_poll_and_one_audit():
    client = FakeCompletionClient()
    store = InMemoryPollStore()
    signal = make_signal(strength=0.6, category="infrastructure")

    result = build_pipeline([signal], client=client, poll_store=store).run()

    assert result.status == RunStatus.GENERATED
    assert len(client.requests) == 1
    assert len(store.polls) == 1
    assert len(store.audits) == 1

    poll = next(iter(store.polls.values()))
    audit = next(iter(store.audits.values()))
    assert audit.poll_id == poll.id
    assert audit.trigger_source == SignalSource.COMPLAINT
    assert audit.trigger_source_id == signal.id
    assert audit.trigger_topic == signal.topic
    assert audit.topic_category == "infrastructure"
    assert audit.generation_method == GENERATION_METHOD
    assert audit.confidence_score == pytest.approx(0.88)
    assert audit.auto_published is True
    assert audit.admin_approved is True
    assert audit.created_at == NOW
    assert poll.style == PollStyle.CHART
    assert poll.is_active is True
    assert (poll.ends_at - poll.created_at).days == 7
    assert audit.metadata["frequency"] == "daily"
    assert audit.metadata["topic_weight"] is None


def test_success_response_shape():
    result = build_pipeline([make_signal(topic="Fuel prices", category="economy")]).run()

    body = result.to_response()

    assert body["success"] is True
    assert body["poll"]["title"] == "Should water distribution in Bamenda be prioritised?"
    assert body["poll"]["style"] == "card"
    metadata = body["metadata"]
    assert metadata["category"] == "economy"
    assert metadata["style"] == "card"
    assert metadata["trigger_topic"] == "Fuel prices"
    assert metadata["trigger_source"] == "complaint"
    assert metadata["auto_published"] is True
    assert metadata["audit_recorded"] is True
    assert metadata["regional_boost"]["boost_factor"] == 1.5


def test_quota_stops_generation_after_weekly_limit():
    client = FakeCompletionClient()
    store = InMemoryPollStore()
    pipeline = build_pipeline([make_signal()], client=client, poll_store=store)

    first = pipeline.run()
    second = pipeline.run()
    third = pipeline.run()

    assert [first.status, second.status] == [RunStatus.GENERATED, RunStatus.GENERATED]
    assert third.status == RunStatus.QUOTA_REACHED
    assert third.to_response() == {"message": "Weekly poll generation limit reached"}
    assert len(client.requests) == 2
    assert len(store.audits) == 2


def test_no_signal_above_threshold():
    client = FakeCompletionClient()
    store = InMemoryPollStore()

    result = build_pipeline([make_signal(strength=0.4)], client=client, poll_store=store).run()

    assert result.status == RunStatus.NO_SIGNAL
    assert result.to_response() == {"message": "No trending topics found above threshold"}
    assert client.requests == []
    assert store.polls == {}


def test_malformed_completion_writes_nothing():
    store = InMemoryPollStore()
    pipeline = build_pipeline([make_signal()], client=FakeCompletionClient(content="not json"), poll_store=store)

    with pytest.raises(MalformedResponse):
        pipeline.run()

    assert store.polls == {}
    assert store.audits == {}


def test_upstream_error_writes_nothing():
    store = InMemoryPollStore()
    client = FakeCompletionClient(error=UpstreamFailure(503, "Service Unavailable"))

    with pytest.raises(UpstreamFailure):
        build_pipeline([make_signal()], client=client, poll_store=store).run()

    assert store.polls == {}
    assert store.audits == {}


def test_audit_failure_keeps_poll_and_flags_response():
    store = FailingAuditPollStore()

    result = build_pipeline([make_signal()], poll_store=store).run()

    assert result.status == RunStatus.GENERATED
    assert result.audit_recorded is False
    assert result.audit is None
    assert len(store.polls) == 1
    assert store.audits == {}
    assert result.to_response()["metadata"]["audit_recorded"] is False


def test_transactional_mode_rolls_back_poll_when_audit_fails():
    store = FailingAuditPollStore()
    pipeline = build_pipeline([make_signal()], poll_store=store, mode=WriteMode.TRANSACTIONAL)

    with pytest.raises(PersistenceFailure):
        pipeline.run()

    assert store.polls == {}


def test_transactional_mode_writes_both_records():
    store = InMemoryPollStore()
    result = build_pipeline([make_signal()], poll_store=store, mode=WriteMode.TRANSACTIONAL).run()
    assert result.audit_recorded is True
    assert len(store.polls) == 1
    assert len(store.audits) == 1


def test_manual_approval_leaves_poll_inactive():
    store = InMemoryPollStore()
    rows = config_rows(auto_publish={"enabled": True, "require_admin_approval": True})

    result = build_pipeline([make_signal()], rows=rows, poll_store=store).run()

    assert result.poll.is_active is False
    assert result.audit.auto_published is False
    assert result.audit.admin_approved is None


def test_low_confidence_is_not_auto_published():
    rows = config_rows(generation_schedule={"max_per_week": 2, "min_confidence": 0.95})
    result = build_pipeline([make_signal()], rows=rows).run()
    assert result.poll.is_active is False
    assert result.audit.admin_approved is None


def test_tie_between_sources_selects_complaint():
    client = FakeCompletionClient()
    complaint = make_signal(topic="Potholes on the Douala-Yaounde road", strength=0.85)
    trend = make_signal(topic="Fuel subsidy debate", strength=0.85, source=SignalSource.SENTIMENT_TREND)

    result = build_pipeline([trend, complaint], client=client).run()

    assert result.audit.trigger_source == SignalSource.COMPLAINT
    assert "Potholes" in client.requests[0].user_message


def test_sentiment_trend_audit_has_no_source_id():
    trend = make_signal(topic="Fuel subsidy debate", strength=0.9, source=SignalSource.SENTIMENT_TREND)
    result = build_pipeline([trend]).run()
    assert result.audit.trigger_source == SignalSource.SENTIMENT_TREND
    assert result.audit.trigger_source_id is None


def test_mapped_free_form_category_sets_poll_style():
    rows = config_rows(style_mapping={"general": "ballot", "default": "card"})
    result = build_pipeline([make_signal(category="general")], rows=rows).run()
    assert result.poll.style == PollStyle.BALLOT
    assert result.to_response()["metadata"]["style"] == "ballot"


def test_nan_strength_signal_is_ignored():
    bad = make_signal(topic="Corrupted row", strength=float("nan"))
    good = make_signal(topic="Teacher strikes in Buea", strength=0.7, category="education")

    result = build_pipeline([bad, good]).run()

    assert result.audit.trigger_topic == "Teacher strikes in Buea"
    assert 0.5 <= result.audit.confidence_score <= 0.9
