from datetime import timedelta
from uuid import uuid4

from camerpulse.generation.domain.audit import GENERATION_METHOD, GenerationAudit
from camerpulse.generation.domain.poll import GeneratedPoll
from camerpulse.generation.domain.signal import SignalSource
from camerpulse.generation.domain.styles import PollStyle
from camerpulse.generation.services.quota_guard import QuotaGuard
from camerpulse.generation.store.in_memory_poll_store import InMemoryPollStore
from camerpulse.generation.tests.support import NOW


def _seed(store: InMemoryPollStore, created_at):
    poll = GeneratedPoll(
        id=uuid4(),
        title="q",
        description="",
        options=["a", "b"],
        style=PollStyle.CARD,
        is_active=True,
        ends_at=created_at + timedelta(days=7),
        created_at=created_at,
    )
    store.insert_poll(poll)
    store.insert_audit(
        GenerationAudit(
            id=uuid4(),
            poll_id=poll.id,
            trigger_source_id=None,
            trigger_source=SignalSource.SENTIMENT_TREND,
            trigger_topic="t",
            topic_category="economy",
            generation_method=GENERATION_METHOD,
            confidence_score=0.7,
            auto_published=True,
            admin_approved=True,
            generation_prompt="p",
            ai_reasoning="r",
            created_at=created_at,
        )
    )


def test_quota_counts_only_the_trailing_window():
    store = InMemoryPollStore()
    _seed(store, NOW - timedelta(days=1))
    _seed(store, NOW - timedelta(days=8))
    guard = QuotaGuard(store, window_days=7)

    decision = guard.check(NOW, limit=2)

    assert decision.count == 1
    assert decision.allowed is True
    assert decision.window_start == NOW - timedelta(days=7)


def test_quota_refuses_at_the_limit():
    store = InMemoryPollStore()
    _seed(store, NOW - timedelta(hours=5))
    _seed(store, NOW - timedelta(days=2))

    decision = QuotaGuard(store).check(NOW, limit=2)

    assert decision.count == 2
    assert decision.allowed is False


def test_zero_limit_always_refuses():
    assert QuotaGuard(InMemoryPollStore()).check(NOW, limit=0).allowed is False


def test_quota_is_recounted_on_every_check():
    store = InMemoryPollStore()
    guard = QuotaGuard(store)
    assert guard.check(NOW, limit=1).allowed is True
    _seed(store, NOW)
    assert guard.check(NOW, limit=1).allowed is False
