import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from camerpulse.core.time.clock import FrozenClock
from camerpulse.generation.domain.signal import Signal, SignalSource
from camerpulse.generation.interfaces.completion_client import (
    CompletionClient,
    CompletionRequest,
    CompletionResponse,
)
from camerpulse.generation.services.content_synthesizer import ContentSynthesizer
from camerpulse.generation.services.generation_pipeline import GenerationPipeline
from camerpulse.generation.services.poll_writer import PollWriter, WriteMode
from camerpulse.generation.services.quota_guard import QuotaGuard
from camerpulse.generation.services.runtime_config_loader import RuntimeConfigLoader
from camerpulse.generation.services.signal_collector import SignalCollector
from camerpulse.generation.store.in_memory_poll_store import InMemoryPollStore
from camerpulse.generation.store.in_memory_runtime_config_store import InMemoryRuntimeConfigStore
from camerpulse.generation.store.in_memory_signal_store import InMemorySignalStore

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def make_signal(
    topic: str = "Water shortages in Bamenda",
    strength: float = 0.9,
    source: SignalSource = SignalSource.COMPLAINT,
    category: str = "infrastructure",
    region: Optional[str] = "Northwest",
    age: timedelta = timedelta(days=1),
    with_id: bool = True,
) -> Signal:
    return Signal(
        id=uuid4() if with_id and source == SignalSource.COMPLAINT else None,
        topic=topic,
        strength=strength,
        source=source,
        category=category,
        region=region,
        observed_at=NOW - age,
    )


def config_rows(**overrides: Any) -> Dict[str, Any]:
    rows: Dict[str, Any] = {
        "system_enabled": {"enabled": True, "description": "Master switch"},
        "sentiment_thresholds": {"trending": 0.6},
        "generation_schedule": {"frequency": "daily", "max_per_week": 2, "min_confidence": 0.7},
        "auto_publish": {"enabled": True, "require_admin_approval": False},
        "style_mapping": {"infrastructure": "chart", "health": "emoji", "default": "card"},
        "regional_boost": {"enabled": True, "boost_factor": 1.5, "affected_regions_only": False},
    }
    rows.update(overrides)
    return rows


def poll_json(
    question: str = "Should water distribution in Bamenda be prioritised?",
    options: Optional[List[str]] = None,
    reasoning: str = "Complaints about water spiked this week.",
) -> str:
    return json.dumps(
        {
            "question": question,
            "options": options if options is not None else ["Yes", "No", "Only in the dry season", "Not sure"],
            "reasoning": reasoning,
        }
    )


class FakeCompletionClient(CompletionClient):
    def __init__(self, content: Optional[str] = None, error: Optional[Exception] = None):
        self.content = content if content is not None else poll_json()
        self.error = error
        self.requests: List[CompletionRequest] = []

    def complete(self, request: CompletionRequest, trace_id: Optional[str] = None) -> CompletionResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return CompletionResponse(content=self.content, provider="fake", model=request.model)


class FailingAuditPollStore(InMemoryPollStore):
    def insert_audit(self, audit):
        raise RuntimeError("audit table unavailable")


def build_pipeline(
    signals: Iterable[Signal] = (),
    rows: Optional[Dict[str, Any]] = None,
    client: Optional[CompletionClient] = None,
    poll_store: Optional[InMemoryPollStore] = None,
    mode: WriteMode = WriteMode.INDEPENDENT,
    clock: Optional[FrozenClock] = None,
) -> GenerationPipeline:
    poll_store = poll_store if poll_store is not None else InMemoryPollStore()
    config_store = InMemoryRuntimeConfigStore(rows if rows is not None else config_rows())
    return GenerationPipeline(
        config_loader=RuntimeConfigLoader(config_store),
        quota_guard=QuotaGuard(poll_store, window_days=7),
        collector=SignalCollector(InMemorySignalStore(signals)),
        synthesizer=ContentSynthesizer(client or FakeCompletionClient()),
        writer=PollWriter(poll_store, mode=mode),
        clock=clock or FrozenClock(NOW),
    )
