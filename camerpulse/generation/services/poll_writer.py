import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Tuple
from uuid import uuid4

from camerpulse.core.logging.structured_event_logger import StructuredEventLogger
from camerpulse.generation.domain.audit import GENERATION_METHOD, GenerationAudit
from camerpulse.generation.domain.poll import GeneratedPoll, SynthesizedPoll
from camerpulse.generation.domain.runtime_config import RuntimeConfig
from camerpulse.generation.errors import PersistenceFailure
from camerpulse.generation.interfaces.poll_store import PollStore


class WriteMode(Enum):
    # Poll first, audit second, audit failure only logged.
    INDEPENDENT = "independent"
    # Quota recount + poll + audit in one locked transaction.
    TRANSACTIONAL = "transactional"


@dataclass(frozen=True)
class WriteOutcome:
    poll: Optional[GeneratedPoll]
    audit: Optional[GenerationAudit]
    audit_recorded: bool
    quota_refused: bool = False


class PollWriter:
    def __init__(
        self,
        store: PollStore,
        mode: WriteMode = WriteMode.INDEPENDENT,
        poll_duration_days: int = 7,
        logger: Optional[StructuredEventLogger] = None,
    ):
        self.store = store
        self.mode = mode
        self.poll_duration = timedelta(days=poll_duration_days)
        self.logger = logger or StructuredEventLogger()

    def build_records(
        self,
        synthesis: SynthesizedPoll,
        config: RuntimeConfig,
        now: datetime,
    ) -> Tuple[GeneratedPoll, GenerationAudit]:
        auto_published = config.should_auto_publish(synthesis.confidence_score)
        signal = synthesis.signal
        poll = GeneratedPoll(
            id=uuid4(),
            title=synthesis.question,
            description=synthesis.description,
            options=list(synthesis.options),
            style=synthesis.style,
            is_active=auto_published,
            ends_at=now + self.poll_duration,
            created_at=now,
        )
        audit = GenerationAudit(
            id=uuid4(),
            poll_id=poll.id,
            trigger_source_id=signal.id,
            trigger_source=signal.source,
            trigger_topic=signal.topic,
            topic_category=signal.category,
            generation_method=GENERATION_METHOD,
            confidence_score=synthesis.confidence_score,
            auto_published=auto_published,
            admin_approved=True if auto_published else None,
            generation_prompt=synthesis.prompt,
            ai_reasoning=synthesis.reasoning,
            created_at=now,
            metadata={
                "style": synthesis.style.value,
                "model": synthesis.model,
                "region": signal.region,
                "signal_strength": signal.strength,
                "regional_boost": config.regional_boost.as_metadata(),
                "topic_weight": config.topic_weights.get(signal.category),
                "frequency": config.frequency,
            },
        )
        return poll, audit

    def write(
        self,
        synthesis: SynthesizedPoll,
        config: RuntimeConfig,
        now: datetime,
        window_start: datetime,
    ) -> WriteOutcome:
        poll, audit = self.build_records(synthesis, config, now)
        if self.mode == WriteMode.TRANSACTIONAL:
            return self._write_transactional(poll, audit, window_start, config.max_per_week)
        return self._write_independent(poll, audit)

    def _write_independent(self, poll: GeneratedPoll, audit: GenerationAudit) -> WriteOutcome:
        try:
            self.store.insert_poll(poll)
        except Exception as exc:
            self.logger.emit("POLL_WRITE_FAILED", level=logging.ERROR, poll_id=poll.id, error=str(exc))
            raise PersistenceFailure(f"Poll insert failed: {exc}") from exc
        self.logger.emit("POLL_PERSISTED", poll_id=poll.id, is_active=poll.is_active)

        try:
            self.store.insert_audit(audit)
        except Exception as exc:
            # The poll stays; the missing audit row is reported, not hidden.
            self.logger.emit(
                "AUDIT_WRITE_FAILED",
                level=logging.ERROR,
                poll_id=poll.id,
                audit_id=audit.id,
                error=str(exc),
            )
            return WriteOutcome(poll=poll, audit=None, audit_recorded=False)
        return WriteOutcome(poll=poll, audit=audit, audit_recorded=True)

    def _write_transactional(
        self,
        poll: GeneratedPoll,
        audit: GenerationAudit,
        window_start: datetime,
        max_in_window: int,
    ) -> WriteOutcome:
        try:
            written = self.store.insert_generation(poll, audit, window_start, max_in_window)
        except Exception as exc:
            self.logger.emit(
                "GENERATION_WRITE_FAILED",
                level=logging.ERROR,
                poll_id=poll.id,
                audit_id=audit.id,
                error=str(exc),
            )
            raise PersistenceFailure(f"Generation write failed: {exc}") from exc
        if not written:
            return WriteOutcome(poll=None, audit=None, audit_recorded=False, quota_refused=True)
        self.logger.emit("POLL_PERSISTED", poll_id=poll.id, is_active=poll.is_active, audit_id=audit.id)
        return WriteOutcome(poll=poll, audit=audit, audit_recorded=True)
