import logging
from typing import Optional
from uuid import uuid4

from camerpulse.core.logging.structured_event_logger import StructuredEventLogger
from camerpulse.core.time.clock import Clock, SystemClock
from camerpulse.generation.domain.run_result import (
    DISABLED_MESSAGE,
    NO_SIGNAL_MESSAGE,
    QUOTA_REACHED_MESSAGE,
    PipelineRunResult,
    RunStatus,
)
from camerpulse.generation.errors import PipelineError
from camerpulse.generation.services.content_synthesizer import ContentSynthesizer, select_signal
from camerpulse.generation.services.poll_writer import PollWriter
from camerpulse.generation.services.quota_guard import QuotaGuard
from camerpulse.generation.services.runtime_config_loader import RuntimeConfigLoader
from camerpulse.generation.services.signal_collector import SignalCollector


class GenerationPipeline:
    """
    One stateless run: config -> kill switch -> quota -> signals ->
    synthesis -> poll + audit writes.

    Terminal states (disabled, quota reached, no signal) come back as
    results. Fatal failures raise PipelineError subclasses after logging.
    """

    def __init__(
        self,
        config_loader: RuntimeConfigLoader,
        quota_guard: QuotaGuard,
        collector: SignalCollector,
        synthesizer: ContentSynthesizer,
        writer: PollWriter,
        clock: Optional[Clock] = None,
        logger: Optional[StructuredEventLogger] = None,
    ):
        self.config_loader = config_loader
        self.quota_guard = quota_guard
        self.collector = collector
        self.synthesizer = synthesizer
        self.writer = writer
        self.clock = clock or SystemClock()
        self.logger = logger or StructuredEventLogger()

    def run(self, trigger: str = "http") -> PipelineRunResult:
        run_id = str(uuid4())
        self.logger.emit("PIPELINE_STARTED", run_id=run_id, trigger=trigger)
        try:
            return self._run(run_id)
        except PipelineError as exc:
            self.logger.emit(
                "PIPELINE_FAILED",
                level=logging.ERROR,
                run_id=run_id,
                error_type=exc.__class__.__name__,
                error=str(exc),
            )
            raise

    def _run(self, run_id: str) -> PipelineRunResult:
        config = self.config_loader.load()
        if not config.enabled:
            self.logger.emit("PIPELINE_DISABLED", run_id=run_id)
            return PipelineRunResult(status=RunStatus.DISABLED, message=DISABLED_MESSAGE)

        now = self.clock.now()
        quota = self.quota_guard.check(now, config.max_per_week)
        if not quota.allowed:
            self.logger.emit("QUOTA_REACHED", run_id=run_id, count=quota.count, limit=quota.limit)
            return PipelineRunResult(status=RunStatus.QUOTA_REACHED, message=QUOTA_REACHED_MESSAGE)

        collected = self.collector.collect(now, config.trending_threshold)
        signal = select_signal(collected)
        if signal is None:
            self.logger.emit("NO_SIGNAL", run_id=run_id, threshold=config.trending_threshold)
            return PipelineRunResult(status=RunStatus.NO_SIGNAL, message=NO_SIGNAL_MESSAGE)

        self.logger.emit(
            "SIGNAL_SELECTED",
            run_id=run_id,
            source=signal.source.value,
            signal_id=signal.id,
            topic=signal.topic,
            strength=signal.strength,
            complaints=len(collected.complaints),
            sentiment_trends=len(collected.sentiment_trends),
        )

        synthesis = self.synthesizer.synthesize(signal, config, trace_id=run_id)
        outcome = self.writer.write(synthesis, config, now, quota.window_start)
        if outcome.quota_refused:
            self.logger.emit("QUOTA_REACHED", run_id=run_id, limit=config.max_per_week, stage="write")
            return PipelineRunResult(status=RunStatus.QUOTA_REACHED, message=QUOTA_REACHED_MESSAGE)

        self.logger.emit(
            "PIPELINE_COMPLETED",
            run_id=run_id,
            poll_id=outcome.poll.id,
            confidence_score=synthesis.confidence_score,
            auto_published=outcome.poll.is_active,
            audit_recorded=outcome.audit_recorded,
        )
        return PipelineRunResult(
            status=RunStatus.GENERATED,
            message="Poll generated",
            poll=outcome.poll,
            audit=outcome.audit,
            synthesis=synthesis,
            audit_recorded=outcome.audit_recorded,
            regional_boost=config.regional_boost,
        )
