from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from camerpulse.core.logging.structured_event_logger import StructuredEventLogger
from camerpulse.core.time.clock import Clock, SystemClock
from camerpulse.generation.domain.runtime_config import KNOWN_CONFIG_KEYS
from camerpulse.generation.interfaces.poll_store import PollStore
from camerpulse.generation.interfaces.runtime_config_store import RuntimeConfigStore
from camerpulse.review.domain.poll_review import PollReview, ReviewedGeneration
from camerpulse.review.errors import ConfigKeyRejected, ReviewConflict, ReviewNotFound


class PollReviewService:
    """
    Admin-side operations over generated polls: list, approve, reject,
    and edit the runtime configuration the pipeline reads.
    """

    def __init__(
        self,
        poll_store: PollStore,
        config_store: RuntimeConfigStore,
        clock: Optional[Clock] = None,
        logger: Optional[StructuredEventLogger] = None,
    ):
        self.poll_store = poll_store
        self.config_store = config_store
        self.clock = clock or SystemClock()
        self.logger = logger or StructuredEventLogger()

    def list_recent(self, limit: int = 10) -> List[ReviewedGeneration]:
        items = []
        for audit in self.poll_store.recent_audits(max(1, min(limit, 100))):
            items.append(
                ReviewedGeneration(
                    audit=audit,
                    poll=self.poll_store.get_poll_summary(audit.poll_id),
                    review=self.poll_store.get_review(audit.id),
                )
            )
        return items

    def approve(self, audit_id: UUID, reviewer: str, reason: str = "") -> PollReview:
        return self._review(audit_id, True, reviewer, reason)

    def reject(self, audit_id: UUID, reviewer: str, reason: str = "") -> PollReview:
        return self._review(audit_id, False, reviewer, reason)

    def _review(self, audit_id: UUID, approved: bool, reviewer: str, reason: str) -> PollReview:
        audit = self.poll_store.get_audit(audit_id)
        if audit is None:
            raise ReviewNotFound(f"Generated poll not found: {audit_id}")

        review = PollReview(
            id=uuid4(),
            audit_id=audit.id,
            poll_id=audit.poll_id,
            approved=approved,
            reviewer=reviewer,
            reason=reason,
            reviewed_at=self.clock.now(),
        )
        if not self.poll_store.record_review(review):
            raise ReviewConflict(f"Generated poll already reviewed: {audit_id}")

        self.logger.emit(
            "POLL_REVIEWED",
            audit_id=audit.id,
            poll_id=audit.poll_id,
            approved=approved,
            reviewer=reviewer,
        )
        return review

    def get_config(self) -> Dict[str, Any]:
        return self.config_store.load_enabled()

    def update_config(self, key: str, value: Any, actor: str) -> None:
        if key not in KNOWN_CONFIG_KEYS:
            raise ConfigKeyRejected(f"Unknown config key: {key}")
        if not isinstance(value, dict):
            raise ConfigKeyRejected(f"Config value for {key} must be an object")
        self.config_store.upsert(key, value, updated_by=actor, updated_at=self.clock.now())
        self.logger.emit("CONFIG_UPDATED", key=key, actor=actor)
