from dataclasses import replace
from datetime import datetime
from threading import RLock
from typing import Dict, List, Optional
from uuid import UUID

from camerpulse.generation.domain.audit import GenerationAudit
from camerpulse.generation.domain.poll import GeneratedPoll, PollSummary
from camerpulse.generation.interfaces.poll_store import PollStore
from camerpulse.review.domain.poll_review import PollReview


class InMemoryPollStore(PollStore):
    def __init__(self):
        self.polls: Dict[UUID, GeneratedPoll] = {}
        self.audits: Dict[UUID, GenerationAudit] = {}
        self.reviews: Dict[UUID, PollReview] = {}
        self._lock = RLock()

    def count_audits_since(self, since: datetime) -> int:
        with self._lock:
            return sum(1 for a in self.audits.values() if a.created_at >= since)

    def insert_poll(self, poll: GeneratedPoll) -> None:
        with self._lock:
            if poll.id in self.polls:
                raise ValueError(f"Poll already exists: {poll.id}")
            self.polls[poll.id] = poll

    def insert_audit(self, audit: GenerationAudit) -> None:
        with self._lock:
            if audit.poll_id not in self.polls:
                raise ValueError(f"Audit references unknown poll: {audit.poll_id}")
            if audit.id in self.audits:
                raise ValueError(f"Audit already exists: {audit.id}")
            self.audits[audit.id] = audit

    def insert_generation(
        self,
        poll: GeneratedPoll,
        audit: GenerationAudit,
        window_start: datetime,
        max_in_window: int,
    ) -> bool:
        with self._lock:
            if self.count_audits_since(window_start) >= max_in_window:
                return False
            self.insert_poll(poll)
            try:
                self.insert_audit(audit)
            except Exception:
                del self.polls[poll.id]
                raise
            return True

    def get_audit(self, audit_id: UUID) -> Optional[GenerationAudit]:
        with self._lock:
            return self.audits.get(audit_id)

    def get_poll_summary(self, poll_id: UUID) -> Optional[PollSummary]:
        with self._lock:
            poll = self.polls.get(poll_id)
            if poll is None:
                return None
            return PollSummary(
                id=poll.id,
                title=poll.title,
                votes_count=poll.votes_count,
                is_active=poll.is_active,
            )

    def recent_audits(self, limit: int) -> List[GenerationAudit]:
        with self._lock:
            rows = sorted(self.audits.values(), key=lambda a: a.created_at, reverse=True)
        return rows[: max(0, limit)]

    def get_review(self, audit_id: UUID) -> Optional[PollReview]:
        with self._lock:
            return self.reviews.get(audit_id)

    def record_review(self, review: PollReview) -> bool:
        with self._lock:
            if review.audit_id in self.reviews:
                return False
            poll = self.polls.get(review.poll_id)
            if poll is not None:
                self.polls[poll.id] = replace(poll, is_active=review.approved)
            self.reviews[review.audit_id] = review
            return True
