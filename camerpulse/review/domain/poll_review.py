from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from camerpulse.generation.domain.audit import GenerationAudit
from camerpulse.generation.domain.poll import PollSummary


@dataclass(frozen=True)
class PollReview:
    id: UUID
    audit_id: UUID
    poll_id: UUID
    approved: bool
    reviewer: str
    reason: str
    reviewed_at: datetime


@dataclass(frozen=True)
class ReviewedGeneration:
    """One row of the admin console's recent generations list."""

    audit: GenerationAudit
    poll: Optional[PollSummary]
    review: Optional[PollReview]

    @property
    def approval_state(self) -> Optional[bool]:
        if self.review is not None:
            return self.review.approved
        return self.audit.admin_approved

    def to_dict(self):
        audit = self.audit
        return {
            "id": str(audit.id),
            "poll_id": str(audit.poll_id),
            "topic_category": audit.topic_category,
            "trigger_topic": audit.trigger_topic,
            "trigger_source": audit.trigger_source.value,
            "confidence_score": audit.confidence_score,
            "auto_published": audit.auto_published,
            "admin_approved": self.approval_state,
            "created_at": audit.created_at.isoformat(),
            "poll": None if self.poll is None else {
                "title": self.poll.title,
                "votes_count": self.poll.votes_count,
                "is_active": self.poll.is_active,
            },
            "review": None if self.review is None else {
                "approved": self.review.approved,
                "reviewer": self.review.reviewer,
                "reason": self.review.reason,
                "reviewed_at": self.review.reviewed_at.isoformat(),
            },
        }
