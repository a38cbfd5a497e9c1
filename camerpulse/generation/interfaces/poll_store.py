from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from camerpulse.generation.domain.audit import GenerationAudit
from camerpulse.generation.domain.poll import GeneratedPoll, PollSummary
from camerpulse.review.domain.poll_review import PollReview


class PollStore(ABC):
    @abstractmethod
    def count_audits_since(self, since: datetime) -> int:
        pass

    @abstractmethod
    def insert_poll(self, poll: GeneratedPoll) -> None:
        pass

    @abstractmethod
    def insert_audit(self, audit: GenerationAudit) -> None:
        pass

    @abstractmethod
    def insert_generation(
        self,
        poll: GeneratedPoll,
        audit: GenerationAudit,
        window_start: datetime,
        max_in_window: int,
    ) -> bool:
        """
        Recount the window and write poll + audit as one unit, serialised
        against concurrent callers. Returns False (and writes nothing) when
        the window is already full.
        """

    @abstractmethod
    def get_audit(self, audit_id: UUID) -> Optional[GenerationAudit]:
        pass

    @abstractmethod
    def get_poll_summary(self, poll_id: UUID) -> Optional[PollSummary]:
        pass

    @abstractmethod
    def recent_audits(self, limit: int) -> List[GenerationAudit]:
        pass

    @abstractmethod
    def get_review(self, audit_id: UUID) -> Optional[PollReview]:
        pass

    @abstractmethod
    def record_review(self, review: PollReview) -> bool:
        """
        Store the review and set the poll's activity to `review.approved`.
        Returns False when the audit already has a review.
        """
