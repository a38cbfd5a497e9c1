from datetime import datetime
from threading import Lock
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select, text, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from camerpulse.generation.domain.audit import GenerationAudit
from camerpulse.generation.domain.poll import GeneratedPoll, PollSummary
from camerpulse.generation.domain.signal import SignalSource
from camerpulse.generation.interfaces.poll_store import PollStore
from camerpulse.infrastructure.persistence.database import as_utc
from camerpulse.infrastructure.persistence.tables import autonomous_poll_reviews, autonomous_polls, polls
from camerpulse.review.domain.poll_review import PollReview

# Key for pg_advisory_xact_lock; any constant shared by all writers works.
GENERATION_LOCK_KEY = 0x43504741


class PostgresPollStore(PollStore):
    def __init__(self, engine: Engine):
        self.engine = engine
        # Used instead of the advisory lock on dialects without one.
        self._local_lock = Lock()

    def count_audits_since(self, since: datetime) -> int:
        with self.engine.begin() as conn:
            return self._count_since(conn, since)

    def insert_poll(self, poll: GeneratedPoll) -> None:
        with self.engine.begin() as conn:
            self._insert_poll(conn, poll)

    def insert_audit(self, audit: GenerationAudit) -> None:
        with self.engine.begin() as conn:
            self._insert_audit(conn, audit)

    def insert_generation(
        self,
        poll: GeneratedPoll,
        audit: GenerationAudit,
        window_start: datetime,
        max_in_window: int,
    ) -> bool:
        if self.engine.dialect.name == "postgresql":
            return self._insert_generation_locked(poll, audit, window_start, max_in_window)
        with self._local_lock:
            return self._insert_generation_locked(poll, audit, window_start, max_in_window)

    def _insert_generation_locked(
        self,
        poll: GeneratedPoll,
        audit: GenerationAudit,
        window_start: datetime,
        max_in_window: int,
    ) -> bool:
        with self.engine.begin() as conn:
            if conn.dialect.name == "postgresql":
                conn.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": GENERATION_LOCK_KEY})
            if self._count_since(conn, window_start) >= max_in_window:
                return False
            self._insert_poll(conn, poll)
            self._insert_audit(conn, audit)
        return True

    def get_audit(self, audit_id: UUID) -> Optional[GenerationAudit]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(autonomous_polls).where(autonomous_polls.c.id == audit_id)
            ).first()
        return self._audit_from_row(row) if row else None

    def get_poll_summary(self, poll_id: UUID) -> Optional[PollSummary]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(polls.c.id, polls.c.title, polls.c.votes_count, polls.c.is_active)
                .where(polls.c.id == poll_id)
            ).first()
        if not row:
            return None
        return PollSummary(
            id=row.id,
            title=row.title,
            votes_count=int(row.votes_count or 0),
            is_active=bool(row.is_active),
        )

    def recent_audits(self, limit: int) -> List[GenerationAudit]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(autonomous_polls)
                .order_by(autonomous_polls.c.created_at.desc())
                .limit(limit)
            ).all()
        return [self._audit_from_row(row) for row in rows]

    def get_review(self, audit_id: UUID) -> Optional[PollReview]:
        t = autonomous_poll_reviews
        with self.engine.begin() as conn:
            row = conn.execute(select(t).where(t.c.audit_id == audit_id)).first()
        if not row:
            return None
        return PollReview(
            id=row.id,
            audit_id=row.audit_id,
            poll_id=row.poll_id,
            approved=bool(row.approved),
            reviewer=row.reviewer,
            reason=row.reason or "",
            reviewed_at=as_utc(row.reviewed_at),
        )

    def record_review(self, review: PollReview) -> bool:
        t = autonomous_poll_reviews
        try:
            with self.engine.begin() as conn:
                existing = conn.execute(select(t.c.id).where(t.c.audit_id == review.audit_id)).first()
                if existing:
                    return False
                conn.execute(
                    t.insert().values(
                        id=review.id,
                        audit_id=review.audit_id,
                        poll_id=review.poll_id,
                        approved=review.approved,
                        reviewer=review.reviewer,
                        reason=review.reason,
                        reviewed_at=review.reviewed_at,
                    )
                )
                conn.execute(
                    update(polls).where(polls.c.id == review.poll_id).values(is_active=review.approved)
                )
        except IntegrityError:
            # A concurrent reviewer won the unique(audit_id) race.
            return False
        return True

    def _count_since(self, conn: Connection, since: datetime) -> int:
        return int(
            conn.execute(
                select(func.count()).select_from(autonomous_polls).where(autonomous_polls.c.created_at >= since)
            ).scalar_one()
        )

    def _insert_poll(self, conn: Connection, poll: GeneratedPoll) -> None:
        conn.execute(
            polls.insert().values(
                id=poll.id,
                title=poll.title,
                description=poll.description,
                options=list(poll.options),
                poll_style=poll.style.value,
                creator_id=poll.creator_id,
                is_active=poll.is_active,
                votes_count=poll.votes_count,
                ends_at=poll.ends_at,
                created_at=poll.created_at,
            )
        )

    def _insert_audit(self, conn: Connection, audit: GenerationAudit) -> None:
        conn.execute(
            autonomous_polls.insert().values(
                id=audit.id,
                poll_id=audit.poll_id,
                trigger_source_id=audit.trigger_source_id,
                trigger_source=audit.trigger_source.value,
                trigger_topic=audit.trigger_topic,
                topic_category=audit.topic_category,
                generation_method=audit.generation_method,
                confidence_score=audit.confidence_score,
                auto_published=audit.auto_published,
                admin_approved=audit.admin_approved,
                generation_prompt=audit.generation_prompt,
                ai_reasoning=audit.ai_reasoning,
                metadata_json=dict(audit.metadata),
                created_at=audit.created_at,
            )
        )

    def _audit_from_row(self, row) -> GenerationAudit:
        return GenerationAudit(
            id=row.id,
            poll_id=row.poll_id,
            trigger_source_id=row.trigger_source_id,
            trigger_source=SignalSource(row.trigger_source),
            trigger_topic=row.trigger_topic,
            topic_category=row.topic_category,
            generation_method=row.generation_method,
            confidence_score=float(row.confidence_score),
            auto_published=bool(row.auto_published),
            admin_approved=row.admin_approved,
            generation_prompt=row.generation_prompt,
            ai_reasoning=row.ai_reasoning or "",
            created_at=as_utc(row.created_at),
            metadata=dict(row.metadata_json or {}),
        )
