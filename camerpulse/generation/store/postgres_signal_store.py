from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.engine import Engine

from camerpulse.generation.domain.signal import Signal, SignalSource
from camerpulse.generation.interfaces.signal_store import SignalStore
from camerpulse.infrastructure.persistence.database import as_utc
from camerpulse.infrastructure.persistence.tables import sentiment_trends, trending_complaints

# PostgreSQL sorts NaN above every number; this bound keeps NaN and inf rows out.
FINITE_CEILING = float("inf")


class PostgresSignalStore(SignalStore):
    def __init__(self, engine: Engine):
        self.engine = engine

    def recent_complaints(self, since: datetime, min_strength: float, limit: int) -> List[Signal]:
        t = trending_complaints
        query = (
            select(t.c.id, t.c.topic, t.c.category, t.c.region, t.c.trend_strength, t.c.created_at)
            .where(
                t.c.created_at >= since,
                t.c.trend_strength >= min_strength,
                t.c.trend_strength < FINITE_CEILING,
            )
            .order_by(t.c.trend_strength.desc(), t.c.created_at.desc())
            .limit(limit)
        )
        with self.engine.begin() as conn:
            rows = conn.execute(query).all()
        return [
            Signal(
                id=row.id,
                topic=row.topic,
                strength=float(row.trend_strength),
                source=SignalSource.COMPLAINT,
                category=row.category,
                region=row.region,
                observed_at=as_utc(row.created_at),
            )
            for row in rows
        ]

    def recent_sentiment_trends(self, since: datetime, min_strength: float, limit: int) -> List[Signal]:
        t = sentiment_trends
        query = (
            select(t.c.topic, t.c.topic_category, t.c.region, t.c.trend_strength, t.c.created_at)
            .where(
                t.c.created_at >= since,
                t.c.trend_strength >= min_strength,
                t.c.trend_strength < FINITE_CEILING,
            )
            .order_by(t.c.trend_strength.desc(), t.c.created_at.desc())
            .limit(limit)
        )
        with self.engine.begin() as conn:
            rows = conn.execute(query).all()
        return [
            Signal(
                id=None,
                topic=row.topic,
                strength=float(row.trend_strength),
                source=SignalSource.SENTIMENT_TREND,
                category=row.topic_category,
                region=row.region,
                observed_at=as_utc(row.created_at),
            )
            for row in rows
        ]
