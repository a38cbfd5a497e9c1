from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from camerpulse.infrastructure.persistence.tables import metadata


def create_db_engine(url: str) -> Engine:
    return create_engine(url, pool_pre_ping=True, future=True)


def init_schema(engine: Engine) -> None:
    metadata.create_all(bind=engine)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Some drivers hand back naive timestamps for TIMESTAMPTZ columns.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
