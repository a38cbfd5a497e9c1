from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.engine import Engine

from camerpulse.generation.interfaces.runtime_config_store import RuntimeConfigStore
from camerpulse.infrastructure.persistence.tables import autonomous_poll_config


class PostgresRuntimeConfigStore(RuntimeConfigStore):
    def __init__(self, engine: Engine):
        self.engine = engine

    def load_enabled(self) -> Dict[str, Any]:
        t = autonomous_poll_config
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(t.c.config_key, t.c.config_value).where(t.c.is_enabled.is_(True))
            ).all()
        return {row.config_key: row.config_value for row in rows}

    def upsert(self, key: str, value: Any, updated_by: Optional[str], updated_at: datetime) -> None:
        t = autonomous_poll_config
        # Portable upsert: update first, insert when nothing matched.
        with self.engine.begin() as conn:
            result = conn.execute(
                update(t)
                .where(t.c.config_key == key)
                .values(config_value=value, updated_by=updated_by, updated_at=updated_at)
            )
            if result.rowcount == 0:
                conn.execute(
                    t.insert().values(
                        config_key=key,
                        config_value=value,
                        is_enabled=True,
                        updated_by=updated_by,
                        updated_at=updated_at,
                    )
                )
