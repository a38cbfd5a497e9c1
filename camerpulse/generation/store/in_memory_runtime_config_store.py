import copy
from datetime import datetime
from threading import Lock
from typing import Any, Dict, Optional

from camerpulse.generation.interfaces.runtime_config_store import RuntimeConfigStore


class InMemoryRuntimeConfigStore(RuntimeConfigStore):
    def __init__(self, rows: Optional[Dict[str, Any]] = None):
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()
        for key, value in (rows or {}).items():
            self._rows[key] = {"value": value, "is_enabled": True, "updated_by": None, "updated_at": None}

    def load_enabled(self) -> Dict[str, Any]:
        with self._lock:
            return {
                key: copy.deepcopy(row["value"])
                for key, row in self._rows.items()
                if row["is_enabled"]
            }

    def upsert(self, key: str, value: Any, updated_by: Optional[str], updated_at: datetime) -> None:
        with self._lock:
            current = self._rows.get(key)
            self._rows[key] = {
                "value": copy.deepcopy(value),
                "is_enabled": current["is_enabled"] if current else True,
                "updated_by": updated_by,
                "updated_at": updated_at,
            }

    def set_enabled(self, key: str, enabled: bool) -> None:
        with self._lock:
            if key in self._rows:
                self._rows[key]["is_enabled"] = enabled
