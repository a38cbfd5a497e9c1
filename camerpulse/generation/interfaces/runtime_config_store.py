from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional


class RuntimeConfigStore(ABC):
    @abstractmethod
    def load_enabled(self) -> Dict[str, Any]:
        """Return `config_key -> config_value` for every enabled row."""

    @abstractmethod
    def upsert(self, key: str, value: Any, updated_by: Optional[str], updated_at: datetime) -> None:
        pass
