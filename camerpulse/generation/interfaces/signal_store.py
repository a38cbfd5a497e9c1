from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from camerpulse.generation.domain.signal import Signal


class SignalStore(ABC):
    """
    Read-only view over the trending complaint and sentiment trend tables.
    Results are ordered strongest first, newest first among equals.
    """

    @abstractmethod
    def recent_complaints(self, since: datetime, min_strength: float, limit: int) -> List[Signal]:
        pass

    @abstractmethod
    def recent_sentiment_trends(self, since: datetime, min_strength: float, limit: int) -> List[Signal]:
        pass
