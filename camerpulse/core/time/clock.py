from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """
    Source of "now" for the pipeline.
    Every timestamp handed out is UTC-aware.
    """

    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock(Clock):
    """
    Test clock. Time only moves when told to.
    """

    def __init__(self, start: datetime):
        if start.tzinfo is None:
            raise ValueError("FrozenClock requires a timezone-aware datetime")
        self._current = start

    def now(self) -> datetime:
        return self._current
