from datetime import datetime
from threading import Lock
from typing import Iterable, List

from camerpulse.generation.domain.signal import Signal, SignalSource
from camerpulse.generation.interfaces.signal_store import SignalStore


class InMemorySignalStore(SignalStore):
    def __init__(self, signals: Iterable[Signal] = ()):
        self._signals: List[Signal] = list(signals)
        self._lock = Lock()

    def add(self, signal: Signal) -> None:
        with self._lock:
            self._signals.append(signal)

    def recent_complaints(self, since: datetime, min_strength: float, limit: int) -> List[Signal]:
        return self._query(SignalSource.COMPLAINT, since, min_strength, limit)

    def recent_sentiment_trends(self, since: datetime, min_strength: float, limit: int) -> List[Signal]:
        return self._query(SignalSource.SENTIMENT_TREND, since, min_strength, limit)

    def _query(self, source: SignalSource, since: datetime, min_strength: float, limit: int) -> List[Signal]:
        with self._lock:
            rows = [
                s for s in self._signals
                if s.source == source and s.observed_at >= since and s.strength >= min_strength
            ]
        # Two stable sorts: newest first, then strongest first.
        rows.sort(key=lambda s: s.observed_at, reverse=True)
        rows.sort(key=lambda s: s.strength, reverse=True)
        return rows[: max(0, limit)]
