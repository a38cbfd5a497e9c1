import math
from datetime import datetime, timedelta
from typing import List

from camerpulse.generation.domain.signal import CollectedSignals, Signal
from camerpulse.generation.interfaces.signal_store import SignalStore


class SignalCollector:
    def __init__(
        self,
        store: SignalStore,
        lookback_days: int = 7,
        complaint_limit: int = 5,
        sentiment_limit: int = 10,
    ):
        self.store = store
        self.lookback = timedelta(days=lookback_days)
        self.complaint_limit = complaint_limit
        self.sentiment_limit = sentiment_limit

    def collect(self, now: datetime, threshold: float) -> CollectedSignals:
        since = now - self.lookback
        return CollectedSignals(
            complaints=_finite(self.store.recent_complaints(since, threshold, self.complaint_limit)),
            sentiment_trends=_finite(
                self.store.recent_sentiment_trends(since, threshold, self.sentiment_limit)
            ),
        )


def _finite(signals: List[Signal]) -> List[Signal]:
    # NaN/inf strengths would otherwise outrank every real signal.
    return [s for s in signals if math.isfinite(s.strength)]
