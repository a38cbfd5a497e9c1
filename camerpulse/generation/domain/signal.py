from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID


class SignalSource(Enum):
    COMPLAINT = "complaint"
    SENTIMENT_TREND = "sentiment_trend"


# Lower rank wins when strengths tie.
SOURCE_PRIORITY = {
    SignalSource.COMPLAINT: 0,
    SignalSource.SENTIMENT_TREND: 1,
}


@dataclass(frozen=True)
class Signal:
    id: Optional[UUID]
    topic: str
    strength: float
    source: SignalSource
    category: str
    region: Optional[str]
    observed_at: datetime


@dataclass(frozen=True)
class CollectedSignals:
    complaints: List[Signal] = field(default_factory=list)
    sentiment_trends: List[Signal] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.complaints and not self.sentiment_trends

    def all(self) -> List[Signal]:
        return list(self.complaints) + list(self.sentiment_trends)
