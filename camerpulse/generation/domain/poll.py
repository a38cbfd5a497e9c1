from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from camerpulse.generation.domain.signal import Signal
from camerpulse.generation.domain.styles import PollStyle


@dataclass(frozen=True)
class SynthesizedPoll:
    """Output of the synthesizer, not yet persisted."""

    signal: Signal
    question: str
    description: str
    options: List[str]
    reasoning: str
    style: PollStyle
    confidence_score: float
    prompt: str
    model: str


@dataclass(frozen=True)
class GeneratedPoll:
    id: UUID
    title: str
    description: str
    options: List[str]
    style: PollStyle
    is_active: bool
    ends_at: datetime
    created_at: datetime
    creator_id: Optional[str] = None
    votes_count: int = 0

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "options": list(self.options),
            "style": self.style.value,
            "is_active": self.is_active,
            "ends_at": self.ends_at.isoformat(),
        }


@dataclass(frozen=True)
class PollSummary:
    """Poll columns shown next to an audit record in the admin console."""

    id: UUID
    title: str
    votes_count: int
    is_active: bool
