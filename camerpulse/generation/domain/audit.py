from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from camerpulse.generation.domain.signal import SignalSource

GENERATION_METHOD = "ai_trending_analysis"


@dataclass(frozen=True)
class GenerationAudit:
    """
    Provenance of one generated poll. Written once, never updated;
    reviews live in their own table.
    """

    id: UUID
    poll_id: UUID
    trigger_source_id: Optional[UUID]
    trigger_source: SignalSource
    trigger_topic: str
    topic_category: str
    generation_method: str
    confidence_score: float
    auto_published: bool
    admin_approved: Optional[bool]
    generation_prompt: str
    ai_reasoning: str
    created_at: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)
