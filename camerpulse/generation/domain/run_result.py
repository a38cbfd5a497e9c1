from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from camerpulse.generation.domain.audit import GenerationAudit
from camerpulse.generation.domain.poll import GeneratedPoll, SynthesizedPoll
from camerpulse.generation.domain.runtime_config import RegionalBoost


class RunStatus(Enum):
    GENERATED = "generated"
    DISABLED = "disabled"
    QUOTA_REACHED = "quota_reached"
    NO_SIGNAL = "no_signal"


DISABLED_MESSAGE = "Autonomous poll generation is disabled"
QUOTA_REACHED_MESSAGE = "Weekly poll generation limit reached"
NO_SIGNAL_MESSAGE = "No trending topics found above threshold"


@dataclass(frozen=True)
class PipelineRunResult:
    status: RunStatus
    message: str = ""
    poll: Optional[GeneratedPoll] = None
    audit: Optional[GenerationAudit] = None
    synthesis: Optional[SynthesizedPoll] = None
    audit_recorded: bool = False
    regional_boost: Optional[RegionalBoost] = None

    @property
    def generated(self) -> bool:
        return self.status == RunStatus.GENERATED

    def to_response(self) -> Dict[str, Any]:
        if not self.generated or self.poll is None or self.synthesis is None:
            return {"message": self.message}
        synthesis = self.synthesis
        return {
            "success": True,
            "poll": self.poll.to_public_dict(),
            "metadata": {
                "category": synthesis.signal.category,
                "style": synthesis.style.value,
                "confidence_score": synthesis.confidence_score,
                "auto_published": self.poll.is_active,
                "ai_reasoning": synthesis.reasoning,
                "trigger_topic": synthesis.signal.topic,
                "trigger_source": synthesis.signal.source.value,
                "audit_recorded": self.audit_recorded,
                "regional_boost": self.regional_boost.as_metadata() if self.regional_boost else None,
            },
        }
