from dataclasses import dataclass, field
from typing import Any, Dict

from camerpulse.generation.domain.styles import StyleMapping

KNOWN_CONFIG_KEYS = (
    "system_enabled",
    "sentiment_thresholds",
    "generation_schedule",
    "style_mapping",
    "auto_publish",
    "regional_boost",
    "topic_weights",
    "social_monitoring",
)


@dataclass(frozen=True)
class RegionalBoost:
    enabled: bool = False
    boost_factor: float = 1.0
    affected_regions_only: bool = False

    def as_metadata(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "boost_factor": self.boost_factor,
            "affected_regions_only": self.affected_regions_only,
        }


@dataclass(frozen=True)
class RuntimeConfig:
    """
    Snapshot of the `autonomous_poll_config` table for one run.
    """

    enabled: bool = False
    trending_threshold: float = 0.7
    frequency: str = "daily"
    max_per_week: int = 2
    min_confidence: float = 0.7
    auto_publish_enabled: bool = False
    require_admin_approval: bool = True
    style_mapping: StyleMapping = field(default_factory=StyleMapping)
    regional_boost: RegionalBoost = field(default_factory=RegionalBoost)
    topic_weights: Dict[str, float] = field(default_factory=dict)

    def should_auto_publish(self, confidence: float) -> bool:
        if not self.auto_publish_enabled or self.require_admin_approval:
            return False
        return confidence >= self.min_confidence
