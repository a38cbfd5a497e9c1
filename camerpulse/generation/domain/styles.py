from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


def normalize_category(raw: Optional[str]) -> str:
    return str(raw or "").strip().lower()


class PollStyle(Enum):
    """Layouts the poll template renderer knows how to draw."""

    CARD = "card"
    BALLOT = "ballot"
    CHART = "chart"
    EMOJI = "emoji"
    RADAR = "radar"
    TIMER = "timer"
    COMPARISON = "comparison"
    HEATMAP = "heatmap"
    CAROUSEL = "carousel"
    VOICE = "voice"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["PollStyle"]:
        if not raw:
            return None
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class StyleMapping:
    """
    Category -> style lookup with an explicit default.

    Keys are normalized category strings as the signal producers store
    them (free-form, e.g. "general", "transport"); values are always a
    known PollStyle. Anything unmapped gets `default`.
    """

    default: PollStyle = PollStyle.CARD
    styles: Dict[str, PollStyle] = field(default_factory=dict)

    def resolve(self, category: Optional[str]) -> PollStyle:
        key = normalize_category(category)
        if not key:
            return self.default
        return self.styles.get(key, self.default)
