import math

BASE_CONFIDENCE = 0.5
STRENGTH_WEIGHT = 0.3
OPTIONS_BONUS = 0.1
REASONING_BONUS = 0.1
MAX_CONFIDENCE = 0.9
RICH_OPTION_COUNT = 4


def compute_confidence(strength: float, option_count: int, reasoning: str) -> float:
    """
    Bounded weighted score in [0.5, 0.9]. A non-finite strength counts as 0.

    Signal strength contributes up to 0.3; four or more options and a
    non-empty reasoning string add 0.1 each.
    """
    value = float(strength)
    if not math.isfinite(value):
        value = 0.0
    clamped = min(max(value, 0.0), 1.0)
    score = BASE_CONFIDENCE + STRENGTH_WEIGHT * clamped
    if option_count >= RICH_OPTION_COUNT:
        score += OPTIONS_BONUS
    if reasoning and reasoning.strip():
        score += REASONING_BONUS
    return round(min(score, MAX_CONFIDENCE), 4)
