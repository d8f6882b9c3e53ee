from typing import Tuple

from judging.models.summary import Tier

# Thresholds as published for the 0-20 scale (5 questions x 0-4).
REFERENCE_MAX_TOTAL = 20
TIER_THRESHOLDS: Tuple[Tuple[str, float], ...] = (
    ("Agentic Ace", 16),
    ("Cognitive Crafter", 11),
    ("Neural Novice", 6),
    ("Booting Bot", float("-inf")),
)


class TierClassifier:
    """Maps an averaged total score onto a named AI-proficiency tier.

    Thresholds are defined on the 0-20 scale and rescaled proportionally
    for score models with a different cumulative maximum (for example
    16/20 of 39 for the AI tools model).
    """

    def __init__(self, max_total: int = REFERENCE_MAX_TOTAL):
        if max_total <= 0:
            raise ValueError("max_total must be positive")
        self.max_total = max_total
        scale = max_total / REFERENCE_MAX_TOTAL
        count = len(TIER_THRESHOLDS)
        self.tiers: Tuple[Tier, ...] = tuple(
            Tier(name=name, rank=count - i, min_score=threshold * scale)
            for i, (name, threshold) in enumerate(TIER_THRESHOLDS)
        )

    @property
    def tier_names(self) -> Tuple[str, ...]:
        """Tier names, highest tier first."""
        return tuple(t.name for t in self.tiers)

    def classify(self, total_score_average: float) -> Tier:
        for tier in self.tiers:
            if total_score_average >= tier.min_score:
                return tier
        # NaN compares false against every threshold
        return self.tiers[-1]


default_classifier = TierClassifier()


def classify(total_score_average: float) -> Tier:
    """Classifies on the default 0-20 scale."""
    return default_classifier.classify(total_score_average)
