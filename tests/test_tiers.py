"""Tests for tier classification."""

import math

import pytest

from judging.scoring.tiers import TierClassifier, classify


class TestDefaultScale:
    """Thresholds on the 0-20 scale."""

    @pytest.mark.parametrize(
        "score, expected",
        [
            (20, "Agentic Ace"),
            (16, "Agentic Ace"),
            (15.9, "Cognitive Crafter"),
            (15.0, "Cognitive Crafter"),
            (11, "Cognitive Crafter"),
            (10.9, "Neural Novice"),
            (6, "Neural Novice"),
            (5.9, "Booting Bot"),
            (0, "Booting Bot"),
        ],
    )
    def test_boundaries(self, score: float, expected: str) -> None:
        assert classify(score).name == expected

    def test_ranks(self) -> None:
        assert classify(18).rank == 4
        assert classify(12).rank == 3
        assert classify(7).rank == 2
        assert classify(1).rank == 1

    def test_nan_is_lowest_tier(self) -> None:
        assert classify(math.nan).name == "Booting Bot"

    def test_monotonic(self) -> None:
        ranks = [classify(step / 10).rank for step in range(0, 201)]
        assert ranks == sorted(ranks)


class TestScaledThresholds:
    """Thresholds rescale to the score model's cumulative maximum."""

    def test_tier_names_highest_first(self) -> None:
        assert TierClassifier().tier_names == (
            "Agentic Ace",
            "Cognitive Crafter",
            "Neural Novice",
            "Booting Bot",
        )

    def test_ai_tools_scale(self) -> None:
        classifier = TierClassifier(39)
        assert classifier.tiers[0].min_score == pytest.approx(31.2)
        assert classifier.classify(31.2).name == "Agentic Ace"
        assert classifier.classify(31.1).name == "Cognitive Crafter"
        assert classifier.classify(16).name == "Neural Novice"

    def test_max_total_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            TierClassifier(0)
