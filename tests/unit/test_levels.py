"""
Unit tests for ProficiencyLevel classification.
"""

import pytest

from progression.core.levels import (
    FORMAL_LEVELS,
    LevelTransition,
    ProficiencyLevel,
    level_transition,
)


class TestFromScore:
    """Tests for score -> level mapping."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (0, ProficiencyLevel.LOW_EFFECTIVENESS),
            (39, ProficiencyLevel.LOW_EFFECTIVENESS),
            (40, ProficiencyLevel.NEAR_EFFECTIVE),
            (69, ProficiencyLevel.NEAR_EFFECTIVE),
            (70, ProficiencyLevel.EFFECTIVE),
            (89, ProficiencyLevel.EFFECTIVE),
            (90, ProficiencyLevel.EFFECTIVE_STRATEGIC),
            (100, ProficiencyLevel.EFFECTIVE_STRATEGIC),
        ],
    )
    def test_thresholds(self, score, expected):
        assert ProficiencyLevel.from_score(score) is expected

    def test_not_started_is_beginner(self):
        assert ProficiencyLevel.from_score(0, started=False) is ProficiencyLevel.BEGINNER

    def test_started_with_zero_is_formal(self):
        """A learner who scored 0 on a real exercise is not a beginner."""
        assert ProficiencyLevel.from_score(0, started=True) is ProficiencyLevel.LOW_EFFECTIVENESS

    def test_negative_score_falls_to_lowest_formal_level(self):
        assert ProficiencyLevel.from_score(-5) is ProficiencyLevel.LOW_EFFECTIVENESS

    def test_monotonic_in_score(self):
        ranks = [ProficiencyLevel.from_score(s).rank for s in range(0, 101)]
        assert ranks == sorted(ranks)


class TestLevelProperties:
    """Tests for threshold, rank and display properties."""

    def test_beginner_below_every_threshold(self):
        assert all(
            ProficiencyLevel.BEGINNER.threshold < level.threshold for level in FORMAL_LEVELS
        )

    def test_ranks_follow_declaration_order(self):
        assert [level.rank for level in ProficiencyLevel] == [0, 1, 2, 3, 4]

    def test_values(self):
        assert ProficiencyLevel.EFFECTIVE_STRATEGIC.value == "effective & strategic"
        assert ProficiencyLevel("near-effective") is ProficiencyLevel.NEAR_EFFECTIVE

    def test_every_level_has_label_and_color(self):
        for level in ProficiencyLevel:
            assert level.label
            assert level.color


class TestTransition:
    """Tests for level change detection."""

    def test_same_level_is_no_transition(self):
        assert level_transition(ProficiencyLevel.EFFECTIVE, ProficiencyLevel.EFFECTIVE) is None

    def test_promotion(self):
        transition = level_transition(ProficiencyLevel.BEGINNER, ProficiencyLevel.NEAR_EFFECTIVE)
        assert transition == LevelTransition(
            previous=ProficiencyLevel.BEGINNER, current=ProficiencyLevel.NEAR_EFFECTIVE
        )
        assert transition.is_promotion

    def test_demotion_is_reported(self):
        transition = level_transition(ProficiencyLevel.EFFECTIVE, ProficiencyLevel.NEAR_EFFECTIVE)
        assert transition is not None
        assert not transition.is_promotion
