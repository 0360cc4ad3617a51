"""
Level Classifier.

Maps the 0-100 proficiency score onto ordered communicator levels:

    0  -> low-effectiveness
    40 -> near-effective
    70 -> effective
    90 -> effective & strategic

A learner who has not completed anything yet is a "beginner", which sits
below every formal threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProficiencyLevel(str, Enum):
    """Communicator level derived from the overall score."""

    BEGINNER = "beginner"
    LOW_EFFECTIVENESS = "low-effectiveness"
    NEAR_EFFECTIVE = "near-effective"
    EFFECTIVE = "effective"
    EFFECTIVE_STRATEGIC = "effective & strategic"

    @classmethod
    def from_score(cls, score: float, started: bool = True) -> ProficiencyLevel:
        """
        Convert a 0-100 score to a level.

        Args:
            score: Overall proficiency score
            started: False when the learner has no completed exercise;
                a zero score then maps to BEGINNER

        Returns:
            Level of the highest threshold <= score
        """
        if not started and score <= 0:
            return cls.BEGINNER
        for level in reversed(FORMAL_LEVELS):
            if score >= level.threshold:
                return level
        return cls.LOW_EFFECTIVENESS

    @property
    def threshold(self) -> int:
        """Minimum score for the level (-1 for BEGINNER)."""
        return _THRESHOLDS[self]

    @property
    def rank(self) -> int:
        return list(ProficiencyLevel).index(self)

    @property
    def label(self) -> str:
        """Display label."""
        return {
            ProficiencyLevel.BEGINNER: "Start your journey",
            ProficiencyLevel.LOW_EFFECTIVENESS: "Low-effectiveness communicator",
            ProficiencyLevel.NEAR_EFFECTIVE: "Nearly effective communicator",
            ProficiencyLevel.EFFECTIVE: "Effective communicator",
            ProficiencyLevel.EFFECTIVE_STRATEGIC: "Effective & strategic communicator",
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            ProficiencyLevel.BEGINNER: "dim",
            ProficiencyLevel.LOW_EFFECTIVENESS: "red",
            ProficiencyLevel.NEAR_EFFECTIVE: "yellow",
            ProficiencyLevel.EFFECTIVE: "cyan",
            ProficiencyLevel.EFFECTIVE_STRATEGIC: "green",
        }[self]


_THRESHOLDS = {
    ProficiencyLevel.BEGINNER: -1,
    ProficiencyLevel.LOW_EFFECTIVENESS: 0,
    ProficiencyLevel.NEAR_EFFECTIVE: 40,
    ProficiencyLevel.EFFECTIVE: 70,
    ProficiencyLevel.EFFECTIVE_STRATEGIC: 90,
}

FORMAL_LEVELS: tuple[ProficiencyLevel, ...] = (
    ProficiencyLevel.LOW_EFFECTIVENESS,
    ProficiencyLevel.NEAR_EFFECTIVE,
    ProficiencyLevel.EFFECTIVE,
    ProficiencyLevel.EFFECTIVE_STRATEGIC,
)


@dataclass(frozen=True)
class LevelTransition:
    """A change of level caused by a single state transition."""

    previous: ProficiencyLevel
    current: ProficiencyLevel

    @property
    def is_promotion(self) -> bool:
        return self.current.rank > self.previous.rank


def level_transition(
    previous: ProficiencyLevel, current: ProficiencyLevel
) -> LevelTransition | None:
    """Transition between two levels, or None when the label did not change."""
    if previous is current:
        return None
    return LevelTransition(previous=previous, current=current)
