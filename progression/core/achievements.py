"""
Achievement Evaluator.

Achievements are static (id, predicate) pairs evaluated against a
ProgressState. Predicates only inspect fields that grow along a trajectory
(completed count, check-up presence), so once an achievement holds it keeps
holding and diffs never need to report lost badges.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from progression.core.state import ProgressState


@dataclass(frozen=True)
class Achievement:
    """An unlockable badge."""

    id: str
    title: str
    description: str
    predicate: Callable[[ProgressState], bool]

    def is_unlocked(self, state: ProgressState) -> bool:
        return bool(self.predicate(state))


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(
        id="first_step",
        title="First Step",
        description="You completed your first exercise. Keep going!",
        predicate=lambda state: state.completed_count >= 1,
    ),
    Achievement(
        id="five_completed",
        title="Steady Learner",
        description="You completed 5 exercises. Practice makes perfect.",
        predicate=lambda state: state.completed_count >= 5,
    ),
    Achievement(
        id="checkup_complete",
        title="Strategic Awareness",
        description="You completed the check-up and discovered your profile.",
        predicate=lambda state: state.has_checkup_profile,
    ),
)

_BY_ID = {a.id: a for a in ACHIEVEMENTS}


def get_achievement(achievement_id: str) -> Achievement | None:
    return _BY_ID.get(achievement_id)


def unlocked_ids(
    state: ProgressState, catalog: tuple[Achievement, ...] = ACHIEVEMENTS
) -> tuple[str, ...]:
    """Ids of every achievement whose predicate holds, in catalog order."""
    return tuple(a.id for a in catalog if a.is_unlocked(state))


def diff(
    before: ProgressState,
    after: ProgressState,
    catalog: tuple[Achievement, ...] = ACHIEVEMENTS,
) -> tuple[str, ...]:
    """
    Achievements unlocked by the transition ``before -> after``.

    Returns:
        Ids false on ``before`` and true on ``after``, in catalog order
    """
    already = set(unlocked_ids(before, catalog))
    return tuple(a.id for a in catalog if a.id not in already and a.is_unlocked(after))
