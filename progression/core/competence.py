"""
Competence Catalog.

Static vocabulary shared by every progression component:
- CompetenceKey: the four fixed communication competences
- Modality: written vs verbal exercises
- TrainingModule: a module of the coaching path and its exercises
- EXERCISE_COMPETENCE_MAP: which competence an exercise trains

The catalog is immutable. Exercise ids that are not listed here (custom
exercises, generated scenarios) have no competence and never touch the ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class CompetenceKey(str, Enum):
    """
    The four competences tracked by the ledger.

    Values are the keys used in persisted progress documents.
    """

    LISTENING = "ascolto"
    REFORMULATION = "riformulazione"
    ASSERTIVENESS = "assertivita"
    CONFLICT_MANAGEMENT = "gestione_conflitto"

    @classmethod
    def parse(cls, value: str | CompetenceKey | None) -> CompetenceKey | None:
        """Return the matching key, or None for unknown values."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return {
            CompetenceKey.LISTENING: "Listening",
            CompetenceKey.REFORMULATION: "Reformulation",
            CompetenceKey.ASSERTIVENESS: "Assertiveness",
            CompetenceKey.CONFLICT_MANAGEMENT: "Conflict management",
        }[self]


class Modality(str, Enum):
    """How the learner answered an exercise."""

    WRITTEN = "written"
    VERBAL = "verbal"


@dataclass(frozen=True)
class TrainingModule:
    """A module of the coaching path."""

    id: str
    title: str
    exercise_ids: tuple[str, ...] = ()
    is_custom: bool = False

    @property
    def is_eligible(self) -> bool:
        """Custom modules generate exercises on the fly and never count for coverage."""
        return not self.is_custom

    def contains(self, exercise_id: str) -> bool:
        return exercise_id in self.exercise_ids


MODULES: tuple[TrainingModule, ...] = (
    TrainingModule("m4", "Strategic Active Listening", ("e10", "e11", "e12")),
    TrainingModule("m1", "Giving Effective Feedback", ("e1", "e2", "e7")),
    TrainingModule(
        "m2",
        "Handling Difficult Conversations",
        ("e3", "e4", "e8", "e13", "e14", "e15"),
    ),
    TrainingModule("m3", "Mastering the Art of Questions", ("e5", "e6", "e9", "e16")),
    TrainingModule("m5", "Strategic Voice (Paraverbal)", ("v1", "v2", "v3")),
    TrainingModule("m6", "Personalised Training", is_custom=True),
    TrainingModule("m7", "Strategic Chat Trainer", is_custom=True),
)

_L = CompetenceKey.LISTENING
_R = CompetenceKey.REFORMULATION
_A = CompetenceKey.ASSERTIVENESS
_C = CompetenceKey.CONFLICT_MANAGEMENT

EXERCISE_COMPETENCE_MAP: MappingProxyType[str, CompetenceKey] = MappingProxyType({
    # Check-up
    "checkup-1": _R,
    "checkup-2": _C,
    "checkup-3": _L,
    # m4: Strategic Active Listening
    "e10": _L,
    "e11": _L,
    "e12": _L,
    # m1: Giving Effective Feedback
    "e1": _R,
    "e2": _A,  # feedback to a manager is an assertiveness exercise
    "e7": _R,
    # m3: Mastering the Art of Questions
    "e5": _R,
    "e6": _R,
    "e9": _L,
    "e16": _L,
    # m2: Handling Difficult Conversations
    "e3": _C,
    "e4": _A,
    "e8": _A,
    "e13": _C,
    "e14": _C,
    "e15": _A,
    # m5: Strategic Voice
    "v1": _R,
    "v2": _A,
    "v3": _A,
    # Sector packs
    "s1e1": _R,
    "s2e1": _C,
    "s3e1": _C,
    "s7e1": _R,
    "s8e1": _A,
})


def competence_for(exercise_id: str) -> CompetenceKey | None:
    """Competence trained by an exercise, or None when the id is not catalogued."""
    return EXERCISE_COMPETENCE_MAP.get(exercise_id)


def eligible_modules(modules: tuple[TrainingModule, ...] = MODULES) -> tuple[TrainingModule, ...]:
    return tuple(m for m in modules if m.is_eligible)

