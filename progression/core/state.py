"""
Progress State.

Immutable snapshot of everything the progression core knows about a learner.
Transitions (see ``progression.core.completion``) never modify a snapshot in
place; they build a new one, so a caller can keep the "before" value around
for diffing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from progression.core.competence import CompetenceKey, Modality
from progression.core.exceptions import ProgressionError
from progression.core.ledger import DEFAULT_ROUND_TO, CompetenceLedger, clamp


def parse_timestamp(value: datetime | str | None) -> datetime:
    """
    Normalise a timestamp to an aware UTC datetime.

    Accepts ISO-8601 strings (including a trailing ``Z``), naive datetimes
    (assumed UTC) and aware datetimes. ``None`` means now.
    """
    if value is None:
        return datetime.now(UTC)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _freeze(mapping: Mapping[str, Any] | None, name: str) -> Mapping[str, Any]:
    if isinstance(mapping, MappingProxyType):
        return mapping
    if mapping is not None and not isinstance(mapping, Mapping):
        raise ProgressionError(f"{name} must be a mapping, got {type(mapping).__name__}")
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class ExerciseRecord:
    """
    One entry of the analysis history.

    ``result`` is the analysis payload produced by the external analysis
    step. The core only reads ``result["scores"]`` of verbal entries (a list
    of per-criterion scores on a 0-10 scale).
    """

    exercise_id: str
    score: float
    timestamp: datetime
    modality: Modality = Modality.WRITTEN
    competence: CompetenceKey | None = None
    result: Mapping[str, Any] = field(default_factory=dict)
    user_response: str = ""

    def __post_init__(self):
        object.__setattr__(self, "score", clamp(float(self.score), 0.0, 100.0))
        object.__setattr__(self, "timestamp", parse_timestamp(self.timestamp))
        object.__setattr__(self, "modality", Modality(self.modality))
        object.__setattr__(self, "competence", CompetenceKey.parse(self.competence))
        object.__setattr__(self, "result", _freeze(self.result, "Analysis payload"))

    @property
    def is_verbal(self) -> bool:
        return self.modality is Modality.VERBAL

    def mean_criterion_score(self) -> float | None:
        """Average of the 0-10 criterion scores in a verbal payload, if any."""
        criteria = self.result.get("scores")
        if not isinstance(criteria, (list, tuple)):
            return None
        values = []
        for criterion in criteria:
            if isinstance(criterion, Mapping):
                criterion = criterion.get("score")
            if isinstance(criterion, (int, float)) and not isinstance(criterion, bool):
                values.append(float(criterion))
        if not values:
            return None
        return sum(values) / len(values)


@dataclass(frozen=True)
class CheckupProfile:
    """Communicator profile produced by the strategic check-up."""

    title: str
    description: str = ""
    strengths: tuple[str, ...] = ()
    areas_to_improve: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProgressState:
    """
    Learner progression snapshot.

    Attributes:
        scores: Raw exercise scores in completion order (retakes included)
        completed_exercise_ids: Distinct completed exercises, first completion first
        ledger: Competence distribution
        history: Exercise id -> latest ExerciseRecord (read-only)
        unlocked_badges: Achievement ids in unlock order (append-only)
        checkup_profile: Set once the strategic check-up has been completed
        main_objective: Free-text objective chosen at onboarding
    """

    scores: tuple[float, ...] = ()
    completed_exercise_ids: tuple[str, ...] = ()
    ledger: CompetenceLedger = field(default_factory=CompetenceLedger)
    history: Mapping[str, ExerciseRecord] = field(default_factory=dict)
    unlocked_badges: tuple[str, ...] = ()
    checkup_profile: CheckupProfile | None = None
    main_objective: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "scores", tuple(float(s) for s in self.scores))
        object.__setattr__(
            self, "completed_exercise_ids", tuple(dict.fromkeys(self.completed_exercise_ids))
        )
        object.__setattr__(
            self, "unlocked_badges", tuple(dict.fromkeys(self.unlocked_badges))
        )
        object.__setattr__(self, "history", _freeze(self.history, "History"))

    @classmethod
    def initial(cls, round_to: int = DEFAULT_ROUND_TO) -> ProgressState:
        """Empty state for a new learner."""
        return cls(ledger=CompetenceLedger(round_to=round_to))

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def completed_count(self) -> int:
        return len(self.completed_exercise_ids)

    @property
    def has_started(self) -> bool:
        return bool(self.completed_exercise_ids)

    @property
    def has_checkup_profile(self) -> bool:
        return self.checkup_profile is not None

    def has_history(self, exercise_id: str) -> bool:
        return exercise_id in self.history

    def records(self) -> tuple[ExerciseRecord, ...]:
        return tuple(self.history.values())

    # ------------------------------------------------------------------
    # Copy-on-write helpers
    # ------------------------------------------------------------------

    def with_score(self, score: float) -> ProgressState:
        return replace(self, scores=(*self.scores, score))

    def with_completed(self, exercise_id: str) -> ProgressState:
        if exercise_id in self.completed_exercise_ids:
            return self
        return replace(self, completed_exercise_ids=(*self.completed_exercise_ids, exercise_id))

    def with_record(self, record: ExerciseRecord) -> ProgressState:
        history = dict(self.history)
        history[record.exercise_id] = record
        return replace(self, history=history)

    def with_badges(self, badge_ids: tuple[str, ...] | list[str]) -> ProgressState:
        if not badge_ids:
            return self
        return replace(self, unlocked_badges=(*self.unlocked_badges, *badge_ids))
