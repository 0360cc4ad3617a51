"""
Overall Score Aggregator.

Combines five independent sub-scores (each 0-100) into a single proficiency
score:

    overall = 0.3 * Coverage
            + 0.4 * Quality
            + 0.1 * Consistency
            + 0.1 * Recency
            + 0.1 * VoiceDelta

An empty trajectory (no completed exercise) always scores 0, even though
Consistency and VoiceDelta have neutral defaults of 50.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from types import MappingProxyType

from progression.core.competence import MODULES, TrainingModule, eligible_modules
from progression.core.ledger import clamp, round_half_up
from progression.core.levels import ProficiencyLevel
from progression.core.state import ProgressState

SECONDS_PER_DAY = 86400.0

SCORE_WEIGHTS: MappingProxyType[str, float] = MappingProxyType({
    "coverage": 0.3,
    "quality": 0.4,
    "consistency": 0.1,
    "recency": 0.1,
    "voice_delta": 0.1,
})

NEUTRAL_SCORE = 50.0
CONSISTENCY_MULTIPLIER = 150.0
RECENCY_WINDOW_DAYS = 30.0
VOICE_CRITERION_SCALE = 10.0


def calculate_days_since(last_activity: datetime | None, now: datetime | None = None) -> float:
    """
    Days elapsed since an activity.

    Args:
        last_activity: Timestamp of the activity (naive values are UTC)
        now: Current time (defaults to UTC now)

    Returns:
        Days elapsed as float (negative for future timestamps)
    """
    if last_activity is None:
        return RECENCY_WINDOW_DAYS
    if now is None:
        now = datetime.now(UTC)

    if last_activity.tzinfo is None:
        last_activity = last_activity.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    return (now - last_activity).total_seconds() / SECONDS_PER_DAY


def day_index(timestamp: datetime) -> int:
    """UTC calendar day number of a timestamp."""
    return int(timestamp.timestamp() // SECONDS_PER_DAY)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Sub-scores and the resulting overall score for one state."""

    coverage: float
    quality: float
    consistency: float
    recency: float
    voice_delta: float
    overall: int

    def as_dict(self) -> dict[str, float]:
        return {
            "coverage": self.coverage,
            "quality": self.quality,
            "consistency": self.consistency,
            "recency": self.recency,
            "voice_delta": self.voice_delta,
        }

    def contributions(self) -> dict[str, float]:
        """Weighted contribution of each sub-score to the overall score."""
        return {name: value * SCORE_WEIGHTS[name] for name, value in self.as_dict().items()}


class OverallScoreAggregator:
    """
    Computes the proficiency score from a ProgressState.

    The module catalog decides which modules count for coverage; custom
    modules are never eligible.
    """

    def __init__(self, modules: tuple[TrainingModule, ...] = MODULES):
        self.modules = modules
        self.eligible = eligible_modules(modules)

    # ------------------------------------------------------------------
    # Sub-scores
    # ------------------------------------------------------------------

    def coverage(self, state: ProgressState) -> float:
        """Share of eligible modules with at least one completed exercise."""
        completed = set(state.completed_exercise_ids)
        if not completed or not self.eligible:
            return 0.0
        covered = sum(
            1 for module in self.eligible if any(module.contains(ex) for ex in completed)
        )
        return clamp(covered / len(self.eligible) * 100, 0.0, 100.0)

    def quality(self, state: ProgressState) -> float:
        """Mean raw score."""
        if not state.scores:
            return 0.0
        return clamp(sum(state.scores) / len(state.scores), 0.0, 100.0)

    def consistency(self, state: ProgressState) -> float:
        """
        Regularity of practice: unique active days over the active span.

        Neutral (50) until there are at least two history entries spread
        over at least two distinct days.
        """
        records = state.records()
        if len(records) < 2:
            return NEUTRAL_SCORE

        days = sorted(day_index(r.timestamp) for r in records)
        unique_days = len(set(days))
        if unique_days < 2:
            return NEUTRAL_SCORE

        span = max(days[-1] - days[0], 1)
        return clamp(min(unique_days / span * CONSISTENCY_MULTIPLIER, 100.0), 0.0, 100.0)

    def recency(self, state: ProgressState, now: datetime | None = None) -> float:
        """Linear decay from 100 to 0 over 30 days since the last activity."""
        records = state.records()
        if not records:
            return 0.0
        last = max(r.timestamp for r in records)
        days = calculate_days_since(last, now)
        return clamp(100.0 - days * (100.0 / RECENCY_WINDOW_DAYS), 0.0, 100.0)

    def voice_delta(self, state: ProgressState) -> float:
        """Mean verbal criterion score, rescaled from 0-10 to 0-100."""
        voice_scores = [
            mean * VOICE_CRITERION_SCALE
            for mean in (r.mean_criterion_score() for r in state.records() if r.is_verbal)
            if mean is not None
        ]
        if not voice_scores:
            return NEUTRAL_SCORE
        return clamp(sum(voice_scores) / len(voice_scores), 0.0, 100.0)

    # ------------------------------------------------------------------
    # Aggregate
    # ------------------------------------------------------------------

    def breakdown(self, state: ProgressState, now: datetime | None = None) -> ScoreBreakdown:
        coverage = self.coverage(state)
        quality = self.quality(state)
        consistency = self.consistency(state)
        recency = self.recency(state, now)
        voice_delta = self.voice_delta(state)

        if not state.has_started:
            overall = 0
        else:
            overall = int(
                round_half_up(
                    coverage * SCORE_WEIGHTS["coverage"]
                    + quality * SCORE_WEIGHTS["quality"]
                    + consistency * SCORE_WEIGHTS["consistency"]
                    + recency * SCORE_WEIGHTS["recency"]
                    + voice_delta * SCORE_WEIGHTS["voice_delta"]
                )
            )

        return ScoreBreakdown(
            coverage=coverage,
            quality=quality,
            consistency=consistency,
            recency=recency,
            voice_delta=voice_delta,
            overall=overall,
        )

    def overall_score(self, state: ProgressState, now: datetime | None = None) -> int:
        return self.breakdown(state, now).overall

    def level(self, state: ProgressState, now: datetime | None = None) -> ProficiencyLevel:
        return ProficiencyLevel.from_score(self.overall_score(state, now), started=state.has_started)


_default_aggregator = OverallScoreAggregator()


def compute_breakdown(
    state: ProgressState,
    now: datetime | None = None,
    modules: tuple[TrainingModule, ...] | None = None,
) -> ScoreBreakdown:
    aggregator = _default_aggregator if modules is None else OverallScoreAggregator(modules)
    return aggregator.breakdown(state, now)


def calculate_overall_score(
    state: ProgressState,
    now: datetime | None = None,
    modules: tuple[TrainingModule, ...] | None = None,
) -> int:
    """Overall 0-100 proficiency score of a state."""
    return compute_breakdown(state, now, modules).overall


def classify(
    state: ProgressState,
    now: datetime | None = None,
    modules: tuple[TrainingModule, ...] | None = None,
) -> ProficiencyLevel:
    """Current level of a state."""
    score = calculate_overall_score(state, now, modules)
    return ProficiencyLevel.from_score(score, started=state.has_started)


def score_explanation() -> dict[str, float]:
    """Weight of each sub-score, in percent."""
    return {name: round(weight * 100, 1) for name, weight in SCORE_WEIGHTS.items()}
