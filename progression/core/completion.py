"""
Exercise Completion Processor.

State transitions of the progression core:
- process_completion: a learner finished an exercise
- process_checkup_completion: a learner finished the strategic check-up

Both take a ProgressState and return a new one together with what changed
(newly unlocked achievements, level transition). The input state is never
modified, so it stays valid as the "before" snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from loguru import logger

from progression.core import achievements
from progression.core.competence import Modality, competence_for
from progression.core.ledger import clamp
from progression.core.levels import LevelTransition, level_transition
from progression.core.scoring import OverallScoreAggregator
from progression.core.state import CheckupProfile, ExerciseRecord, ProgressState, parse_timestamp

# Placeholder attached to the temporary post-state while diffing achievements
# for a check-up whose real profile is not known yet.
PENDING_CHECKUP_PROFILE = CheckupProfile(title="pending")


@dataclass(frozen=True)
class CompletionOutcome:
    """Result of processing one exercise completion."""

    state: ProgressState
    new_badges: tuple[str, ...] = ()
    level_transition: LevelTransition | None = None
    score: int = 0


@dataclass(frozen=True)
class CheckupOutcome:
    """Result of processing the strategic check-up."""

    state: ProgressState
    new_badges: tuple[str, ...] = ()


def process_completion(
    state: ProgressState,
    exercise_id: str,
    raw_score: float,
    is_retake: bool | None = None,
    modality: Modality | str = Modality.WRITTEN,
    analysis: Mapping[str, Any] | None = None,
    user_response: str = "",
    timestamp: datetime | str | None = None,
    aggregator: OverallScoreAggregator | None = None,
) -> CompletionOutcome:
    """
    Apply a completed exercise to a progress state.

    Args:
        state: Current state (left untouched)
        exercise_id: Id of the completed exercise
        raw_score: Score 0-100 from the analysis step (clamped)
        is_retake: Whether the learner is repeating the exercise;
            None detects it from the analysis history
        modality: written or verbal
        analysis: Analysis payload, stored as-is in the history
        user_response: Learner's answer text (or transcript)
        timestamp: Completion time (ISO-8601 string or datetime, default now)
        aggregator: Score aggregator (default module catalog)

    Returns:
        CompletionOutcome with the new state, unlocked badges and level change
    """
    aggregator = aggregator or OverallScoreAggregator()
    when = parse_timestamp(timestamp)
    score = clamp(float(raw_score), 0.0, 100.0)
    if is_retake is None:
        is_retake = state.has_history(exercise_id)

    # Retakes still count toward the running average.
    updated = state.with_score(score)

    if not is_retake:
        updated = updated.with_completed(exercise_id)

    competence = competence_for(exercise_id)
    if competence is None:
        logger.debug(f"Exercise {exercise_id} has no competence mapping - ledger unchanged")
    else:
        updated = replace(updated, ledger=updated.ledger.update(competence, score))

    updated = updated.with_record(
        ExerciseRecord(
            exercise_id=exercise_id,
            score=score,
            timestamp=when,
            modality=Modality(modality),
            competence=competence,
            result=analysis or {},
            user_response=user_response,
        )
    )

    new_badges = achievements.diff(state, updated)
    updated = updated.with_badges(new_badges)

    previous_level = aggregator.level(state, now=when)
    new_score = aggregator.overall_score(updated, now=when)
    current_level = aggregator.level(updated, now=when)
    transition = level_transition(previous_level, current_level)

    logger.info(
        f"Completed {exercise_id} (score={score:.0f}, retake={is_retake}) "
        f"-> overall {new_score}, level {current_level.value}"
    )
    if new_badges:
        logger.info(f"Unlocked achievements: {', '.join(new_badges)}")
    if transition is not None:
        logger.info(f"Level changed: {transition.previous.value} -> {transition.current.value}")

    return CompletionOutcome(
        state=updated,
        new_badges=new_badges,
        level_transition=transition,
        score=new_score,
    )


def process_checkup_completion(
    state: ProgressState, profile: CheckupProfile | None = None
) -> CheckupOutcome:
    """
    Apply the strategic check-up to a progress state.

    Achievements are diffed against a temporary state that already carries a
    profile. When ``profile`` is None the returned state gets only the new
    badges; the caller attaches the real profile with
    ``attach_checkup_profile`` once it is available.
    """
    pending = replace(state, checkup_profile=profile or PENDING_CHECKUP_PROFILE)
    new_badges = achievements.diff(state, pending)

    updated = state.with_badges(new_badges)
    if profile is not None:
        updated = attach_checkup_profile(updated, profile)

    if new_badges:
        logger.info(f"Check-up unlocked achievements: {', '.join(new_badges)}")
    return CheckupOutcome(state=updated, new_badges=new_badges)


def attach_checkup_profile(state: ProgressState, profile: CheckupProfile) -> ProgressState:
    return replace(state, checkup_profile=profile)
