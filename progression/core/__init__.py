"""
Core Module - Progression domain models and transitions.

Components:
- competence: Competence keys, modalities, module and exercise catalogs
- ledger: CompetenceLedger (sum-to-100 competence distribution)
- state: ProgressState snapshot and ExerciseRecord history entries
- completion: Exercise and check-up completion transitions
- scoring: OverallScoreAggregator (five weighted sub-scores)
- levels: ProficiencyLevel classifier
- achievements: Achievement catalog and before/after diffing
- persistence: Stored-document adapter (pydantic)

Design Principle:
Every operation takes a ProgressState and returns a new one; nothing in
this package holds per-learner state or performs I/O except the
persistence file helpers.
"""

from progression.core.achievements import ACHIEVEMENTS, Achievement, diff, unlocked_ids
from progression.core.competence import (
    EXERCISE_COMPETENCE_MAP,
    MODULES,
    CompetenceKey,
    Modality,
    TrainingModule,
    competence_for,
)
from progression.core.completion import (
    CheckupOutcome,
    CompletionOutcome,
    attach_checkup_profile,
    process_checkup_completion,
    process_completion,
)
from progression.core.exceptions import InvalidProgressDataError, ProgressionError
from progression.core.ledger import CompetenceLedger
from progression.core.levels import LevelTransition, ProficiencyLevel
from progression.core.persistence import load_state, save_state, state_from_dict, state_to_dict
from progression.core.scoring import (
    OverallScoreAggregator,
    ScoreBreakdown,
    calculate_overall_score,
    classify,
    compute_breakdown,
    score_explanation,
)
from progression.core.state import CheckupProfile, ExerciseRecord, ProgressState

__all__ = [
    # Catalog
    "CompetenceKey",
    "Modality",
    "TrainingModule",
    "MODULES",
    "EXERCISE_COMPETENCE_MAP",
    "competence_for",
    # State
    "CompetenceLedger",
    "ProgressState",
    "ExerciseRecord",
    "CheckupProfile",
    # Transitions
    "process_completion",
    "process_checkup_completion",
    "attach_checkup_profile",
    "CompletionOutcome",
    "CheckupOutcome",
    # Scoring & levels
    "OverallScoreAggregator",
    "ScoreBreakdown",
    "compute_breakdown",
    "calculate_overall_score",
    "classify",
    "score_explanation",
    "ProficiencyLevel",
    "LevelTransition",
    # Achievements
    "Achievement",
    "ACHIEVEMENTS",
    "diff",
    "unlocked_ids",
    # Persistence
    "load_state",
    "save_state",
    "state_from_dict",
    "state_to_dict",
    "ProgressionError",
    "InvalidProgressDataError",
]
