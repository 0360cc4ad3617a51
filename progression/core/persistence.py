"""
Progress Persistence Adapter.

Converts between ProgressState and the JSON document owned by the storage
collaborator:

    {
        "scores": [80, 90],
        "completedExerciseIds": ["e10"],
        "competenceScores": {"ascolto": 33, "riformulazione": 0, ...},
        "analysisHistory": {
            "e10": {"result": {...}, "userResponse": "...",
                    "timestamp": "2025-01-01T10:00:00Z", "type": "written"}
        },
        "unlockedBadges": ["first_step"],
        "checkupProfile": {...},      # optional
        "mainObjective": "..."        # optional
    }

The unassigned ledger slice is never stored; it is rebuilt on load.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from progression.core.competence import CompetenceKey, Modality
from progression.core.exceptions import InvalidProgressDataError
from progression.core.ledger import DEFAULT_ROUND_TO, CompetenceLedger
from progression.core.state import CheckupProfile, ExerciseRecord, ProgressState


# ========================================
# Stored document models
# ========================================


class _StoredModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class StoredCompetenceScores(_StoredModel):
    """Four competence magnitudes (0-33); values are clamped on load, not rejected."""

    ascolto: float | None = 0.0
    riformulazione: float | None = 0.0
    assertivita: float | None = 0.0
    gestione_conflitto: float | None = 0.0


class StoredHistoryItem(_StoredModel):
    result: dict[str, Any] = Field(default_factory=dict)
    user_response: str = Field("", alias="userResponse")
    timestamp: datetime
    type: Literal["written", "verbal"] = "written"
    competence: str | None = None
    score: float | None = None


class StoredCheckupProfile(_StoredModel):
    profile_title: str = Field(..., alias="profileTitle")
    profile_description: str = Field("", alias="profileDescription")
    strengths: list[str] = Field(default_factory=list)
    areas_to_improve: list[str] = Field(default_factory=list, alias="areasToImprove")


class StoredProgress(_StoredModel):
    """Persisted progress document."""

    scores: list[float] = Field(default_factory=list)
    completed_exercise_ids: list[str] = Field(default_factory=list, alias="completedExerciseIds")
    competence_scores: StoredCompetenceScores = Field(
        default_factory=StoredCompetenceScores, alias="competenceScores"
    )
    analysis_history: dict[str, StoredHistoryItem] = Field(
        default_factory=dict, alias="analysisHistory"
    )
    unlocked_badges: list[str] = Field(default_factory=list, alias="unlockedBadges")
    checkup_profile: StoredCheckupProfile | None = Field(None, alias="checkupProfile")
    main_objective: str | None = Field(None, alias="mainObjective")


# ========================================
# Conversion
# ========================================


def _record_score(exercise_id: str, item: StoredHistoryItem, result: dict[str, Any]) -> float:
    if item.score is not None:
        return item.score
    stored = result.get("score")
    if isinstance(stored, (int, float)) and not isinstance(stored, bool):
        return float(stored)
    logger.debug(f"History entry {exercise_id} has no score - defaulting to 0")
    return 0.0


def state_from_dict(data: dict[str, Any], round_to: int = DEFAULT_ROUND_TO) -> ProgressState:
    """
    Build a ProgressState from a stored document.

    Raises:
        InvalidProgressDataError: If the document does not match the stored shape
    """
    try:
        stored = StoredProgress.model_validate(data or {})
    except ValidationError as e:
        raise InvalidProgressDataError(f"Invalid progress document: {e}") from e

    history = {
        exercise_id: ExerciseRecord(
            exercise_id=exercise_id,
            score=_record_score(exercise_id, item, item.result),
            timestamp=item.timestamp,
            modality=Modality(item.type),
            competence=CompetenceKey.parse(item.competence),
            result=item.result,
            user_response=item.user_response,
        )
        for exercise_id, item in stored.analysis_history.items()
    }

    profile = None
    if stored.checkup_profile is not None:
        profile = CheckupProfile(
            title=stored.checkup_profile.profile_title,
            description=stored.checkup_profile.profile_description,
            strengths=tuple(stored.checkup_profile.strengths),
            areas_to_improve=tuple(stored.checkup_profile.areas_to_improve),
        )

    return ProgressState(
        scores=tuple(stored.scores),
        completed_exercise_ids=tuple(stored.completed_exercise_ids),
        ledger=CompetenceLedger.from_scores(stored.competence_scores.model_dump(), round_to),
        history=history,
        unlocked_badges=tuple(stored.unlocked_badges),
        checkup_profile=profile,
        main_objective=stored.main_objective,
    )


def state_to_dict(state: ProgressState) -> dict[str, Any]:
    """Serialise a ProgressState to the stored (JSON-compatible) document."""
    document: dict[str, Any] = {
        "scores": list(state.scores),
        "completedExerciseIds": list(state.completed_exercise_ids),
        "competenceScores": state.ledger.to_scores(),
        "analysisHistory": {
            exercise_id: {
                "result": dict(record.result),
                "userResponse": record.user_response,
                "timestamp": record.timestamp.isoformat().replace("+00:00", "Z"),
                "type": record.modality.value,
                "competence": record.competence.value if record.competence else None,
                "score": record.score,
            }
            for exercise_id, record in state.history.items()
        },
        "unlockedBadges": list(state.unlocked_badges),
    }
    if state.checkup_profile is not None:
        document["checkupProfile"] = {
            "profileTitle": state.checkup_profile.title,
            "profileDescription": state.checkup_profile.description,
            "strengths": list(state.checkup_profile.strengths),
            "areasToImprove": list(state.checkup_profile.areas_to_improve),
        }
    if state.main_objective is not None:
        document["mainObjective"] = state.main_objective
    return document


# ========================================
# File helpers
# ========================================


def load_state(path: str | Path, round_to: int = DEFAULT_ROUND_TO) -> ProgressState:
    """
    Load a progress document from disk; a missing file yields the initial state.

    Raises:
        InvalidProgressDataError: If the file is not valid JSON or not a progress document
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No progress file at {path} - starting fresh")
        return ProgressState.initial(round_to)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidProgressDataError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidProgressDataError(f"{path} does not contain a progress object")
    return state_from_dict(data, round_to)


def save_state(path: str | Path, state: ProgressState) -> Path:
    """Write a progress document to disk, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state_to_dict(state), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.debug(f"Saved progress to {path}")
    return path
