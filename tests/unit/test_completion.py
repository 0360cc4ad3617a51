"""
Unit tests for the Exercise Completion Processor.

Tests:
- First completion vs retake bookkeeping
- Ledger routing through the exercise competence map
- History entries and analysis payloads
- Achievement diffs and level transitions
- Strategic check-up transition
"""

import pytest

from progression.core.competence import CompetenceKey, Modality, TrainingModule
from progression.core.completion import (
    PENDING_CHECKUP_PROFILE,
    attach_checkup_profile,
    process_checkup_completion,
    process_completion,
)
from progression.core.exceptions import ProgressionError
from progression.core.levels import ProficiencyLevel
from progression.core.scoring import OverallScoreAggregator, compute_breakdown
from progression.core.state import CheckupProfile


class TestFirstCompletion:
    """Tests for a first attempt at an exercise."""

    def test_first_completion_updates_everything(self, empty_state, now):
        outcome = process_completion(empty_state, "e10", 100, is_retake=False, timestamp=now)
        state = outcome.state

        assert state.scores == (100.0,)
        assert state.completed_exercise_ids == ("e10",)
        assert state.ledger[CompetenceKey.LISTENING] == 33.0
        assert state.ledger.unassigned == 67.0
        assert state.has_history("e10")
        assert outcome.new_badges == ("first_step",)
        assert state.unlocked_badges == ("first_step",)

    def test_input_state_is_untouched(self, empty_state, now):
        process_completion(empty_state, "e10", 100, timestamp=now)
        assert empty_state.scores == ()
        assert empty_state.completed_exercise_ids == ()
        assert empty_state.ledger.unassigned == 100.0
        assert not empty_state.history

    def test_score_is_clamped(self, empty_state, now):
        state = process_completion(empty_state, "e1", 140, timestamp=now).state
        assert state.scores == (100.0,)
        assert state.history["e1"].score == 100.0

    def test_history_entry(self, empty_state, now, written_analysis):
        state = process_completion(
            empty_state,
            "e1",
            80,
            analysis=written_analysis,
            user_response="I hear that you are worried about the deadline.",
            timestamp="2025-03-10T15:00:00Z",
        ).state
        record = state.history["e1"]

        assert record.timestamp == now
        assert record.modality is Modality.WRITTEN
        assert record.competence is CompetenceKey.REFORMULATION
        assert record.result["strengths"] == ["clear structure"]
        assert record.user_response.startswith("I hear")

    def test_verbal_modality_from_string(self, empty_state, now, verbal_analysis):
        state = process_completion(
            empty_state, "v1", 72, modality="verbal", analysis=verbal_analysis, timestamp=now
        ).state
        assert state.history["v1"].is_verbal


class TestAnalysisPayload:
    """Tests for unexpected analysis payload shapes."""

    def test_scalar_criterion_scores_fall_back_to_neutral_voice(self, empty_state, now):
        outcome = process_completion(
            empty_state, "v1", 70, modality="verbal", analysis={"scores": 7}, timestamp=now
        )
        assert outcome.state.history["v1"].result["scores"] == 7
        assert compute_breakdown(outcome.state, now=now).voice_delta == 50.0

    @pytest.mark.parametrize("payload", [[1, 2], "great job", 80])
    def test_non_mapping_analysis_rejected(self, empty_state, now, payload):
        with pytest.raises(ProgressionError, match="Analysis payload must be a mapping"):
            process_completion(empty_state, "v1", 70, modality="verbal", analysis=payload, timestamp=now)
        assert not empty_state.history

    def test_non_mapping_analysis_is_a_value_error(self, empty_state, now):
        with pytest.raises(ValueError):
            process_completion(empty_state, "e1", 70, analysis=[{"score": 9}], timestamp=now)


class TestRetake:
    """Tests for repeated attempts."""

    def test_retake_keeps_completed_set(self, empty_state, now):
        state = process_completion(empty_state, "e10", 60, timestamp=now).state
        outcome = process_completion(state, "e10", 90, is_retake=True, timestamp=now)

        assert outcome.state.completed_exercise_ids == ("e10",)
        assert outcome.state.scores == (60.0, 90.0)
        assert outcome.new_badges == ()

    def test_retake_overwrites_history_entry(self, empty_state, now):
        state = process_completion(empty_state, "e10", 60, timestamp=now).state
        state = process_completion(state, "e10", 90, timestamp=now).state
        assert len(state.history) == 1
        assert state.history["e10"].score == 90.0

    def test_retake_still_updates_ledger(self, empty_state, now):
        state = process_completion(empty_state, "e10", 40, timestamp=now).state  # 20
        state = process_completion(state, "e10", 40, is_retake=True, timestamp=now).state  # 30
        assert state.ledger[CompetenceKey.LISTENING] == 30.0

    def test_retake_detected_from_history(self, empty_state, now):
        state = process_completion(empty_state, "e10", 60, timestamp=now).state
        state = process_completion(state, "e11", 60, timestamp=now).state
        state = process_completion(state, "e10", 60, timestamp=now).state
        assert state.completed_exercise_ids == ("e10", "e11")
        assert len(state.scores) == 3

    def test_explicit_first_attempt_overrides_detection(self, empty_state, now):
        state = process_completion(empty_state, "e10", 60, is_retake=True, timestamp=now).state
        assert state.completed_exercise_ids == ()
        state = process_completion(state, "e10", 60, is_retake=False, timestamp=now).state
        assert state.completed_exercise_ids == ("e10",)


class TestUnmappedExercise:
    """Tests for exercises outside the competence map."""

    def test_ledger_unchanged_for_unknown_exercise(self, empty_state, now):
        outcome = process_completion(empty_state, "custom_42", 95, timestamp=now)
        state = outcome.state

        assert state.ledger == empty_state.ledger
        assert state.completed_exercise_ids == ("custom_42",)
        assert state.history["custom_42"].competence is None
        assert outcome.new_badges == ("first_step",)


class TestLevelTransition:
    """Tests for level changes reported by completions."""

    @pytest.fixture
    def aggregator(self):
        return OverallScoreAggregator((TrainingModule("m4", "Listening", ("e10", "e11")),))

    def test_first_completion_leaves_beginner(self, empty_state, now, aggregator):
        outcome = process_completion(empty_state, "e10", 80, timestamp=now, aggregator=aggregator)
        # 0.3*100 + 0.4*80 + 0.1*50 + 0.1*100 + 0.1*50
        assert outcome.score == 82
        assert outcome.level_transition is not None
        assert outcome.level_transition.previous is ProficiencyLevel.BEGINNER
        assert outcome.level_transition.current is ProficiencyLevel.EFFECTIVE
        assert outcome.level_transition.is_promotion

    def test_same_level_no_transition(self, empty_state, now, aggregator):
        state = process_completion(empty_state, "e10", 80, timestamp=now, aggregator=aggregator).state
        outcome = process_completion(state, "e11", 80, timestamp=now, aggregator=aggregator)
        assert outcome.level_transition is None

    def test_demotion_reported(self, empty_state, now, aggregator):
        state = process_completion(empty_state, "e10", 100, timestamp=now, aggregator=aggregator).state
        # 0.3*100 + 0.4*50 + 0.1*50 + 0.1*100 + 0.1*50 = 70 -> still effective
        state = process_completion(state, "e11", 0, timestamp=now, aggregator=aggregator).state
        outcome = process_completion(state, "e10", 0, timestamp=now, aggregator=aggregator)
        # quality 33.3 -> 63
        assert outcome.score == 63
        assert outcome.level_transition is not None
        assert not outcome.level_transition.is_promotion
        assert outcome.level_transition.current is ProficiencyLevel.NEAR_EFFECTIVE


class TestCheckup:
    """Tests for the strategic check-up transition."""

    def test_checkup_with_profile(self, empty_state):
        profile = CheckupProfile(
            title="The Mediator",
            description="Calm under pressure",
            strengths=("listening",),
            areas_to_improve=("assertiveness",),
        )
        outcome = process_checkup_completion(empty_state, profile)
        assert outcome.new_badges == ("checkup_complete",)
        assert outcome.state.checkup_profile == profile
        assert outcome.state.unlocked_badges == ("checkup_complete",)

    def test_checkup_without_profile_only_adds_badges(self, empty_state):
        outcome = process_checkup_completion(empty_state)
        assert outcome.new_badges == ("checkup_complete",)
        assert outcome.state.checkup_profile is None
        assert outcome.state.checkup_profile is not PENDING_CHECKUP_PROFILE

        attached = attach_checkup_profile(outcome.state, CheckupProfile(title="The Analyst"))
        assert attached.checkup_profile.title == "The Analyst"
        assert attached.unlocked_badges == ("checkup_complete",)

    def test_second_checkup_unlocks_nothing(self, empty_state):
        state = process_checkup_completion(empty_state, CheckupProfile(title="The Mediator")).state
        outcome = process_checkup_completion(state, CheckupProfile(title="The Analyst"))
        assert outcome.new_badges == ()
        assert outcome.state.checkup_profile.title == "The Analyst"
        assert outcome.state.unlocked_badges == ("checkup_complete",)

    def test_checkup_exercises_feed_the_ledger(self, empty_state, now):
        state = process_completion(empty_state, "checkup-2", 60, timestamp=now).state
        assert state.ledger[CompetenceKey.CONFLICT_MANAGEMENT] == 30.0
