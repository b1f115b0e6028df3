"""Tests for form scoring, feedback selection and overlay status."""

import pytest

from arm_raise_coach.exercise_analysis.arm_raise_state import ArmRaisePhase
from arm_raise_coach.exercise_analysis.config_utils import ArmRaiseThresholds
from arm_raise_coach.exercise_analysis.form_checks import FormError
from arm_raise_coach.exercise_analysis.scoring import (
    MAX_FORM_SCORE,
    FeedbackGenerator,
    calculate_form_score,
    compose_feedback,
    overlay_status,
    resolve_penalties,
)

PENALTIES = resolve_penalties(ArmRaiseThresholds().penalties)


def test_clean_frame_scores_full_marks():
    assert calculate_form_score([], PENALTIES) == MAX_FORM_SCORE


@pytest.mark.parametrize("errors, expected", [
    ({FormError.ARM_TOO_HIGH_LEFT}, 90),
    ({FormError.ARM_TOO_HIGH_LEFT, FormError.ARM_TOO_HIGH_RIGHT}, 80),
    ({FormError.ASYMMETRIC_MOVEMENT}, 80),
    ({FormError.TOO_FAST_RAISING}, 85),
    ({FormError.INSUFFICIENT_HEIGHT}, 75),
    ({FormError.ELBOW_BENT_RIGHT, FormError.TOO_FAST_RAISING}, 75),
])
def test_penalties_are_subtracted(errors, expected):
    assert calculate_form_score(errors, PENALTIES) == expected


def test_repeated_error_is_penalized_once():
    errors = [FormError.ASYMMETRIC_MOVEMENT, FormError.ASYMMETRIC_MOVEMENT]
    assert calculate_form_score(errors, PENALTIES) == 80


def test_every_error_at_once_clamps_to_zero():
    assert calculate_form_score(list(FormError), PENALTIES) == 0


def test_score_clamped_with_custom_penalties():
    heavy = {error: 50 for error in FormError}
    assert calculate_form_score({FormError.ELBOW_BENT_LEFT, FormError.ELBOW_BENT_RIGHT,
                                 FormError.TOO_FAST_RAISING}, heavy) == 0
    bonus = {error: -10 for error in FormError}
    assert calculate_form_score({FormError.TOO_FAST_RAISING}, bonus) == MAX_FORM_SCORE


def test_resolve_penalties_requires_every_error():
    penalties = dict(ArmRaiseThresholds().penalties)
    del penalties["too_fast_raising"]
    with pytest.raises(ValueError, match="too_fast_raising"):
        resolve_penalties(penalties)


# --- Feedback ---

@pytest.mark.parametrize("phase, angle, expected", [
    (ArmRaisePhase.RESTING, 10.0, "Ready - Arms at sides"),
    (ArmRaisePhase.RAISING, 54.6, "Good form - Keep going! (55°)"),
    (ArmRaisePhase.HOLDING, 90.2, "Perfect! Hold briefly (90°)"),
    (ArmRaisePhase.LOWERING, 50.0, "Great control - Lower slowly"),
])
def test_phase_feedback_without_errors(phase, angle, expected):
    assert compose_feedback([], phase, angle) == expected


def test_feedback_reports_only_highest_priority_error():
    errors = {FormError.INSUFFICIENT_HEIGHT, FormError.ELBOW_BENT_LEFT, FormError.ASYMMETRIC_MOVEMENT}
    assert compose_feedback(errors, ArmRaisePhase.HOLDING, 90.0) == FeedbackGenerator.asymmetric()


def test_arm_too_high_outranks_everything():
    errors = set(FormError)
    assert compose_feedback(errors, ArmRaisePhase.HOLDING, 115.0) == "⚠️ Don't raise above shoulders"


@pytest.mark.parametrize("error, message", [
    (FormError.ARM_TOO_HIGH_RIGHT, "⚠️ Don't raise above shoulders"),
    (FormError.ELBOW_BENT_RIGHT, "⚠️ Keep arms straighter"),
    (FormError.TOO_FAST_RAISING, "⚠️ Slower movement - 2-3 seconds up"),
    (FormError.INSUFFICIENT_HEIGHT, "⚠️ Raise arms to shoulder height"),
])
def test_single_error_messages(error, message):
    assert compose_feedback({error}, ArmRaisePhase.LOWERING, 60.0) == message


# --- Overlay ---

@pytest.mark.parametrize("count, expected", [
    (0, "good"),
    (1, "warning"),
    (2, "warning"),
    (3, "error"),
    (7, "error"),
])
def test_overlay_status(count, expected):
    assert overlay_status(count) == expected
