from enum import Enum
from typing import FrozenSet, Iterable, Tuple

from .arm_raise_state import ArmRaisePhase, RepRecord
from .config_utils import ArmRaiseThresholds
from .pose_utils import AngleSet


class FormError(Enum):
    """Arm raise form defects. Declaration order is the feedback priority order."""
    ARM_TOO_HIGH_LEFT = "arm_too_high_left"
    ARM_TOO_HIGH_RIGHT = "arm_too_high_right"
    ASYMMETRIC_MOVEMENT = "asymmetric_movement"
    ELBOW_BENT_LEFT = "elbow_bent_left"
    ELBOW_BENT_RIGHT = "elbow_bent_right"
    TOO_FAST_RAISING = "too_fast_raising"
    INSUFFICIENT_HEIGHT = "insufficient_height"


_ACTIVE_PHASES = (ArmRaisePhase.RAISING, ArmRaisePhase.HOLDING)


def detect_form_errors(
    angles: AngleSet,
    phase: ArmRaisePhase,
    rep: RepRecord,
    thresholds: ArmRaiseThresholds
) -> FrozenSet[FormError]:
    """
    Evaluate the arm raise form rules for one frame.

    All comparisons are strict: a value sitting exactly on a threshold is not an error.

    Args:
        angles: Angles of the current frame
        phase: Phase after this frame's transition
        rep: Bookkeeping of the rep in progress (raise duration, peak angle)
        thresholds: Rule thresholds

    Returns:
        Set of detected form errors
    """
    errors = set()

    if angles.left_arm > thresholds.arm_max_angle:
        errors.add(FormError.ARM_TOO_HIGH_LEFT)
    if angles.right_arm > thresholds.arm_max_angle:
        errors.add(FormError.ARM_TOO_HIGH_RIGHT)

    if phase in _ACTIVE_PHASES and angles.symmetry_diff > thresholds.symmetry_tolerance:
        errors.add(FormError.ASYMMETRIC_MOVEMENT)

    if angles.left_elbow < thresholds.elbow_min_angle:
        errors.add(FormError.ELBOW_BENT_LEFT)
    if angles.right_elbow < thresholds.elbow_min_angle:
        errors.add(FormError.ELBOW_BENT_RIGHT)

    if (phase == ArmRaisePhase.HOLDING
            and rep.raise_duration is not None
            and rep.raise_duration < thresholds.min_raise_seconds):
        errors.add(FormError.TOO_FAST_RAISING)

    if phase == ArmRaisePhase.LOWERING and rep.peak_angle < thresholds.min_peak_angle:
        errors.add(FormError.INSUFFICIENT_HEIGHT)

    return frozenset(errors)


def order_errors(errors: Iterable[FormError]) -> Tuple[FormError, ...]:
    """Sort errors into feedback priority order."""
    present = set(errors)
    return tuple(error for error in FormError if error in present)
