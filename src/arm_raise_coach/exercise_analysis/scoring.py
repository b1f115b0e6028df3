from typing import Dict, Iterable, Mapping, Optional

from .arm_raise_state import ArmRaisePhase
from .form_checks import FormError, order_errors

MAX_FORM_SCORE = 100


# --- Feedback Templates ---
class FeedbackGenerator:
    @staticmethod
    def resting():
        return "Ready - Arms at sides"
    @staticmethod
    def raising(angle):
        return f"Good form - Keep going! ({angle:.0f}°)"
    @staticmethod
    def holding(angle):
        return f"Perfect! Hold briefly ({angle:.0f}°)"
    @staticmethod
    def lowering():
        return "Great control - Lower slowly"
    @staticmethod
    def arm_too_high():
        return "⚠️ Don't raise above shoulders"
    @staticmethod
    def asymmetric():
        return "⚠️ Keep both arms at same height"
    @staticmethod
    def elbow_bent():
        return "⚠️ Keep arms straighter"
    @staticmethod
    def too_fast():
        return "⚠️ Slower movement - 2-3 seconds up"
    @staticmethod
    def insufficient_height():
        return "⚠️ Raise arms to shoulder height"


_ERROR_MESSAGES = {
    FormError.ARM_TOO_HIGH_LEFT: FeedbackGenerator.arm_too_high,
    FormError.ARM_TOO_HIGH_RIGHT: FeedbackGenerator.arm_too_high,
    FormError.ASYMMETRIC_MOVEMENT: FeedbackGenerator.asymmetric,
    FormError.ELBOW_BENT_LEFT: FeedbackGenerator.elbow_bent,
    FormError.ELBOW_BENT_RIGHT: FeedbackGenerator.elbow_bent,
    FormError.TOO_FAST_RAISING: FeedbackGenerator.too_fast,
    FormError.INSUFFICIENT_HEIGHT: FeedbackGenerator.insufficient_height,
}


def resolve_penalties(penalties: Optional[Mapping[str, int]] = None) -> Dict[FormError, int]:
    """Map config penalty names onto FormError members. Every member must have a penalty."""
    penalties = penalties or {}
    resolved = {}
    for error in FormError:
        if error.value not in penalties:
            raise ValueError(f"No penalty configured for form error '{error.value}'")
        resolved[error] = int(penalties[error.value])
    return resolved


def calculate_form_score(errors: Iterable[FormError], penalties: Mapping[FormError, int]) -> int:
    """Start from 100, subtract one penalty per distinct error, clamp to [0, 100]."""
    score = MAX_FORM_SCORE
    for error in set(errors):
        score -= penalties[error]
    return max(0, min(MAX_FORM_SCORE, score))


def compose_feedback(errors: Iterable[FormError], phase: ArmRaisePhase, average_angle: float) -> str:
    """
    Pick the single message to show for this frame.

    Without errors the message encourages the current phase; otherwise it corrects
    the highest priority error only.
    """
    ordered = order_errors(errors)
    if ordered:
        return _ERROR_MESSAGES[ordered[0]]()

    if phase == ArmRaisePhase.RESTING:
        return FeedbackGenerator.resting()
    if phase == ArmRaisePhase.RAISING:
        return FeedbackGenerator.raising(average_angle)
    if phase == ArmRaisePhase.HOLDING:
        return FeedbackGenerator.holding(average_angle)
    return FeedbackGenerator.lowering()


def overlay_status(error_count: int) -> str:
    """Overlay colour key for the UI: good, warning (1-2 errors) or error (3+)."""
    if error_count == 0:
        return "good"
    if error_count <= 2:
        return "warning"
    return "error"
