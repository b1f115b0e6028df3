from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .arm_raise_state import ArmRaisePhase
from .form_checks import FormError
from .pose_utils import AngleSet
from .scoring import overlay_status


@dataclass(frozen=True)
class AnalysisResult:
    """Snapshot of one analyzed frame. The analyzer keeps no reference to it."""
    phase: ArmRaisePhase
    previous_phase: ArmRaisePhase
    angles: AngleSet
    smoothed_angle: float
    errors: Tuple[FormError, ...]  # feedback priority order
    rep_count: int
    form_score: int
    feedback: str
    hold_duration: float  # seconds
    hold_complete: bool
    hold_progress: float  # percent of the target hold time
    confidence: float  # mean visibility of the arm landmarks, 0 to 1
    is_stable: bool

    @property
    def phase_changed(self) -> bool:
        return self.phase != self.previous_phase

    @property
    def overlay_status(self) -> str:
        return overlay_status(len(self.errors))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "previous_phase": self.previous_phase.value,
            "angles": {
                "left_arm": round(self.angles.left_arm, 2),
                "right_arm": round(self.angles.right_arm, 2),
                "left_elbow": round(self.angles.left_elbow, 2),
                "right_elbow": round(self.angles.right_elbow, 2),
                "average_arm": round(self.angles.average_arm, 2),
                "symmetry_diff": round(self.angles.symmetry_diff, 2),
            },
            "smoothed_angle": round(self.smoothed_angle, 2),
            "errors": [error.value for error in self.errors],
            "rep_count": self.rep_count,
            "form_score": self.form_score,
            "feedback": self.feedback,
            "hold_duration": round(self.hold_duration, 3),
            "hold_complete": self.hold_complete,
            "hold_progress": round(self.hold_progress, 1),
            "confidence": round(self.confidence, 3),
            "is_stable": self.is_stable,
            "overlay": self.overlay_status,
        }


@dataclass(frozen=True)
class ExerciseProgress:
    """Read-only progress view of a session."""
    rep_count: int
    current_phase: ArmRaisePhase
    form_score: int
    is_exercising: bool


# --- Exercise Analyzer Registry ---
EXERCISE_ANALYZER_REGISTRY = {}

def register_exercise_analyzer(exercise_type):
    def decorator(cls):
        EXERCISE_ANALYZER_REGISTRY[exercise_type] = cls
        return cls
    return decorator


class BaseExerciseAnalyzer(ABC):
    """Base class for exercise analysis implementations."""

    @abstractmethod
    def analyze_frame(self, landmarks: Sequence[Any], timestamp: Optional[float] = None) -> Optional[AnalysisResult]:
        """
        Analyze a single frame of exercise performance.

        Args:
            landmarks: Ordered landmark records for one frame
            timestamp: Capture time in seconds; defaults to the current wall-clock time

        Returns:
            AnalysisResult, or None if the frame could not be analyzed
        """
        pass

    @abstractmethod
    def reset(self) -> None:
        """Clear all session state."""
        pass

    @abstractmethod
    def get_progress(self) -> ExerciseProgress:
        """Get the current progress of the session."""
        pass

    @abstractmethod
    def get_exercise_name(self) -> str:
        """Get the name of the exercise being analyzed."""
        pass

    @abstractmethod
    def get_required_landmarks(self) -> List[str]:
        """Get the list of landmarks required for this exercise."""
        pass

    def analyze(self, landmarks: Sequence[Any], timestamp: Optional[float] = None) -> Optional[AnalysisResult]:
        return self.analyze_frame(landmarks, timestamp)
