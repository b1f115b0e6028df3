"""
Exercise analysis package for arm raise phase tracking, rep counting and form scoring.
"""

from .arm_raise_analyzer import ArmRaiseAnalyzer
from .arm_raise_state import AnalyzerState, ArmRaisePhase, RepRecord
from .base_analyzer import (EXERCISE_ANALYZER_REGISTRY, AnalysisResult, BaseExerciseAnalyzer,
                            ExerciseProgress, register_exercise_analyzer)
from .config_utils import ArmRaiseThresholds, load_arm_raise_config
from .form_checks import FormError, detect_form_errors
from .pose_utils import AngleSet, AngleSmoother, Landmark, calculate_arm_angles
from .scoring import calculate_form_score, compose_feedback, overlay_status

__all__ = [
    'ArmRaiseAnalyzer',
    'AnalyzerState',
    'ArmRaisePhase',
    'RepRecord',
    'EXERCISE_ANALYZER_REGISTRY',
    'AnalysisResult',
    'BaseExerciseAnalyzer',
    'ExerciseProgress',
    'register_exercise_analyzer',
    'ArmRaiseThresholds',
    'load_arm_raise_config',
    'FormError',
    'detect_form_errors',
    'AngleSet',
    'AngleSmoother',
    'Landmark',
    'calculate_arm_angles',
    'calculate_form_score',
    'compose_feedback',
    'overlay_status'
]
