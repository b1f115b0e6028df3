import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from .arm_raise_state import AnalyzerState, ArmRaisePhase
from .base_analyzer import AnalysisResult, BaseExerciseAnalyzer, ExerciseProgress, register_exercise_analyzer
from .config_utils import ArmRaiseThresholds, load_arm_raise_config
from .form_checks import detect_form_errors, order_errors
from .pose_utils import (ARM_LANDMARKS, LANDMARK_INDEX, calculate_arm_angles, calculate_confidence,
                         to_landmark)
from .scoring import calculate_form_score, compose_feedback, resolve_penalties

_ARM_RAISE_CONFIG = load_arm_raise_config()

# --- Logger Setup ---
logger = logging.getLogger("ArmRaiseAnalyzer")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

_IN_REP_PHASES = (ArmRaisePhase.RAISING, ArmRaisePhase.HOLDING, ArmRaisePhase.LOWERING)


@register_exercise_analyzer("arm_raises")
class ArmRaiseAnalyzer(BaseExerciseAnalyzer):
    """
    Lateral arm raise analyzer.

    Consumes one frame of 33 pose landmarks per call and tracks phase, reps,
    form errors and form score. Phase changes are driven by the smoothed average
    arm elevation; a rep counts when the arms return to rest after peaking at or
    above min_peak_angle.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, thresholds: Optional[ArmRaiseThresholds] = None):
        """
        Initialize the analyzer.

        Args:
            config: Parsed config dictionary (see arm_raise_config.json); defaults to the packaged config
            thresholds: Ready-made thresholds; takes precedence over config
        """
        if thresholds is None:
            thresholds = ArmRaiseThresholds.from_config(config if config is not None else _ARM_RAISE_CONFIG)
        else:
            thresholds.validate()
        self.thresholds = thresholds
        self._penalties = resolve_penalties(thresholds.penalties)
        self._state = AnalyzerState.create(thresholds.smoothing_window, thresholds.confidence_history_size)
        self._transitions: Dict[ArmRaisePhase, Callable[[float, float], Optional[ArmRaisePhase]]] = {
            ArmRaisePhase.RESTING: self._from_resting,
            ArmRaisePhase.RAISING: self._from_raising,
            ArmRaisePhase.HOLDING: self._from_holding,
            ArmRaisePhase.LOWERING: self._from_lowering,
        }

    # --- Public surface ---
    def get_exercise_name(self) -> str:
        return "arm_raises"

    def get_required_landmarks(self) -> List[str]:
        return list(ARM_LANDMARKS)

    @property
    def rep_count(self) -> int:
        return self._state.rep_count

    @property
    def current_phase(self) -> ArmRaisePhase:
        return self._state.current_phase

    @property
    def form_score(self) -> int:
        return self._state.form_score

    @property
    def calibrated(self) -> bool:
        return self._state.calibrated

    @property
    def resting_shoulder_y(self):
        return self._state.resting_shoulder_y

    def get_progress(self) -> ExerciseProgress:
        return ExerciseProgress(
            rep_count=self._state.rep_count,
            current_phase=self._state.current_phase,
            form_score=self._state.form_score,
            is_exercising=self._state.current_phase != ArmRaisePhase.RESTING
        )

    def reset(self) -> None:
        self._state.reset()
        logger.debug("Arm raise analyzer reset.")

    def analyze_frame(self, landmarks: Sequence[Any], timestamp: Optional[float] = None) -> Optional[AnalysisResult]:
        now = time.time() if timestamp is None else timestamp

        angles = calculate_arm_angles(landmarks)
        if angles is None:
            logger.debug(f"Skipping frame: need {len(LANDMARK_INDEX)} finite landmarks, "
                         f"got {0 if landmarks is None else len(landmarks)}")
            return None

        state = self._state
        confidence = calculate_confidence(landmarks, ARM_LANDMARKS)
        state.confidence_history.append(confidence)

        smoothed = state.smoother.update(angles.average_arm)
        self._update_phase_state_machine(smoothed, now)
        self._update_calibration(smoothed, landmarks)

        errors = detect_form_errors(angles, state.current_phase, state.current_rep, self.thresholds)
        state.errors = errors
        state.form_score = calculate_form_score(errors, self._penalties)
        feedback = compose_feedback(errors, state.current_phase, angles.average_arm)

        rep = state.current_rep
        return AnalysisResult(
            phase=state.current_phase,
            previous_phase=state.previous_phase,
            angles=angles,
            smoothed_angle=smoothed,
            errors=order_errors(errors),
            rep_count=state.rep_count,
            form_score=state.form_score,
            feedback=feedback,
            hold_duration=rep.hold_duration,
            hold_complete=rep.hold_complete,
            hold_progress=self._get_hold_progress(),
            confidence=confidence,
            is_stable=self._is_pose_stable()
        )

    # --- Phase state machine ---
    def _update_phase_state_machine(self, angle: float, now: float) -> None:
        state = self._state
        phase = state.current_phase
        new_phase = self._transitions[phase](angle, now)
        state.previous_phase = phase
        if new_phase is not None and new_phase != phase:
            self._enter_phase(new_phase, phase, now)
            state.current_phase = new_phase
            logger.debug(f"[PHASE] {phase.value} -> {new_phase.value} (angle={angle:.1f})")
        if state.current_phase in _IN_REP_PHASES:
            state.current_rep.update_peak(angle)

    def _from_resting(self, angle: float, now: float) -> Optional[ArmRaisePhase]:
        if angle > self.thresholds.resting_max:
            return ArmRaisePhase.RAISING
        return None

    def _from_raising(self, angle: float, now: float) -> Optional[ArmRaisePhase]:
        if self.thresholds.hold_min <= angle <= self.thresholds.hold_max:
            return ArmRaisePhase.HOLDING
        if angle < self.thresholds.resting_max:
            return ArmRaisePhase.RESTING
        return None

    def _from_holding(self, angle: float, now: float) -> Optional[ArmRaisePhase]:
        rep = self._state.current_rep
        rep.hold_duration = max(0.0, now - rep.hold_start_time)
        if rep.hold_duration >= self.thresholds.hold_seconds:
            rep.hold_complete = True
        # Exit tolerance is wider than the entry band so the phase does not flap at hold_min
        if rep.hold_complete or angle < self.thresholds.hold_exit_angle:
            return ArmRaisePhase.LOWERING
        return None

    def _from_lowering(self, angle: float, now: float) -> Optional[ArmRaisePhase]:
        if angle < self.thresholds.resting_max:
            return ArmRaisePhase.RESTING
        return None

    def _enter_phase(self, new_phase: ArmRaisePhase, old_phase: ArmRaisePhase, now: float) -> None:
        state = self._state
        rep = state.current_rep
        if new_phase == ArmRaisePhase.RAISING:
            state.close_rep()
            state.current_rep.start_time = now
        elif new_phase == ArmRaisePhase.HOLDING:
            rep.raise_duration = now - rep.start_time
            rep.hold_start_time = now
            rep.hold_duration = 0.0
        elif new_phase == ArmRaisePhase.RESTING:
            if old_phase == ArmRaisePhase.LOWERING:
                if rep.peak_angle >= self.thresholds.min_peak_angle:
                    state.rep_count += 1
                    logger.info(f"Rep {state.rep_count} completed! Peak angle: {rep.peak_angle:.1f}°")
                else:
                    logger.info(f"Rep not counted: peak angle {rep.peak_angle:.1f}° "
                                f"below {self.thresholds.min_peak_angle:.0f}°")
            else:
                logger.debug("Raise abandoned before reaching the target band.")
            state.close_rep()

    # --- Helpers ---
    def _update_calibration(self, angle: float, landmarks: Sequence[Any]) -> None:
        state = self._state
        if state.calibrated or state.current_phase != ArmRaisePhase.RESTING:
            return
        if angle < self.thresholds.resting_max:
            left = to_landmark(landmarks[LANDMARK_INDEX["left_shoulder"]])
            right = to_landmark(landmarks[LANDMARK_INDEX["right_shoulder"]])
            state.resting_shoulder_y = (left.y, right.y)
            state.calibrated = True
            logger.debug(f"Calibrated resting shoulder height: left={left.y:.3f}, right={right.y:.3f}")

    def _get_hold_progress(self) -> float:
        state = self._state
        if state.current_phase != ArmRaisePhase.HOLDING or state.current_rep.hold_start_time is None:
            return 0.0
        return min(100.0, state.current_rep.hold_duration / self.thresholds.hold_seconds * 100.0)

    def _is_pose_stable(self) -> bool:
        history = self._state.confidence_history
        window = self.thresholds.stable_window
        if len(history) < window:
            return False
        recent = list(history)[-window:]
        return float(np.mean(recent)) > self.thresholds.stable_min_confidence
