import logging
from collections import deque
from typing import Any, Dict, Optional, Sequence

from .exercise_analysis.base_analyzer import EXERCISE_ANALYZER_REGISTRY, ExerciseProgress
from .exercise_analysis.config_utils import load_arm_raise_config
# Importing the analyzer module registers it
from .exercise_analysis import arm_raise_analyzer  # noqa: F401
from .pose_detection.base_source import BaseLandmarkSource

# --- Logger Setup ---
logger = logging.getLogger("ExerciseSession")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

MISSING_BODY_WARNING = "We can't see your full body. Please adjust your position or camera."


class ExerciseSession:
    """Drives one exercise session: feeds frames to the analyzer and tracks session-level state."""

    def __init__(self, exercise_type: str = "arm_raises", config: Optional[Dict[str, Any]] = None,
                 config_path: Optional[str] = None):
        """
        Initialize the session.

        Args:
            exercise_type: Registered exercise analyzer to use
            config: Parsed analyzer config; takes precedence over config_path
            config_path: Path to a JSON config file
        """
        if exercise_type not in EXERCISE_ANALYZER_REGISTRY:
            raise ValueError(f"Unsupported exercise type: {exercise_type}. "
                             f"Available: {', '.join(sorted(EXERCISE_ANALYZER_REGISTRY))}")
        if config is None and config_path is not None:
            config = load_arm_raise_config(config_path)
        self.exercise_type = exercise_type
        self.exercise_analyzer = EXERCISE_ANALYZER_REGISTRY[exercise_type](config=config)

        # Recent results for temporal inspection by UI collaborators
        self.result_buffer = deque(maxlen=30)

        self.is_running = False
        self.frames_processed = 0
        self.frames_skipped = 0
        self.missing_landmarks_counter = 0
        self.missing_landmarks_threshold = 30  # ~1 second at 30fps
        self._last_rep_count = 0

    def start(self) -> None:
        """Start (or restart) the session from a clean state."""
        self.exercise_analyzer.reset()
        self.result_buffer.clear()
        self.frames_processed = 0
        self.frames_skipped = 0
        self.missing_landmarks_counter = 0
        self._last_rep_count = 0
        self.is_running = True
        logger.info(f"Session started: {self.exercise_analyzer.get_exercise_name()}")

    def stop(self) -> ExerciseProgress:
        """Stop the session and return the final progress."""
        self.is_running = False
        progress = self.exercise_analyzer.get_progress()
        logger.info(
            f"Session finished: {progress.rep_count} reps, form score {progress.form_score}, "
            f"{self.frames_processed} frames analyzed, {self.frames_skipped} skipped"
        )
        return progress

    def reset(self) -> None:
        self.start()

    def get_progress(self) -> ExerciseProgress:
        return self.exercise_analyzer.get_progress()

    def process_frame(self, landmarks: Sequence[Any], timestamp: Optional[float] = None) -> Dict[str, Any]:
        """
        Process a single frame of landmarks.

        Args:
            landmarks: Ordered landmark records for one frame
            timestamp: Capture time in seconds; defaults to the current time

        Returns:
            Dictionary containing processing results
        """
        result = self.exercise_analyzer.analyze_frame(landmarks, timestamp)
        if result is None:
            self.frames_skipped += 1
            self.missing_landmarks_counter += 1
            if self.missing_landmarks_counter == self.missing_landmarks_threshold:
                logger.warning(MISSING_BODY_WARNING)
            else:
                logger.debug("Frame skipped: incomplete landmarks")
            return {
                "result": None,
                "feedback": None,
                "overlay": None,
                "rep_completed": False,
                "error": MISSING_BODY_WARNING if self.missing_landmarks_counter >= self.missing_landmarks_threshold
                else "No pose detected"
            }

        self.missing_landmarks_counter = 0
        self.frames_processed += 1
        self.result_buffer.append(result)

        rep_completed = result.rep_count > self._last_rep_count
        self._last_rep_count = result.rep_count
        if result.phase_changed:
            logger.debug(f"Phase: {result.previous_phase.value} -> {result.phase.value}")

        return {
            "result": result,
            "feedback": result.feedback,
            "overlay": result.overlay_status,
            "rep_completed": rep_completed,
            "error": None
        }

    def run(self, source: BaseLandmarkSource, on_result=None) -> ExerciseProgress:
        """
        Feed every frame from a landmark source through the session.

        Args:
            source: Landmark source to drain
            on_result: Optional callback receiving each process_frame dictionary

        Returns:
            Final progress
        """
        self.start()
        try:
            for landmarks, timestamp in source:
                output = self.process_frame(landmarks, timestamp)
                if on_result is not None:
                    on_result(output)
        finally:
            source.close()
        return self.stop()
