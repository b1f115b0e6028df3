from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, FrozenSet, Optional, Tuple

from .pose_utils import AngleSmoother


class ArmRaisePhase(Enum):
    """Arm raise exercise phases."""
    RESTING = "resting"     # Arms down by the sides
    RAISING = "raising"     # Arms travelling up towards shoulder height
    HOLDING = "holding"     # Arms held in the target band
    LOWERING = "lowering"   # Arms travelling back down


@dataclass
class RepRecord:
    """Timing and height bookkeeping for the rep in progress. Times are in seconds."""
    start_time: Optional[float] = None
    raise_duration: Optional[float] = None
    peak_angle: float = 0.0
    hold_start_time: Optional[float] = None
    hold_duration: float = 0.0
    hold_complete: bool = False

    def update_peak(self, angle: float) -> None:
        if angle > self.peak_angle:
            self.peak_angle = angle


@dataclass
class AnalyzerState:
    """All mutable state of one arm raise session."""
    smoother: AngleSmoother
    confidence_history: Deque[float]
    current_phase: ArmRaisePhase = ArmRaisePhase.RESTING
    previous_phase: ArmRaisePhase = ArmRaisePhase.RESTING
    rep_count: int = 0
    current_rep: RepRecord = field(default_factory=RepRecord)
    errors: FrozenSet = frozenset()
    form_score: int = 100
    calibrated: bool = False
    resting_shoulder_y: Optional[Tuple[float, float]] = None

    @classmethod
    def create(cls, smoothing_window: int = 5, confidence_history_size: int = 30) -> "AnalyzerState":
        return cls(
            smoother=AngleSmoother(smoothing_window),
            confidence_history=deque(maxlen=confidence_history_size)
        )

    def reset(self) -> None:
        """Return every field to its initial value, keeping the same buffers."""
        self.smoother.clear()
        self.confidence_history.clear()
        self.current_phase = ArmRaisePhase.RESTING
        self.previous_phase = ArmRaisePhase.RESTING
        self.rep_count = 0
        self.current_rep = RepRecord()
        self.errors = frozenset()
        self.form_score = 100
        self.calibrated = False
        self.resting_shoulder_y = None

    def close_rep(self) -> None:
        self.current_rep = RepRecord()
