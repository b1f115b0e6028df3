"""Shared fixtures: synthetic 33-point frames with controllable arm angles."""

import math
from typing import List, Optional, Sequence

import pytest

from arm_raise_coach.exercise_analysis import ArmRaiseAnalyzer

ARM_LENGTH = 0.2
LEFT_SHOULDER = (0.6, 0.3)
RIGHT_SHOULDER = (0.4, 0.3)


def _arm_points(shoulder, elevation_deg, outward, elbow_bend):
    """Wrist and elbow for an arm raised `elevation_deg` from straight down."""
    theta = math.radians(elevation_deg)
    sx, sy = shoulder
    dx, dy = outward * math.sin(theta), math.cos(theta)
    wrist = (sx + ARM_LENGTH * dx, sy + ARM_LENGTH * dy)
    mid = ((sx + wrist[0]) / 2, (sy + wrist[1]) / 2)
    # Push the elbow off the shoulder-wrist line to bend it
    perp = (dy, -dx)
    elbow = (mid[0] + elbow_bend * perp[0], mid[1] + elbow_bend * perp[1])
    return elbow, wrist


def make_frame(left: float = 0.0, right: Optional[float] = None, left_elbow_bend: float = 0.0,
               right_elbow_bend: float = 0.0, visibility: float = 0.9, count: int = 33) -> List[List[float]]:
    """Build one frame of [x, y, z, visibility] landmarks."""
    if right is None:
        right = left
    frame = [[0.5, 0.5, 0.0, visibility] for _ in range(33)]
    left_elbow, left_wrist = _arm_points(LEFT_SHOULDER, left, 1.0, left_elbow_bend)
    right_elbow, right_wrist = _arm_points(RIGHT_SHOULDER, right, -1.0, right_elbow_bend)
    frame[11] = [LEFT_SHOULDER[0], LEFT_SHOULDER[1], 0.0, visibility]
    frame[12] = [RIGHT_SHOULDER[0], RIGHT_SHOULDER[1], 0.0, visibility]
    frame[13] = [left_elbow[0], left_elbow[1], 0.0, visibility]
    frame[14] = [right_elbow[0], right_elbow[1], 0.0, visibility]
    frame[15] = [left_wrist[0], left_wrist[1], 0.0, visibility]
    frame[16] = [right_wrist[0], right_wrist[1], 0.0, visibility]
    frame[23] = [0.58, 0.6, 0.0, visibility]
    frame[24] = [0.42, 0.6, 0.0, visibility]
    return frame[:count]


def feed(analyzer, angles: Sequence[float], start: float = 0.0, dt: float = 1.0, repeat: int = 1, **frame_kwargs):
    """Feed one frame per angle (each repeated `repeat` times) with evenly spaced timestamps."""
    results = []
    index = 0
    for angle in angles:
        for _ in range(repeat):
            results.append(analyzer.analyze_frame(make_frame(angle, **frame_kwargs), start + index * dt))
            index += 1
    return results


def phase_path(results) -> List[str]:
    """Visited phases with consecutive duplicates removed."""
    path = []
    for result in results:
        if not path or path[-1] != result.phase.value:
            path.append(result.phase.value)
    return path


@pytest.fixture
def analyzer():
    return ArmRaiseAnalyzer()


@pytest.fixture
def unsmoothed_analyzer():
    """Analyzer whose smoothing window is a single frame, so phases follow the raw angle."""
    return ArmRaiseAnalyzer(config={"smoothing_window": 1})
