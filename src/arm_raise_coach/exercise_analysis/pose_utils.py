"""
pose_utils.py - Shared utilities for landmark handling, arm geometry, and smoothing.
"""
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

# --- Landmark Topology ---
POSE_LANDMARK_NAMES = [
    "nose", "left_eye_inner", "left_eye", "left_eye_outer",
    "right_eye_inner", "right_eye", "right_eye_outer", "left_ear",
    "right_ear", "mouth_left", "mouth_right", "left_shoulder",
    "right_shoulder", "left_elbow", "right_elbow", "left_wrist",
    "right_wrist", "left_pinky", "right_pinky", "left_index",
    "right_index", "left_thumb", "right_thumb", "left_hip",
    "right_hip", "left_knee", "right_knee", "left_ankle",
    "right_ankle", "left_heel", "right_heel", "left_foot_index",
    "right_foot_index"
]
LANDMARK_INDEX = {name: idx for idx, name in enumerate(POSE_LANDMARK_NAMES)}
NUM_POSE_LANDMARKS = len(POSE_LANDMARK_NAMES)

# Landmarks read by the arm raise analysis
ARM_LANDMARKS = [
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip"
]


@dataclass(frozen=True)
class Landmark:
    """Normalized image-space keypoint. y grows downwards, z is relative depth."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite([self.x, self.y, self.z])))


def to_landmark(raw: Any) -> Landmark:
    """
    Coerce one landmark record into a Landmark.

    Accepts a Landmark, a {"x", "y", "z", "visibility"} mapping or a
    [x, y, z, visibility] sequence (z and visibility optional in both), or any
    object exposing x, y, z and visibility attributes.
    """
    if isinstance(raw, Landmark):
        return raw
    if isinstance(raw, Mapping):
        if "x" not in raw or "y" not in raw:
            raise ValueError(f"Landmark needs at least x and y, got keys {sorted(raw)!r}")
        return Landmark(
            float(raw["x"]),
            float(raw["y"]),
            float(raw.get("z", 0.0)),
            float(raw.get("visibility", 1.0))
        )
    if hasattr(raw, "x") and hasattr(raw, "y"):
        return Landmark(
            float(raw.x),
            float(raw.y),
            float(getattr(raw, "z", 0.0)),
            float(getattr(raw, "visibility", 1.0))
        )
    values = list(raw)
    if len(values) < 2:
        raise ValueError(f"Landmark needs at least x and y, got {values!r}")
    z = float(values[2]) if len(values) > 2 else 0.0
    visibility = float(values[3]) if len(values) > 3 else 1.0
    return Landmark(float(values[0]), float(values[1]), z, visibility)


# --- Math & Geometry Utilities ---
def calculate_angle(a: Landmark, b: Landmark, c: Landmark, use_depth: bool = False) -> float:
    """
    Calculate the angle at point b between vectors ba and bc.

    Point ordering convention:
    - a: First point (e.g., shoulder for elbow angle)
    - b: Middle point (e.g., elbow for elbow angle)
    - c: Last point (e.g., wrist for elbow angle)

    Args:
        a: First landmark
        b: Middle landmark - angle is calculated here
        c: Last landmark
        use_depth: If True, include z in the vectors, otherwise use image-plane x/y only
    Returns:
        Angle in degrees in [0, 180]. Zero-length vectors give 180 (joint treated as straight).
    """
    if use_depth:
        ba = np.array([a.x - b.x, a.y - b.y, a.z - b.z])
        bc = np.array([c.x - b.x, c.y - b.y, c.z - b.z])
    else:
        ba = np.array([a.x - b.x, a.y - b.y])
        bc = np.array([c.x - b.x, c.y - b.y])
    norm_ba = np.linalg.norm(ba)
    norm_bc = np.linalg.norm(bc)
    if norm_ba < 1e-6 or norm_bc < 1e-6:
        return 180.0
    cosine_angle = np.dot(ba, bc) / (norm_ba * norm_bc)
    cosine_angle = np.clip(cosine_angle, -1.0, 1.0)
    return float(np.degrees(np.arccos(cosine_angle)))


def calculate_elevation_angle(shoulder: Landmark, wrist: Landmark) -> float:
    """
    Angle of the shoulder->wrist line against the body vertical.

    0 means the arm hangs straight down, 90 horizontal, 180 straight up.
    Below shoulder height the angle is atan(|dx|/|dy|); at or above it is 90 + atan(|dy|/|dx|).
    """
    delta_x = abs(wrist.x - shoulder.x)
    delta_y = abs(wrist.y - shoulder.y)
    if delta_x < 1e-9 and delta_y < 1e-9:
        return 0.0
    if wrist.y > shoulder.y:
        angle = np.degrees(np.arctan2(delta_x, delta_y))
    else:
        angle = 90.0 + np.degrees(np.arctan2(delta_y, delta_x))
    return float(np.clip(angle, 0.0, 180.0))


@dataclass(frozen=True)
class AngleSet:
    """Per-frame arm angles in degrees."""
    left_arm: float
    right_arm: float
    left_elbow: float
    right_elbow: float
    average_arm: float
    symmetry_diff: float


def calculate_arm_angles(landmarks: Sequence[Any]) -> Optional[AngleSet]:
    """
    Compute elevation and elbow angles for both arms from one frame.

    Args:
        landmarks: Ordered sequence of at least 33 landmark records

    Returns:
        AngleSet, or None if the frame is too short or a consumed landmark is not finite
    """
    if landmarks is None or len(landmarks) < NUM_POSE_LANDMARKS:
        return None
    try:
        points = {name: to_landmark(landmarks[LANDMARK_INDEX[name]]) for name in ARM_LANDMARKS}
    except (TypeError, ValueError) as e:
        logger.debug(f"Unreadable landmark in frame: {e}")
        return None
    if not all(point.is_finite() for point in points.values()):
        return None

    left_arm = calculate_elevation_angle(points["left_shoulder"], points["left_wrist"])
    right_arm = calculate_elevation_angle(points["right_shoulder"], points["right_wrist"])
    left_elbow = calculate_angle(points["left_shoulder"], points["left_elbow"], points["left_wrist"])
    right_elbow = calculate_angle(points["right_shoulder"], points["right_elbow"], points["right_wrist"])
    return AngleSet(
        left_arm=left_arm,
        right_arm=right_arm,
        left_elbow=left_elbow,
        right_elbow=right_elbow,
        average_arm=(left_arm + right_arm) / 2,
        symmetry_diff=abs(left_arm - right_arm)
    )


def calculate_confidence(landmarks: Sequence[Any], names: Optional[List[str]] = None) -> float:
    """
    Mean visibility of the named landmarks.

    Returns:
        Confidence score between 0 and 1 (0: not visible, 1: fully visible)
    """
    if names is None:
        names = ARM_LANDMARKS
    visibilities = []
    for name in names:
        idx = LANDMARK_INDEX[name]
        if idx < len(landmarks):
            visibilities.append(to_landmark(landmarks[idx]).visibility)
    if not visibilities:
        return 0.0
    return float(np.mean(visibilities))


# --- Smoothing ---
class AngleSmoother:
    """Rolling mean over the last `capacity` samples; oldest sample is evicted first."""

    def __init__(self, capacity: int = 5):
        if capacity < 1:
            raise ValueError(f"Smoother capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._history = deque(maxlen=capacity)

    def update(self, value: float) -> float:
        self._history.append(value)
        return self.mean

    @property
    def mean(self) -> Optional[float]:
        if not self._history:
            return None
        return float(np.mean(self._history))

    @property
    def values(self) -> List[float]:
        return list(self._history)

    def clear(self) -> None:
        self._history.clear()

    def __len__(self) -> int:
        return len(self._history)
