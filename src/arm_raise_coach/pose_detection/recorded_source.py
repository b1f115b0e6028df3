import json
import os
from typing import Any, List, Optional, Tuple

from .base_source import BaseLandmarkSource


class RecordedLandmarkSource(BaseLandmarkSource):
    """
    Replays landmark frames saved as JSON.

    The file holds either a list of frames or {"frames": [...]}. Each frame is either
    {"timestamp": seconds, "landmarks": [...]} or a bare landmark list. A landmark is
    [x, y, z, visibility] or {"x": ..., "y": ..., "z": ..., "visibility": ...}.
    """

    def __init__(self, path: str):
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Recording not found: {path}")
        with open(path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in recording {path}: {e}") from e
        if isinstance(data, dict):
            data = data.get("frames")
        if not isinstance(data, list):
            raise ValueError(f"Recording {path} must contain a list of frames")
        self.path = path
        self._frames = data
        self._position = 0

    def __len__(self) -> int:
        return len(self._frames)

    def read(self) -> Tuple[bool, Optional[List[Any]], Optional[float]]:
        if self._position >= len(self._frames):
            return False, None, None
        frame = self._frames[self._position]
        self._position += 1
        if isinstance(frame, dict):
            timestamp = frame.get("timestamp")
            return True, frame.get("landmarks") or [], None if timestamp is None else float(timestamp)
        return True, frame, None

    def rewind(self) -> None:
        self._position = 0
