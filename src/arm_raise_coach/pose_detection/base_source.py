from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple


class BaseLandmarkSource(ABC):
    """Base class for anything that supplies pose landmark frames."""

    @abstractmethod
    def read(self) -> Tuple[bool, Optional[List[Any]], Optional[float]]:
        """
        Read the next frame of landmarks.

        Returns:
            Tuple containing:
            - Boolean indicating if a frame was available
            - Ordered list of landmark records (if available) or None
            - Capture timestamp in seconds, or None to use the current time
        """
        pass

    def close(self) -> None:
        """Release any resources held by the source."""
        pass

    def __iter__(self):
        while True:
            ok, landmarks, timestamp = self.read()
            if not ok:
                return
            yield landmarks, timestamp

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
