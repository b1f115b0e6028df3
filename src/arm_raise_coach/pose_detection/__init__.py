from .base_source import BaseLandmarkSource
from .recorded_source import RecordedLandmarkSource

__all__ = ['BaseLandmarkSource', 'RecordedLandmarkSource']
