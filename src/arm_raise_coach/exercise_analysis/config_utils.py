import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "arm_raise_config.json")


def load_arm_raise_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load arm raise config from JSON file."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        try:
            config = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")
    return config


# Float thresholds each config section may set
_FLOAT_SECTIONS = {
    "phase_thresholds": ("resting_max", "hold_min", "hold_max", "hold_exit_margin", "hold_seconds", "min_peak_angle"),
    "form_rules": ("arm_max_angle", "symmetry_tolerance", "elbow_min_angle", "min_raise_seconds"),
}


def _default_penalties() -> Dict[str, int]:
    return {
        "arm_too_high_left": 10,
        "arm_too_high_right": 10,
        "asymmetric_movement": 20,
        "elbow_bent_left": 10,
        "elbow_bent_right": 10,
        "too_fast_raising": 15,
        "insufficient_height": 25,
    }


@dataclass(frozen=True)
class ArmRaiseThresholds:
    """Tunable constants for the arm raise analyzer (angles in degrees, times in seconds)."""
    smoothing_window: int = 5
    # Phase machine
    resting_max: float = 30.0  # below this the arms count as lowered
    hold_min: float = 80.0  # target band lower bound
    hold_max: float = 100.0  # target band upper bound
    hold_exit_margin: float = 20.0  # HOLDING exits below hold_min - margin
    hold_seconds: float = 3.0
    min_peak_angle: float = 70.0  # minimum peak for a rep to count
    # Form rules
    arm_max_angle: float = 110.0
    symmetry_tolerance: float = 15.0
    elbow_min_angle: float = 140.0
    min_raise_seconds: float = 1.5
    # Pose confidence tracking
    confidence_history_size: int = 30
    stable_window: int = 5
    stable_min_confidence: float = 0.7
    penalties: Dict[str, int] = field(default_factory=_default_penalties)

    @property
    def hold_exit_angle(self) -> float:
        return self.hold_min - self.hold_exit_margin

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "ArmRaiseThresholds":
        """
        Build thresholds from a config dictionary shaped like arm_raise_config.json.

        Missing values fall back to the dataclass defaults; unknown keys are logged and ignored.

        Args:
            config: Parsed config, or None to load the packaged default file

        Returns:
            ArmRaiseThresholds instance
        """
        if config is None:
            config = load_arm_raise_config()

        values: Dict[str, Any] = {}

        if "smoothing_window" in config:
            values["smoothing_window"] = int(config["smoothing_window"])

        for section, section_keys in _FLOAT_SECTIONS.items():
            for key, value in config.get(section, {}).items():
                if key not in section_keys:
                    logger.warning(f"Ignoring unknown key '{key}' in config section '{section}'")
                    continue
                values[key] = float(value)

        confidence_cfg = config.get("confidence", {})
        if "history_size" in confidence_cfg:
            values["confidence_history_size"] = int(confidence_cfg["history_size"])
        if "stable_window" in confidence_cfg:
            values["stable_window"] = int(confidence_cfg["stable_window"])
        if "stable_min_confidence" in confidence_cfg:
            values["stable_min_confidence"] = float(confidence_cfg["stable_min_confidence"])

        penalties = _default_penalties()
        for key, value in config.get("form_penalties", {}).items():
            if key not in penalties:
                logger.warning(f"Ignoring penalty for unknown form error '{key}'")
                continue
            penalties[key] = int(value)
        values["penalties"] = penalties

        thresholds = cls(**values)
        thresholds.validate()
        return thresholds

    def validate(self) -> None:
        for name in ("smoothing_window", "confidence_history_size", "stable_window"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.smoothing_window < 1:
            raise ValueError(f"smoothing_window must be at least 1, got {self.smoothing_window}")
        if not self.resting_max < self.hold_min <= self.hold_max:
            raise ValueError(
                f"Phase thresholds must satisfy resting_max < hold_min <= hold_max "
                f"(got {self.resting_max}, {self.hold_min}, {self.hold_max})"
            )
        if self.hold_exit_margin < 0:
            raise ValueError("hold_exit_margin must not be negative")
        if self.hold_seconds <= 0:
            raise ValueError("hold_seconds must be positive")
        if self.confidence_history_size < self.stable_window or self.stable_window < 1:
            raise ValueError("confidence history must hold at least one stability window")
