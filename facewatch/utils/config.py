"""
Configuration management for the FaceWatch auto-lock service.

All knobs have working defaults; a JSON file may override any of them.
"""

import os
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, List
import json


@dataclass
class EngineConfig:
    """Tick loop settings."""
    tick_interval_sec: float = 5.0
    idle_threshold_sec: int = 7
    heartbeat_interval_sec: float = 60.0
    active_log_interval_sec: float = 30.0
    suspended_log_every: int = 12
    dry_run: bool = False


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    device_id: int = 0
    width: int = 640
    height: int = 480
    cooldown_sec: float = 8.0
    warmup_sec: float = 1.0
    release_grace_sec: float = 0.5
    capture_timeout_sec: float = 5.0  # shutdown join budget for an in-flight frame read


@dataclass
class DetectionConfig:
    """Face classifier settings."""
    backend: str = "opencv"  # opencv, mediapipe
    cascade_file: str = "haarcascade_frontalface_alt.xml"
    min_face_size: int = 40
    min_brightness: float = 30.0
    scale_factor: float = 1.1
    min_neighbors: int = 5
    confidence_threshold: float = 0.5


@dataclass
class ScoringConfig:
    """Presence score and lock policy settings."""
    score_min: int = 0
    score_max: int = 100
    score_neutral: int = 50
    increment: int = 8
    decrement: int = 12
    lock_threshold: int = 20
    recovery_margin: int = 10


@dataclass
class LoggingConfig:
    """Logging settings."""
    enable_file_logging: bool = True
    log_dir: str = "logs"
    console_level: str = "INFO"


SECTIONS = ['engine', 'camera', 'detection', 'scoring', 'logging']


class Config:
    """Main configuration class for the FaceWatch service."""

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration with optional config file."""
        self.engine = EngineConfig()
        self.camera = CameraConfig()
        self.detection = DetectionConfig()
        self.scoring = ScoringConfig()
        self.logging = LoggingConfig()

        if config_file and os.path.exists(config_file):
            self.load_from_file(config_file)

    def load_from_file(self, config_file: str) -> None:
        """Load configuration from JSON file."""
        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except (OSError, ValueError) as e:
            print(f"Warning: Could not load config file {config_file}: {e}")
            return

        self.update(config_data)

    def update(self, config_data: Dict[str, Any]) -> None:
        """Apply a nested ``{section: {key: value}}`` mapping; unknown keys are ignored."""
        for section_name, section_data in config_data.items():
            if section_name not in SECTIONS or not isinstance(section_data, dict):
                continue
            section = getattr(self, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Return every section as a plain dictionary."""
        return {name: asdict(getattr(self, name)) for name in SECTIONS}

    def save_to_file(self, config_file: str) -> None:
        """Save current configuration to JSON file."""
        directory = os.path.dirname(config_file)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(config_file, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def collect_errors(self) -> List[str]:
        """Return a list of human readable validation errors."""
        errors = []

        if self.engine.tick_interval_sec <= 0:
            errors.append("Tick interval must be positive")

        if self.engine.idle_threshold_sec < 0:
            errors.append("Idle threshold must not be negative")

        if self.engine.suspended_log_every <= 0:
            errors.append("Suspended log period must be positive")

        if self.camera.cooldown_sec < 0 or self.camera.warmup_sec < 0 or self.camera.release_grace_sec < 0:
            errors.append("Camera timings must not be negative")

        if self.detection.backend not in ("opencv", "mediapipe"):
            errors.append(f"Unknown detection backend: {self.detection.backend}")

        if self.detection.min_face_size <= 0:
            errors.append("Minimum face size must be positive")

        if self.detection.scale_factor <= 1.0:
            errors.append("Cascade scale factor must be greater than 1.0")

        scoring = self.scoring
        if not scoring.score_min <= scoring.score_neutral <= scoring.score_max:
            errors.append("Neutral score must lie between score_min and score_max")

        if scoring.increment <= 0 or scoring.decrement <= 0:
            errors.append("Score increment and decrement must be positive")

        if scoring.recovery_margin < 0:
            errors.append("Recovery margin must not be negative")

        if not scoring.score_min <= scoring.lock_threshold <= scoring.score_max:
            errors.append("Lock threshold must lie between score_min and score_max")

        return errors

    def validate_config(self) -> bool:
        """Validate configuration settings."""
        errors = self.collect_errors()

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True


# Global configuration instance
config = Config()

# Default configuration file path
DEFAULT_CONFIG_FILE = os.environ.get("FACEWATCH_CONFIG", "data/configs/facewatch.json")

# Load default configuration if available
if os.path.exists(DEFAULT_CONFIG_FILE):
    config.load_from_file(DEFAULT_CONFIG_FILE)
