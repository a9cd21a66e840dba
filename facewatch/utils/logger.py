"""
Logging utilities for the FaceWatch auto-lock service.
"""

import logging
import sys
import traceback
from datetime import datetime
from typing import Optional, Dict, Any
from pathlib import Path

from .config import config


class FaceWatchLogger:
    """Custom logger for the FaceWatch service."""

    def __init__(self, name: str = "facewatch", log_file: Optional[str] = None):
        """Initialize the logger."""
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        # Prevent duplicate handlers
        if self.logger.handlers:
            return

        # Child loggers ("facewatch.core...") propagate to the root "facewatch" handlers
        if name != "facewatch" and name.startswith("facewatch"):
            return

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        simple_formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s - %(message)s', datefmt='%H:%M:%S'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, config.logging.console_level.upper(), logging.INFO))
        console_handler.setFormatter(simple_formatter)
        self.logger.addHandler(console_handler)

        if config.logging.enable_file_logging:
            if log_file is None:
                logs_dir = Path(config.logging.log_dir)
                logs_dir.mkdir(parents=True, exist_ok=True)

                timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
                log_file = logs_dir / f"facewatch_{timestamp}.log"

            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)
            self.logger.addHandler(file_handler)

    def set_console_level(self, level: int) -> None:
        """Change the level of the console handler(s)."""
        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)

    def debug(self, message: str) -> None:
        """Log debug message."""
        self.logger.debug(message)

    def info(self, message: str) -> None:
        """Log info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log error message."""
        self.logger.error(message)

    def critical(self, message: str) -> None:
        """Log critical message."""
        self.logger.critical(message)

    def log_detection(self, detected: bool, face_count: int, idle_sec: int,
                      old_score: int, new_score: int, brightness: float) -> None:
        """Log the outcome of one camera sample."""
        status = "FACE DETECTED" if detected else "NO FACE"
        self.info(f"{status} | Faces: {face_count} | Idle: {idle_sec}s | "
                  f"Score: {old_score} -> {new_score} | Brightness: {brightness:.1f}")

    def log_statistics(self, title: str, stats: Dict[str, Any]) -> None:
        """Log a block of statistics counters."""
        self.info("=" * 52)
        self.info(title)
        self.info(f"   Total checks: {stats['total_ticks']}")
        self.info(f"   Camera activations: {stats['camera_activations']}")
        self.info(f"   Faces detected: {stats['faces_detected']} ({stats['detection_rate']:.1f}%)")
        self.info(f"   Inconclusive (low light): {stats['inconclusive_verdicts']}")
        self.info(f"   Aborted samples: {stats['aborted_samples']}")
        self.info(f"   Lock events: {stats['lock_events']}")
        self.info(f"   Skipped (system locked): {stats['total_skipped_while_suspended']}")

    def log_heartbeat(self, stats: Dict[str, Any], score: int, system_locked: bool,
                      engine_locked: bool) -> None:
        """Log periodic heartbeat with statistics."""
        self.log_statistics(f"HEARTBEAT - {datetime.now().strftime('%H:%M:%S')}", stats)
        self.info(f"   Current score: {score}")
        self.info(f"   System status: {'LOCKED' if system_locked else 'UNLOCKED'}")
        self.info(f"   Service status: {'LOCKED' if engine_locked else 'UNLOCKED'}")
        self.info("=" * 52)

    def log_error_with_context(self, error: Exception, context: str) -> None:
        """Log error with additional context."""
        self.error(f"Error in {context}: {str(error)}")
        if error.__traceback__ is not None:
            self.debug("Traceback: " + "".join(
                traceback.format_exception(type(error), error, error.__traceback__)))

    def log_configuration(self, settings=None) -> None:
        """Log the effective configuration (the global one unless given)."""
        settings = settings or config
        self.info("Configuration:")
        self.info(f"   - Check Interval: {settings.engine.tick_interval_sec}s")
        self.info(f"   - Idle Timeout: {settings.engine.idle_threshold_sec}s")
        self.info(f"   - Camera Cooldown: {settings.camera.cooldown_sec}s")
        self.info(f"   - Detection Backend: {settings.detection.backend}")
        self.info(f"   - Detection Threshold: {settings.scoring.lock_threshold}")
        self.info(f"   - Recovery Margin: {settings.scoring.recovery_margin}")
        self.info(f"   - Score Increment (face): +{settings.scoring.increment}")
        self.info(f"   - Score Decrement (no face): -{settings.scoring.decrement}")
        self.info(f"   - Min Brightness: {settings.detection.min_brightness}")


# Global logger instance
logger = FaceWatchLogger()


def get_logger(name: str = "facewatch") -> FaceWatchLogger:
    """Get a logger instance."""
    if not name.startswith("facewatch"):
        name = f"facewatch.{name}"
    return FaceWatchLogger(name)


def log_function_call(func):
    """Decorator to log function calls."""
    def wrapper(*args, **kwargs):
        logger.debug(f"Calling {func.__name__}")
        try:
            result = func(*args, **kwargs)
            logger.debug(f"Completed {func.__name__}")
            return result
        except Exception as e:
            logger.log_error_with_context(e, func.__name__)
            raise
    return wrapper
