"""
Shared enums, records and exceptions for the decision engine.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any


class FaceWatchError(Exception):
    """Base class for FaceWatch errors."""


class CollaboratorUnavailableError(FaceWatchError):
    """A required (or optional) external collaborator could not be initialised."""


class LockActuatorError(FaceWatchError):
    """The workstation lock command could not be executed."""


class DetectionVerdict(Enum):
    """Outcome of one face-classification attempt."""
    PRESENT = "present"
    ABSENT = "absent"
    INCONCLUSIVE = "inconclusive"


class Decision(Enum):
    """Lock policy decision for one evaluated score."""
    NONE = "none"
    LOCK = "lock"
    CLEAR_FLAG = "clear_flag"


class EngineState(Enum):
    """Coarse engine state as of the last tick."""
    ACTIVE = "active"
    IDLE_WATCHING = "idle_watching"
    COOLDOWN = "cooldown"
    SUSPENDED = "suspended"


class Transition(Enum):
    """Idle/active classification edge."""
    BECAME_IDLE = "became_idle"
    BECAME_ACTIVE = "became_active"


class SessionEvent(Enum):
    """OS session notification."""
    LOCK = "lock"
    UNLOCK = "unlock"


@dataclass(frozen=True)
class ClassificationResult:
    """Verdict plus the measurements that produced it."""
    verdict: DetectionVerdict
    face_count: int = 0
    brightness: float = 0.0

    @property
    def face_present(self) -> bool:
        return self.verdict is DetectionVerdict.PRESENT


@dataclass
class Statistics:
    """Process-lifetime counters, written only by the tick worker."""
    total_ticks: int = 0
    camera_activations: int = 0
    faces_detected: int = 0
    inconclusive_verdicts: int = 0
    aborted_samples: int = 0
    lock_events: int = 0
    skipped_while_suspended: int = 0
    total_skipped_while_suspended: int = 0

    def record_skip(self) -> int:
        self.skipped_while_suspended += 1
        self.total_skipped_while_suspended += 1
        return self.skipped_while_suspended

    def clear_skipped(self) -> None:
        # Only the status-logging counter; the lifetime total is kept.
        self.skipped_while_suspended = 0

    def detection_rate(self) -> float:
        """Percentage of camera activations that found a face."""
        if self.camera_activations <= 0:
            return 0.0
        return self.faces_detected * 100.0 / self.camera_activations

    def snapshot(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload['detection_rate'] = self.detection_rate()
        return payload
