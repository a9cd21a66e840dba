"""
Decision engine: idle tracking, camera cooldown, presence scoring, lock policy
and session suspension, driven by the FaceWatchService tick loop.
"""

from .cooldown import CooldownGate
from .idle_tracker import IdleTracker
from .lock_policy import LockPolicy
from .orchestrator import FaceWatchService, build_service
from .presence_scorer import PresenceScorer
from .session_gate import SessionGate
from .types import Decision, DetectionVerdict, EngineState, SessionEvent, Statistics

__all__ = [
    "CooldownGate",
    "Decision",
    "DetectionVerdict",
    "EngineState",
    "FaceWatchService",
    "IdleTracker",
    "LockPolicy",
    "PresenceScorer",
    "SessionEvent",
    "SessionGate",
    "Statistics",
    "build_service",
]
