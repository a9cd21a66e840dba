"""
Idle Tracker

Wraps the platform idle-time query and turns it into idle/active edges.
"""

import ctypes
import platform
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import Optional

from .types import CollaboratorUnavailableError, Transition
from ..utils.logger import get_logger

logger = get_logger(__name__)


class IdleProvider(ABC):
    """Reports seconds since the last keyboard/mouse input."""

    @abstractmethod
    def idle_seconds(self) -> int:
        """Seconds since last input. May be negative after clock adjustments."""


class WindowsIdleProvider(IdleProvider):
    """``GetLastInputInfo`` / ``GetTickCount`` via ctypes."""

    class LASTINPUTINFO(ctypes.Structure):
        _fields_ = [("cbSize", ctypes.c_uint), ("dwTime", ctypes.c_uint)]

    def __init__(self):
        try:
            self._user32 = ctypes.windll.user32
            self._kernel32 = ctypes.windll.kernel32
        except AttributeError as e:
            raise CollaboratorUnavailableError("Windows idle API not available") from e

    def idle_seconds(self) -> int:
        info = self.LASTINPUTINFO()
        info.cbSize = ctypes.sizeof(info)
        if not self._user32.GetLastInputInfo(ctypes.byref(info)):
            raise OSError("GetLastInputInfo failed")
        # Both values are 32-bit tick counts; subtract as signed to survive wrap-around
        idle_ms = ctypes.c_int32(self._kernel32.GetTickCount() - info.dwTime).value
        return idle_ms // 1000


class XprintidleIdleProvider(IdleProvider):
    """Runs ``xprintidle`` (X11), which prints idle milliseconds."""

    def __init__(self, executable: str = "xprintidle", timeout_sec: float = 2.0):
        path = shutil.which(executable)
        if path is None:
            raise CollaboratorUnavailableError(f"{executable} not found on PATH")
        self.executable = path
        self.timeout_sec = timeout_sec

    def idle_seconds(self) -> int:
        result = subprocess.run(
            [self.executable],
            check=True,
            capture_output=True,
            text=True,
            timeout=self.timeout_sec,
        )
        return int(result.stdout.strip()) // 1000


def create_idle_provider(system: Optional[str] = None) -> IdleProvider:
    """Return the idle provider for the current platform."""
    system = system or platform.system()
    if system == "Windows":
        return WindowsIdleProvider()
    if system == "Linux":
        return XprintidleIdleProvider()
    raise CollaboratorUnavailableError(f"No idle-time provider for platform {system}")


class IdleTracker:
    """Clamped idle query plus edge detection against the idle threshold."""

    def __init__(self, provider: IdleProvider, idle_threshold_sec: int = 7):
        self.provider = provider
        self.idle_threshold_sec = idle_threshold_sec
        self._was_idle = False

    @property
    def was_idle(self) -> bool:
        return self._was_idle

    def idle_seconds(self) -> int:
        """Current idle time; failures and negative readings count as active (0)."""
        try:
            value = int(self.provider.idle_seconds())
        except Exception as e:
            logger.error(f"Error getting idle time: {e}")
            return 0
        return max(0, value)

    def is_idle(self, idle_seconds: int) -> bool:
        return idle_seconds >= self.idle_threshold_sec

    def observe(self, idle_seconds: int) -> Optional[Transition]:
        """Classify ``idle_seconds``; return an edge only when the classification changes."""
        idle = self.is_idle(idle_seconds)
        if idle == self._was_idle:
            return None
        self._was_idle = idle
        return Transition.BECAME_IDLE if idle else Transition.BECAME_ACTIVE

    def reset(self) -> None:
        """Forget the previous classification; the next idle tick is a fresh edge."""
        self._was_idle = False
