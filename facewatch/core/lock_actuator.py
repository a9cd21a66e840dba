"""
Workstation lock actuators.

Locking is fire-and-forget: the actuator runs the platform lock command once
and reports whether it could be executed. It never verifies that the screen
actually locked and never retries.
"""

import platform
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .types import LockActuatorError
from ..utils.logger import get_logger

logger = get_logger(__name__)


WINDOWS_LOCK_COMMANDS = [["rundll32.exe", "user32.dll,LockWorkStation"]]

LINUX_LOCK_COMMANDS = [
    ["loginctl", "lock-session"],
    ["xdg-screensaver", "lock"],
    ["gnome-screensaver-command", "--lock"],
]

MACOS_LOCK_COMMANDS = [
    ["pmset", "displaysleepnow"],
]


class LockActuator(ABC):
    """Issues an OS-level workstation lock."""

    @abstractmethod
    def invoke_lock(self) -> bool:
        """Lock the workstation. Returns True if the command was executed."""


class CommandLockActuator(LockActuator):
    """Runs the first lock command that succeeds out of a list of candidates."""

    def __init__(self, commands: Sequence[Sequence[str]], timeout_sec: float = 10.0):
        if not commands:
            raise ValueError("at least one lock command is required")
        self.commands: List[List[str]] = [list(command) for command in commands]
        self.timeout_sec = timeout_sec

    def invoke_lock(self) -> bool:
        last_error: Optional[Exception] = None
        for command in self.commands:
            try:
                subprocess.run(
                    command,
                    check=True,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    timeout=self.timeout_sec,
                )
                logger.debug(f"Lock command succeeded: {' '.join(command)}")
                return True
            except (OSError, subprocess.SubprocessError) as exc:
                logger.warning(f"Lock command failed ({' '.join(command)}): {exc}")
                last_error = exc

        raise LockActuatorError(f"All lock commands failed: {last_error}")


class DryRunLockActuator(LockActuator):
    """Logs instead of locking; used with ``--dry-run``."""

    def __init__(self):
        self.invocations = 0

    def invoke_lock(self) -> bool:
        self.invocations += 1
        logger.warning("Dry run: workstation lock suppressed")
        return True


def create_lock_actuator(system: Optional[str] = None, dry_run: bool = False) -> LockActuator:
    """Return the lock actuator for the current platform."""
    if dry_run:
        return DryRunLockActuator()

    system = system or platform.system()
    if system == "Windows":
        return CommandLockActuator(WINDOWS_LOCK_COMMANDS)
    if system == "Darwin":
        return CommandLockActuator(MACOS_LOCK_COMMANDS)
    return CommandLockActuator(LINUX_LOCK_COMMANDS)
