"""
Session Gate

Tracks whether the OS session is locked (by anyone) and suspends the tick
loop while it is. Notifications arrive on a listener thread; the tick worker
only ever reads the gate with non-blocking calls and consumes the pending
unlock message to reset its own state.
"""

import ctypes
import os
import platform
import shutil
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .types import CollaboratorUnavailableError, SessionEvent
from ..gui.notifications import NotificationSink, NullNotificationSink, notify
from ..utils.logger import get_logger

logger = get_logger(__name__)

SessionCallback = Callable[[SessionEvent], None]


class SessionNotifier(ABC):
    """Delivers LOCK/UNLOCK events for the current session on its own thread."""

    @abstractmethod
    def start(self, callback: SessionCallback) -> None:
        """Begin delivering events. Raises CollaboratorUnavailableError if unsupported."""

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering events."""


class PollingSessionNotifier(SessionNotifier):
    """Polls an ``is_locked`` probe on a daemon thread and reports edges."""

    def __init__(self, probe: Callable[[], bool], interval_sec: float = 1.0):
        self.probe = probe
        self.interval_sec = interval_sec
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._callback: Optional[SessionCallback] = None
        self._last_locked: Optional[bool] = None

    def start(self, callback: SessionCallback) -> None:
        if self._thread and self._thread.is_alive():
            return
        # Fails here, on the caller's thread, if the probe cannot work at all
        self._last_locked = bool(self.probe())
        self._callback = callback
        if self._last_locked:
            callback(SessionEvent.LOCK)

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="SessionMonitor", daemon=True)
        self._thread.start()
        logger.info("Session monitor started")

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self.interval_sec + 1.0)
            self._thread = None

    def poll_once(self) -> Optional[SessionEvent]:
        """Probe once and deliver an event if the lock state changed."""
        try:
            locked = bool(self.probe())
        except Exception as e:
            logger.debug(f"Session probe failed: {e}")
            return None

        if locked == self._last_locked:
            return None

        self._last_locked = locked
        event = SessionEvent.LOCK if locked else SessionEvent.UNLOCK
        if self._callback:
            self._callback(event)
        return event

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_sec):
            try:
                self.poll_once()
            except Exception as e:
                logger.log_error_with_context(e, "session_monitor")


def windows_session_locked() -> bool:
    """The input desktop cannot be opened while the secure (lock) desktop is shown."""
    user32 = ctypes.windll.user32
    desktop_switch = 0x0100
    handle = user32.OpenInputDesktop(0, False, desktop_switch)
    if not handle:
        return True
    user32.CloseDesktop(handle)
    return False


class LoginctlProbe:
    """``LockedHint`` of the current logind session."""

    def __init__(self, session_id: Optional[str] = None, timeout_sec: float = 2.0):
        self.executable = shutil.which("loginctl")
        if self.executable is None:
            raise CollaboratorUnavailableError("loginctl not found on PATH")
        self.session_id = session_id or os.environ.get("XDG_SESSION_ID")
        if not self.session_id:
            raise CollaboratorUnavailableError("XDG_SESSION_ID is not set")
        self.timeout_sec = timeout_sec

    def __call__(self) -> bool:
        result = subprocess.run(
            [self.executable, "show-session", self.session_id, "-p", "LockedHint", "--value"],
            check=True,
            capture_output=True,
            text=True,
            timeout=self.timeout_sec,
        )
        return result.stdout.strip().lower() == "yes"


def create_session_notifier(system: Optional[str] = None, interval_sec: float = 1.0) -> SessionNotifier:
    """Return the session notifier for the current platform."""
    system = system or platform.system()
    if system == "Windows":
        if not hasattr(ctypes, "windll"):
            raise CollaboratorUnavailableError("Windows desktop API not available")
        return PollingSessionNotifier(windows_session_locked, interval_sec)
    if system == "Linux":
        return PollingSessionNotifier(LoginctlProbe(), interval_sec)
    raise CollaboratorUnavailableError(f"Session notifications not supported on {system}")


class SessionGate:
    """Suspension state shared between the session listener and the tick worker."""

    def __init__(self, lock_flag: Callable[[], bool] = lambda: False,
                 notifier: Optional[NotificationSink] = None):
        """
        Args:
            lock_flag: Reads the engine's lock flag, for self-lock attribution
            notifier: Sink for user-facing lock/unlock notifications
        """
        self._lock_flag = lock_flag
        self.notifier = notifier or NullNotificationSink()
        self._suspended = threading.Event()
        self._guard = threading.Lock()
        self._locked_by_engine = False
        self._pending_unlock = False
        self._session_notifier: Optional[SessionNotifier] = None
        self.degraded = False

    @property
    def locked_by_engine(self) -> bool:
        with self._guard:
            return self._locked_by_engine

    def is_suspended(self) -> bool:
        return self._suspended.is_set()

    def attach(self, session_notifier: Optional[SessionNotifier]) -> bool:
        """Start receiving session events. Never fatal: failure means degraded mode."""
        if session_notifier is None:
            self.degraded = True
            logger.warning("Session monitor not available - running without lock/unlock detection")
            return False

        try:
            session_notifier.start(self.handle)
        except Exception as e:
            self.degraded = True
            logger.warning(f"Session monitor not available: {e}")
            logger.warning("   Service will continue but won't detect manual lock/unlock")
            return False

        self._session_notifier = session_notifier
        self.degraded = False
        return True

    def detach(self) -> None:
        if self._session_notifier is None:
            return
        try:
            self._session_notifier.stop()
        except Exception as e:
            logger.log_error_with_context(e, "session_monitor_stop")
        self._session_notifier = None

    def handle(self, event: SessionEvent) -> None:
        if event is SessionEvent.LOCK:
            self.on_external_lock()
        elif event is SessionEvent.UNLOCK:
            self.on_external_unlock()

    def on_external_lock(self) -> None:
        # An unlock the tick worker has not consumed yet means the flag is stale
        with self._guard:
            by_engine = bool(self._lock_flag()) and not self._pending_unlock
            self._locked_by_engine = by_engine
        self._suspended.set()

        logger.info("SYSTEM LOCKED DETECTED - Pausing all monitoring")
        logger.info("   Camera will NOT activate until system is unlocked")
        if by_engine:
            logger.info("   (System was locked by FaceWatch)")
        else:
            logger.info("   (System was locked manually by user)")
        notify(self.notifier, "session_locked", by_engine)

    def on_external_unlock(self) -> None:
        with self._guard:
            self._locked_by_engine = False
            self._pending_unlock = True
        self._suspended.clear()

        logger.info("SYSTEM UNLOCKED DETECTED - Resuming monitoring")
        notify(self.notifier, "session_unlocked")

    def take_pending_unlock(self) -> bool:
        """Consume the unlock message; True once per unlock event."""
        with self._guard:
            pending = self._pending_unlock
            self._pending_unlock = False
        return pending
