"""
System tray integration.

Engine events arrive on the monitor and session threads; they are re-emitted
as Qt signals so the tray icon is only ever touched on the GUI thread.
"""

import signal
import sys
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtGui import QAction, QColor, QIcon, QPixmap
from PySide6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from .notifications import NotificationSink
from ..utils.logger import get_logger

logger = get_logger(__name__)


def create_tray_icon(color: str = "#2e7d32", size: int = 16) -> QIcon:
    """Create a simple colored icon programmatically."""
    pixmap = QPixmap(size, size)
    pixmap.fill(QColor(color))
    return QIcon(pixmap)


class TrayNotificationSink(QObject, NotificationSink):
    """Shows lock/unlock balloons and a status tooltip in the system tray."""

    message_requested = Signal(str, str)
    tooltip_requested = Signal(str)

    def __init__(self, app: QApplication, on_quit=None):
        super().__init__()
        self.app = app
        self.tray_icon: Optional[QSystemTrayIcon] = None

        if not QSystemTrayIcon.isSystemTrayAvailable():
            logger.warning("System tray not supported on this platform")
            return

        self.tray_icon = QSystemTrayIcon(create_tray_icon(), self)
        self.tray_icon.setToolTip("FaceWatch Service")

        menu = QMenu()
        quit_action = QAction("Exit", menu)
        quit_action.triggered.connect(on_quit or app.quit)
        menu.addAction(quit_action)
        self.menu = menu
        self.tray_icon.setContextMenu(menu)
        self.tray_icon.show()

        self.message_requested.connect(self._show_message)
        self.tooltip_requested.connect(self._set_tooltip)
        logger.info("System tray icon initialized")

    @property
    def available(self) -> bool:
        return self.tray_icon is not None

    def _show_message(self, title: str, message: str) -> None:
        if self.tray_icon is not None:
            self.tray_icon.showMessage(title, message, QSystemTrayIcon.MessageIcon.Information, 5000)

    def _set_tooltip(self, text: str) -> None:
        if self.tray_icon is not None:
            self.tray_icon.setToolTip(f"FaceWatch Service\n{text}")

    def lock_issued(self, score: int) -> None:
        self.message_requested.emit("Workstation Locked", f"No face detected (score: {score})")

    def session_locked(self, by_engine: bool) -> None:
        source = "FaceWatch" if by_engine else "user"
        self.tooltip_requested.emit(f"Paused - session locked by {source}")

    def session_unlocked(self) -> None:
        self.message_requested.emit("Welcome Back", "Monitoring resumed")

    def status(self, message: str) -> None:
        self.tooltip_requested.emit(message)

    def close(self) -> None:
        if self.tray_icon is not None:
            self.tray_icon.hide()


def run_tray(service_factory) -> int:
    """
    Run the service with a tray icon; returns the process exit code.

    ``service_factory`` receives the tray sink and returns a FaceWatchService.
    """
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("FaceWatch")
    app.setQuitOnLastWindowClosed(False)

    sink = TrayNotificationSink(app)
    service = service_factory(sink if sink.available else None)

    # Let the Python interpreter run signal handlers while Qt owns the main loop
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(500)

    service.start()
    try:
        return app.exec()
    finally:
        service.stop()
