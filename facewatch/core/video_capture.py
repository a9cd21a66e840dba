"""
Single-shot camera access.

The camera is opened for exactly one frame per sample and released before
the tick ends, followed by a short grace delay so the platform camera stack
has torn the device down before the next open.
"""

import platform
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple

import cv2
import numpy as np

from .types import CollaboratorUnavailableError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class CameraSource:
    """Opens, reads one frame from, and releases a camera device."""

    def __init__(self, device_id: int = 0, width: int = 640, height: int = 480,
                 warmup_sec: float = 1.0, release_grace_sec: float = 0.5,
                 capture_factory: Optional[Callable[[int], "cv2.VideoCapture"]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            device_id: Camera index
            width: Requested frame width
            height: Requested frame height
            warmup_sec: Delay after opening before the frame is read
            release_grace_sec: Delay after release before the device counts as free
            capture_factory: Builds the capture object (defaults to cv2.VideoCapture)
            sleep: Sleep function
        """
        self.device_id = device_id
        self.width = width
        self.height = height
        self.warmup_sec = warmup_sec
        self.release_grace_sec = release_grace_sec
        self._capture_factory = capture_factory or self._default_capture
        self._sleep = sleep
        self.cap = None

    @staticmethod
    def _default_capture(device_id: int):
        # DirectShow opens much faster than MSMF on Windows
        if platform.system() == 'Windows':
            return cv2.VideoCapture(device_id, cv2.CAP_DSHOW)
        return cv2.VideoCapture(device_id)

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def open(self) -> bool:
        """Open the device. Returns False if it cannot be opened."""
        self.cap = self._capture_factory(self.device_id)
        if not self.cap.isOpened():
            self.release()
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        return True

    def warm_up(self) -> None:
        if self.warmup_sec > 0:
            self._sleep(self.warmup_sec)

    def read_frame(self) -> Tuple[bool, Optional[np.ndarray]]:
        """Read one frame; ``(False, None)`` when nothing usable came back."""
        if not self.is_open:
            return False, None

        ret, frame = self.cap.read()
        if not ret or frame is None or frame.size == 0:
            return False, None
        return True, frame

    def release(self) -> None:
        """Release the device if held, then wait out the grace delay."""
        if self.cap is None:
            return

        cap, self.cap = self.cap, None
        was_open = False
        try:
            was_open = cap.isOpened()
            cap.release()
        except cv2.error as e:
            logger.log_error_with_context(e, "camera_release")

        if was_open and self.release_grace_sec > 0:
            self._sleep(self.release_grace_sec)

    @contextmanager
    def session(self) -> Iterator[bool]:
        """Open the camera for one sample; release is guaranteed on every exit path."""
        try:
            yield self.open()
        finally:
            self.release()

    def is_available(self) -> bool:
        """Startup probe: can the device be opened at all?"""
        with self.session() as opened:
            return opened

    def ensure_available(self) -> None:
        if not self.is_available():
            raise CollaboratorUnavailableError(
                f"Webcam {self.device_id} not available or access denied")
