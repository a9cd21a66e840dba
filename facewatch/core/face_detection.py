"""
Face Classification Module

Reduces one camera frame to a presence verdict:
- frames darker than the brightness floor are INCONCLUSIVE (no detection attempted)
- otherwise PRESENT if at least one face of the minimum size is found, else ABSENT

Backends:
- OpenCV Haar cascade (default)
- MediaPipe face detection (optional)
"""

import os
import cv2
import numpy as np
from typing import List, Tuple

try:
    import mediapipe as mp
    MP_AVAILABLE = hasattr(mp, "solutions")
except ImportError:
    mp = None
    MP_AVAILABLE = False

from .types import ClassificationResult, CollaboratorUnavailableError, DetectionVerdict
from ..utils.logger import get_logger

logger = get_logger(__name__)

BBox = Tuple[int, int, int, int]


def resolve_cascade_path(cascade_file: str) -> str:
    """Accept either a path or the name of a cascade bundled with OpenCV."""
    if os.path.isfile(cascade_file):
        return cascade_file
    return os.path.join(cv2.data.haarcascades, cascade_file)


class FaceClassifier:
    """Brightness-gated face classifier."""

    def __init__(self, backend: str = "opencv", min_face_size: int = 40,
                 min_brightness: float = 30.0, scale_factor: float = 1.1,
                 min_neighbors: int = 5, cascade_file: str = "haarcascade_frontalface_alt.xml",
                 confidence_threshold: float = 0.5):
        """
        Initialize face classifier.

        Args:
            backend: Detection backend ("opencv" or "mediapipe")
            min_face_size: Smallest face side, in pixels, that counts as present
            min_brightness: Mean gray level below which the frame is inconclusive
            scale_factor: Haar cascade scale step
            min_neighbors: Haar cascade neighbour count (higher = fewer false positives)
            cascade_file: Cascade XML path or OpenCV bundled cascade name
            confidence_threshold: Minimum MediaPipe detection confidence
        """
        self.min_face_size = min_face_size
        self.min_brightness = min_brightness
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.confidence_threshold = confidence_threshold
        self.face_detection = None

        if backend == "mediapipe" and not MP_AVAILABLE:
            logger.warning("MediaPipe not available, using OpenCV cascade")
            backend = "opencv"
        self.backend = backend

        # The cascade is always loaded; it is also the MediaPipe fallback
        self.cascade_path = resolve_cascade_path(cascade_file)
        self.face_cascade = cv2.CascadeClassifier(self.cascade_path)

        if self.backend == "mediapipe":
            self.face_detection = mp.solutions.face_detection.FaceDetection(
                model_selection=0,  # short-range model, subject within ~2m
                min_detection_confidence=confidence_threshold
            )

        logger.info(f"Face classifier initialized with backend: {self.backend}")

    def is_loaded(self) -> bool:
        """True if the detection model is usable."""
        if self.backend == "mediapipe":
            return self.face_detection is not None
        return not self.face_cascade.empty()

    def ensure_loaded(self) -> None:
        if not self.is_loaded():
            raise CollaboratorUnavailableError(
                f"Failed to load face detection model ({self.cascade_path})")

    @staticmethod
    def to_gray(frame: np.ndarray) -> np.ndarray:
        if frame.ndim == 2:
            return frame
        return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

    @staticmethod
    def brightness(gray: np.ndarray) -> float:
        """Mean gray level (0-255)."""
        return float(cv2.mean(gray)[0])

    def classify(self, frame: np.ndarray) -> ClassificationResult:
        """
        Classify one frame.

        Args:
            frame: Input frame (BGR or grayscale)

        Returns:
            ClassificationResult with verdict, face count and measured brightness
        """
        if frame is None or frame.size == 0:
            raise ValueError("Cannot classify an empty frame")

        gray = self.to_gray(frame)
        brightness = self.brightness(gray)

        if brightness < self.min_brightness:
            logger.info(f"Low light (brightness: {brightness:.1f}) - assuming no face")
            return ClassificationResult(DetectionVerdict.INCONCLUSIVE, 0, brightness)

        if self.backend == "mediapipe":
            faces = self._detect_mediapipe(frame)
        else:
            faces = self._detect_opencv(gray)

        verdict = DetectionVerdict.PRESENT if faces else DetectionVerdict.ABSENT
        return ClassificationResult(verdict, len(faces), brightness)

    def _detect_opencv(self, gray: np.ndarray) -> List[BBox]:
        """Detect faces using the Haar cascade on an equalized grayscale frame."""
        equalized = cv2.equalizeHist(gray)
        faces = self.face_cascade.detectMultiScale(
            equalized,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=(self.min_face_size, self.min_face_size)
        )
        return [tuple(int(v) for v in face) for face in faces]

    def _detect_mediapipe(self, frame: np.ndarray) -> List[BBox]:
        """Detect faces using MediaPipe."""
        if frame.ndim == 2:
            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2RGB)
        else:
            rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.face_detection.process(rgb_frame)

        faces = []
        if results.detections:
            h, w = frame.shape[:2]
            for detection in results.detections:
                if detection.score[0] < self.confidence_threshold:
                    continue
                bbox = detection.location_data.relative_bounding_box
                width = int(bbox.width * w)
                height = int(bbox.height * h)
                if width < self.min_face_size or height < self.min_face_size:
                    continue
                faces.append((int(bbox.xmin * w), int(bbox.ymin * h), width, height))

        return faces

    def close(self) -> None:
        if self.face_detection is not None:
            self.face_detection.close()
            self.face_detection = None

