"""
FaceWatch Service

Periodic tick loop that fuses input-idle time with sparse camera samples:

    session suspended? -> heartbeat -> idle check -> cooldown -> one frame
    -> classify -> score -> lock policy

Ticks run on a single worker thread with a fixed delay between the end of
one tick and the start of the next, so a slow camera warm-up pushes the
schedule back instead of overlapping ticks. The session listener runs on
its own thread and only writes to the SessionGate.
"""

import threading
import time
from typing import Callable, Optional

from .cooldown import CooldownGate
from .face_detection import FaceClassifier
from .idle_tracker import IdleProvider, IdleTracker, create_idle_provider
from .lock_actuator import LockActuator, create_lock_actuator
from .lock_policy import LockPolicy
from .presence_scorer import PresenceScorer
from .session_gate import SessionGate, SessionNotifier, create_session_notifier
from .types import (CollaboratorUnavailableError, Decision, DetectionVerdict, EngineState,
                    Statistics, Transition)
from .video_capture import CameraSource
from ..gui.notifications import NotificationSink, NullNotificationSink, notify
from ..utils.config import Config, config as default_config
from ..utils.logger import get_logger, log_function_call

logger = get_logger(__name__)


class FaceWatchService:
    """Owns the engine state and drives it from a periodic worker thread."""

    def __init__(self, idle_provider: IdleProvider, camera: CameraSource,
                 classifier: FaceClassifier, actuator: LockActuator,
                 session_notifier: Optional[SessionNotifier] = None,
                 notification_sink: Optional[NotificationSink] = None,
                 settings: Optional[Config] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.settings = settings or default_config
        self.camera = camera
        self.classifier = classifier
        self.session_notifier = session_notifier
        self.notification_sink = notification_sink or NullNotificationSink()
        self._clock = clock

        engine = self.settings.engine
        scoring = self.settings.scoring

        self.statistics = Statistics()
        self.idle_tracker = IdleTracker(idle_provider, engine.idle_threshold_sec)
        self.cooldown = CooldownGate(self.settings.camera.cooldown_sec, clock=clock)
        self.scorer = PresenceScorer(
            score_min=scoring.score_min,
            score_max=scoring.score_max,
            neutral=scoring.score_neutral,
            increment=scoring.increment,
            decrement=scoring.decrement,
        )
        self.policy = LockPolicy(
            actuator,
            lock_threshold=scoring.lock_threshold,
            recovery_margin=scoring.recovery_margin,
            statistics=self.statistics,
            notifier=self.notification_sink,
        )
        self.session_gate = SessionGate(lambda: self.policy.lock_flag, self.notification_sink)

        self.state = EngineState.ACTIVE
        self._last_heartbeat: Optional[float] = None
        self._last_activity_log: Optional[float] = None

        self._running = False
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def score(self) -> int:
        return self.scorer.score

    @property
    def lock_flag(self) -> bool:
        return self.policy.lock_flag

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @log_function_call
    def run_startup_checks(self) -> None:
        """Fail fast on collaborators the engine cannot run without."""
        try:
            idle = self.idle_tracker.provider.idle_seconds()
        except Exception as e:
            raise CollaboratorUnavailableError(f"Idle-time provider failed: {e}") from e
        logger.info(f"User activity monitor initialized (current idle time: {idle}s)")

        self.classifier.ensure_loaded()
        logger.info("Face detection model loaded")

        self.camera.ensure_available()
        logger.info("Webcam detected and available")

    def start(self) -> None:
        """Run startup checks, attach the session monitor and start ticking."""
        if self._running:
            logger.info("Service already running")
            return

        logger.info("FaceWatchService starting...")
        logger.log_configuration(self.settings)

        self.run_startup_checks()
        self.session_gate.attach(self.session_notifier)

        self._stop_event.clear()
        self._running = True
        self._worker = threading.Thread(target=self._run_loop, name="FaceWatchService-Monitor", daemon=True)
        self._worker.start()

        logger.info("FaceWatchService started successfully - monitoring user activity")
        notify(self.notification_sink, "status", "Workstation monitoring is active")

    def stop(self) -> None:
        """Stop ticking, let an in-flight tick finish, then release everything."""
        if not self._running:
            return
        self._running = False

        logger.info("Stopping FaceWatchService...")
        self._stop_event.set()

        worker_stuck = False
        if self._worker and self._worker is not threading.current_thread():
            camera = self.settings.camera
            self._worker.join(timeout=camera.warmup_sec + camera.capture_timeout_sec
                              + camera.release_grace_sec + 1.0)
            worker_stuck = self._worker.is_alive()
        self._worker = None

        self.session_gate.detach()
        if worker_stuck:
            # The in-flight sample still owns the camera and releases it on its own
            logger.warning("Monitor thread did not terminate in time - leaving camera to the sample")
        else:
            self.camera.release()
            self.classifier.close()

        logger.log_statistics("Final Statistics:", self.statistics.snapshot())
        notify(self.notification_sink, "close")
        logger.info("FaceWatchService stopped")

    def run_forever(self) -> None:
        """Start and block until stopped or interrupted."""
        self.start()
        try:
            while self._running:
                self._stop_event.wait(1.0)
        except KeyboardInterrupt:
            logger.info("Shutdown signal received")
        finally:
            self.stop()

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            self.tick()
            if self._stop_event.wait(self.settings.engine.tick_interval_sec):
                break

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> EngineState:
        """Run one tick. Never raises; a failing tick cannot stop the scheduler."""
        try:
            self._tick()
        except Exception as e:
            logger.log_error_with_context(e, "check_frame")
        return self.state

    def _tick(self) -> None:
        self.statistics.total_ticks += 1

        if self.session_gate.is_suspended():
            skipped = self.statistics.record_skip()
            if skipped % self.settings.engine.suspended_log_every == 0:
                logger.info(f"System locked - monitoring paused (skipped {skipped} checks)")
            self.state = EngineState.SUSPENDED
            return

        if self.session_gate.take_pending_unlock():
            self._reset_after_unlock()

        now = self._clock()
        if self._last_heartbeat is None or now - self._last_heartbeat >= self.settings.engine.heartbeat_interval_sec:
            self.log_heartbeat()
            self._last_heartbeat = now

        idle = self.idle_tracker.idle_seconds()
        transition = self.idle_tracker.observe(idle)

        if not self.idle_tracker.is_idle(idle):
            self._handle_user_active(idle, transition, now)
            self.state = EngineState.ACTIVE
            return

        if transition is Transition.BECAME_IDLE:
            logger.info(f"User went idle (no activity for {idle}s)")

        if not self.cooldown.permit():
            self.state = EngineState.COOLDOWN
            return

        self.state = EngineState.IDLE_WATCHING
        self._sample(idle)

    def _handle_user_active(self, idle: int, transition: Optional[Transition], now: float) -> None:
        if transition is Transition.BECAME_ACTIVE:
            logger.info(f"User is now ACTIVE (idle time: {idle}s) - camera OFF, "
                        f"score reset to {self.scorer.neutral}")
            self.statistics.clear_skipped()
            self._last_activity_log = now
        elif (self._last_activity_log is None
              or now - self._last_activity_log >= self.settings.engine.active_log_interval_sec):
            logger.info(f"User ACTIVE (idle: {idle}s) - camera OFF - monitoring...")
            self._last_activity_log = now

        self._reset_presence()

    def _reset_presence(self) -> None:
        self.scorer.reset()
        self.policy.reset()
        self.cooldown.clear()

    def _reset_after_unlock(self) -> None:
        self._reset_presence()
        self.idle_tracker.reset()
        self.statistics.clear_skipped()
        logger.info("   All checks reset - monitoring resumed")

    def _sample(self, idle: int) -> Optional[Decision]:
        """One camera sample. The cooldown is re-armed whatever happens."""
        self.statistics.camera_activations += 1
        logger.info(f"Opening camera... (idle: {idle}s, score: {self.scorer.score})")

        try:
            return self._capture_and_score()
        except Exception as e:
            self.statistics.aborted_samples += 1
            logger.log_error_with_context(e, "process_frame")
            return None
        finally:
            self.cooldown.record_sample_taken()
            if self.state is EngineState.IDLE_WATCHING:
                self.state = EngineState.COOLDOWN

    def _capture_and_score(self) -> Optional[Decision]:
        with self.camera.session() as opened:
            if not opened:
                logger.warning("Could not open webcam")
                return self._abort()

            self.camera.warm_up()

            if self.session_gate.is_suspended():
                logger.info("System locked during camera warmup - aborting check")
                return self._abort()

            ok, frame = self.camera.read_frame()
            if not ok:
                logger.warning("Empty frame received")
                return self._abort()

        current_idle = self.idle_tracker.idle_seconds()
        if not self.idle_tracker.is_idle(current_idle):
            logger.info(f"User became active during capture (idle: {current_idle}s) - aborting check")
            self._reset_presence()
            self.idle_tracker.reset()
            self.state = EngineState.ACTIVE
            return self._abort()

        result = self.classifier.classify(frame)
        if result.verdict is DetectionVerdict.PRESENT:
            self.statistics.faces_detected += 1
        elif result.verdict is DetectionVerdict.INCONCLUSIVE:
            self.statistics.inconclusive_verdicts += 1

        old_score = self.scorer.score
        new_score = self.scorer.update(result.verdict)
        logger.log_detection(result.face_present, result.face_count, current_idle,
                             old_score, new_score, result.brightness)

        if self.session_gate.is_suspended():
            return Decision.NONE
        return self.policy.evaluate(new_score)

    def _abort(self) -> None:
        self.statistics.aborted_samples += 1
        return None

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def log_heartbeat(self) -> None:
        logger.log_heartbeat(self.statistics.snapshot(), self.scorer.score,
                             self.session_gate.is_suspended(), self.policy.lock_flag)
        notify(self.notification_sink, "status",
               f"Score {self.scorer.score} | locks {self.statistics.lock_events}")


def build_service(settings: Optional[Config] = None, dry_run: bool = False,
                  notification_sink: Optional[NotificationSink] = None) -> FaceWatchService:
    """Create a service wired to the platform collaborators."""
    settings = settings or default_config

    idle_provider = create_idle_provider()

    camera_settings = settings.camera
    camera = CameraSource(
        device_id=camera_settings.device_id,
        width=camera_settings.width,
        height=camera_settings.height,
        warmup_sec=camera_settings.warmup_sec,
        release_grace_sec=camera_settings.release_grace_sec,
    )

    detection = settings.detection
    classifier = FaceClassifier(
        backend=detection.backend,
        min_face_size=detection.min_face_size,
        min_brightness=detection.min_brightness,
        scale_factor=detection.scale_factor,
        min_neighbors=detection.min_neighbors,
        cascade_file=detection.cascade_file,
        confidence_threshold=detection.confidence_threshold,
    )

    actuator = create_lock_actuator(dry_run=dry_run or settings.engine.dry_run)

    try:
        session_notifier = create_session_notifier()
    except CollaboratorUnavailableError as e:
        logger.warning(f"Session monitor not available: {e}")
        session_notifier = None

    return FaceWatchService(
        idle_provider=idle_provider,
        camera=camera,
        classifier=classifier,
        actuator=actuator,
        session_notifier=session_notifier,
        notification_sink=notification_sink,
        settings=settings,
    )
