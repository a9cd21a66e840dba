"""
Lock Policy

Turns the presence score into lock decisions. A lock fires once when the
score drops below the threshold; the engine's lock flag then stays set
until the score climbs above ``lock_threshold + recovery_margin``. Scores in
between (the hysteresis band) produce no decision, so a score wobbling
around the threshold cannot trigger the lock command repeatedly.
"""

from typing import Optional

from .lock_actuator import LockActuator
from .types import Decision, LockActuatorError, Statistics
from ..gui.notifications import NotificationSink, NullNotificationSink, notify
from ..utils.logger import get_logger

logger = get_logger(__name__)


class LockPolicy:
    """Threshold/hysteresis policy with self-lock tracking."""

    def __init__(self, actuator: LockActuator, lock_threshold: int = 20, recovery_margin: int = 10,
                 statistics: Optional[Statistics] = None,
                 notifier: Optional[NotificationSink] = None):
        if recovery_margin < 0:
            raise ValueError("recovery_margin must not be negative")

        self.actuator = actuator
        self.lock_threshold = lock_threshold
        self.recovery_margin = recovery_margin
        self.statistics = statistics if statistics is not None else Statistics()
        self.notifier = notifier or NullNotificationSink()
        self._lock_flag = False

    @property
    def lock_flag(self) -> bool:
        """True once this engine issued a lock that has not been reset yet."""
        return self._lock_flag

    @property
    def recovery_threshold(self) -> int:
        return self.lock_threshold + self.recovery_margin

    def evaluate(self, score: int) -> Decision:
        """Evaluate one score; may invoke the lock actuator."""
        if score < self.lock_threshold and not self._lock_flag:
            self._lock_flag = True
            self.statistics.lock_events += 1
            logger.warning(f"LOCKING WORKSTATION (score: {score} < {self.lock_threshold})")
            self._invoke_actuator()
            notify(self.notifier, "lock_issued", score)
            return Decision.LOCK

        if score > self.recovery_threshold and self._lock_flag:
            logger.info(f"Score recovered ({score} > {self.recovery_threshold}) - resetting lock flag")
            self._lock_flag = False
            return Decision.CLEAR_FLAG

        return Decision.NONE

    def reset(self) -> None:
        self._lock_flag = False

    def _invoke_actuator(self) -> None:
        # Best effort, never retried or verified.
        try:
            if self.actuator.invoke_lock():
                logger.info("Workstation lock command executed")
            else:
                logger.error("Workstation lock command reported failure")
        except LockActuatorError as e:
            logger.log_error_with_context(e, "lock_workstation")
