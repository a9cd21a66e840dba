"""
Camera activation cooldown gate.
"""

import time
from typing import Callable, Optional


class CooldownGate:
    """Throttles how often the camera may be sampled, independent of tick cadence."""

    def __init__(self, cooldown_sec: float, clock: Callable[[], float] = time.monotonic):
        if cooldown_sec < 0:
            raise ValueError("cooldown_sec must not be negative")
        self.cooldown_sec = cooldown_sec
        self._clock = clock
        self._last_sample: Optional[float] = None

    @property
    def last_sample(self) -> Optional[float]:
        return self._last_sample

    def permit(self) -> bool:
        """True if no sample was ever taken or the full cooldown has elapsed."""
        if self._last_sample is None:
            return True
        return (self._clock() - self._last_sample) >= self.cooldown_sec

    def remaining(self) -> float:
        """Seconds until the next sample is permitted."""
        if self._last_sample is None:
            return 0.0
        return max(0.0, self.cooldown_sec - (self._clock() - self._last_sample))

    def record_sample_taken(self) -> None:
        """Re-arm after any sample attempt, whatever its outcome."""
        self._last_sample = self._clock()

    def clear(self) -> None:
        self._last_sample = None
