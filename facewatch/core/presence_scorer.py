"""
Presence Scorer

Keeps a bounded integer confidence that the user is still at the desk.
Face sightings raise it slowly, misses lower it faster, so sustained
evidence is needed to stay unlocked while a short absence locks quickly.
"""

from .types import DetectionVerdict


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value to [low, high]."""
    return max(low, min(high, value))


class PresenceScorer:
    """Asymmetric up/down counter driven by detection verdicts."""

    def __init__(self, score_min: int = 0, score_max: int = 100, neutral: int = 50,
                 increment: int = 8, decrement: int = 12):
        """
        Initialize the scorer.

        Args:
            score_min: Lower bound of the score
            score_max: Upper bound of the score
            neutral: Starting value, restored by ``reset()``
            increment: Points added for a visible face
            decrement: Points removed for a miss (absent or inconclusive)
        """
        if not score_min <= neutral <= score_max:
            raise ValueError("neutral score must lie within [score_min, score_max]")
        if increment <= 0 or decrement <= 0:
            raise ValueError("increment and decrement must be positive")

        self.score_min = score_min
        self.score_max = score_max
        self.neutral = neutral
        self.increment = increment
        self.decrement = decrement
        self._score = neutral

    @property
    def score(self) -> int:
        return self._score

    def preview(self, verdict: DetectionVerdict) -> int:
        """
        Return the score ``verdict`` would produce, without applying it.

        INCONCLUSIVE (frame too dark to classify) is scored exactly like
        ABSENT. Treating low light as a miss is a policy choice: a user
        working in a dark room will eventually be locked out.
        """
        if verdict is DetectionVerdict.PRESENT:
            return clamp(self._score + self.increment, self.score_min, self.score_max)
        return clamp(self._score - self.decrement, self.score_min, self.score_max)

    def update(self, verdict: DetectionVerdict) -> int:
        """Apply one verdict and return the new score."""
        self._score = self.preview(verdict)
        return self._score

    def reset(self) -> None:
        """Back to the neutral midpoint (user became active, or session unlocked)."""
        self._score = self.neutral
