"""
Unit tests for the presence scorer.
"""

import random
import unittest

from facewatch.core.presence_scorer import PresenceScorer, clamp
from facewatch.core.types import DetectionVerdict

ABSENT = DetectionVerdict.ABSENT
PRESENT = DetectionVerdict.PRESENT
INCONCLUSIVE = DetectionVerdict.INCONCLUSIVE


class TestPresenceScorer(unittest.TestCase):
    """Test cases for the asymmetric presence score."""

    def setUp(self):
        self.scorer = PresenceScorer(score_min=0, score_max=100, neutral=50, increment=8, decrement=12)

    def test_starts_at_neutral(self):
        self.assertEqual(self.scorer.score, 50)

    def test_absent_sequence_erodes_score(self):
        scores = [self.scorer.update(ABSENT) for _ in range(3)]
        self.assertEqual(scores, [38, 26, 14])

    def test_absent_clamps_at_minimum(self):
        for _ in range(3):
            self.scorer.update(ABSENT)
        self.assertEqual(self.scorer.update(ABSENT), 2)
        self.assertEqual(self.scorer.update(ABSENT), 0)
        self.assertEqual(self.scorer.update(ABSENT), 0)

    def test_present_clamps_at_maximum(self):
        for _ in range(20):
            self.scorer.update(PRESENT)
        self.assertEqual(self.scorer.score, 100)

    def test_inconclusive_scores_like_absent(self):
        other = PresenceScorer()
        for _ in range(4):
            self.scorer.update(INCONCLUSIVE)
            other.update(ABSENT)
        self.assertEqual(self.scorer.score, other.score)

    def test_recovery_from_lock_level(self):
        for _ in range(3):
            self.scorer.update(ABSENT)
        scores = [self.scorer.update(PRESENT) for _ in range(3)]
        self.assertEqual(scores, [22, 30, 38])

    def test_score_stays_in_bounds_for_any_sequence(self):
        rng = random.Random(1234)
        verdicts = list(DetectionVerdict)
        for _ in range(2000):
            score = self.scorer.update(rng.choice(verdicts))
            self.assertGreaterEqual(score, 0)
            self.assertLessEqual(score, 100)

    def test_preview_does_not_mutate(self):
        self.assertEqual(self.scorer.preview(ABSENT), 38)
        self.assertEqual(self.scorer.preview(PRESENT), 58)
        self.assertEqual(self.scorer.score, 50)

    def test_reset_returns_to_neutral(self):
        self.scorer.update(ABSENT)
        self.scorer.update(ABSENT)
        self.scorer.reset()
        self.assertEqual(self.scorer.score, 50)

    def test_invalid_configuration(self):
        with self.assertRaises(ValueError):
            PresenceScorer(score_min=0, score_max=100, neutral=150)
        with self.assertRaises(ValueError):
            PresenceScorer(increment=0)
        with self.assertRaises(ValueError):
            PresenceScorer(decrement=-1)

    def test_clamp(self):
        self.assertEqual(clamp(-5, 0, 100), 0)
        self.assertEqual(clamp(105, 0, 100), 100)
        self.assertEqual(clamp(42, 0, 100), 42)


if __name__ == '__main__':
    unittest.main()
