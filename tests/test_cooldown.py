"""
Unit tests for the camera cooldown gate.
"""

import unittest

from facewatch.core.cooldown import CooldownGate
from fakes import FakeClock


class TestCooldownGate(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.gate = CooldownGate(8.0, clock=self.clock)

    def test_permits_before_first_sample(self):
        self.assertTrue(self.gate.permit())
        self.assertEqual(self.gate.remaining(), 0.0)
        self.assertIsNone(self.gate.last_sample)

    def test_denies_for_full_cooldown(self):
        self.gate.record_sample_taken()
        for elapsed in (0.0, 1.0, 5.0, 7.99):
            self.clock.now = self.gate.last_sample + elapsed
            self.assertFalse(self.gate.permit(), f"permitted after {elapsed}s")

    def test_permits_once_cooldown_elapsed(self):
        self.gate.record_sample_taken()
        self.clock.advance(8.0)
        self.assertTrue(self.gate.permit())
        self.clock.advance(30.0)
        self.assertTrue(self.gate.permit())

    def test_every_record_restarts_cooldown(self):
        self.gate.record_sample_taken()
        self.clock.advance(9.0)
        self.gate.record_sample_taken()
        self.clock.advance(4.0)
        self.assertFalse(self.gate.permit())
        self.assertAlmostEqual(self.gate.remaining(), 4.0)

    def test_clear(self):
        self.gate.record_sample_taken()
        self.gate.clear()
        self.assertTrue(self.gate.permit())

    def test_negative_cooldown_rejected(self):
        with self.assertRaises(ValueError):
            CooldownGate(-1.0)


if __name__ == '__main__':
    unittest.main()
