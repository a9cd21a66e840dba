"""
Unit tests for idle tracking and idle-time providers.
"""

import unittest
from unittest import mock

from facewatch.core.idle_tracker import (IdleTracker, WindowsIdleProvider, XprintidleIdleProvider,
                                         create_idle_provider)
from facewatch.core.types import CollaboratorUnavailableError, Transition
from fakes import FakeIdleProvider


class TestIdleTracker(unittest.TestCase):

    def setUp(self):
        self.provider = FakeIdleProvider()
        self.tracker = IdleTracker(self.provider, idle_threshold_sec=7)

    def test_negative_idle_is_clamped(self):
        self.provider.value = -3
        self.assertEqual(self.tracker.idle_seconds(), 0)

    def test_provider_failure_counts_as_active(self):
        self.provider.error = OSError("GetLastInputInfo failed")
        self.assertEqual(self.tracker.idle_seconds(), 0)

    def test_threshold_is_inclusive(self):
        self.assertFalse(self.tracker.is_idle(6))
        self.assertTrue(self.tracker.is_idle(7))

    def test_edges_fire_once_per_crossing(self):
        observed = [self.tracker.observe(value) for value in (0, 5, 7, 8, 20, 1, 0, 9)]
        self.assertEqual(observed, [None, None, Transition.BECAME_IDLE, None, None,
                                    Transition.BECAME_ACTIVE, None, Transition.BECAME_IDLE])

    def test_reset_restores_active_baseline(self):
        self.tracker.observe(30)
        self.assertTrue(self.tracker.was_idle)
        self.tracker.reset()
        self.assertFalse(self.tracker.was_idle)
        self.assertEqual(self.tracker.observe(30), Transition.BECAME_IDLE)


class TestIdleProviders(unittest.TestCase):

    def test_unsupported_platform(self):
        with self.assertRaises(CollaboratorUnavailableError):
            create_idle_provider("Plan9")

    @mock.patch("facewatch.core.idle_tracker.shutil.which", return_value=None)
    def test_xprintidle_missing(self, _which):
        with self.assertRaises(CollaboratorUnavailableError):
            XprintidleIdleProvider()

    @mock.patch("facewatch.core.idle_tracker.subprocess.run")
    @mock.patch("facewatch.core.idle_tracker.shutil.which", return_value="/usr/bin/xprintidle")
    def test_xprintidle_reports_seconds(self, _which, run):
        run.return_value = mock.Mock(stdout="12345\n")
        provider = XprintidleIdleProvider()
        self.assertEqual(provider.idle_seconds(), 12)

    @mock.patch("facewatch.core.idle_tracker.ctypes")
    def test_windows_provider_needs_windll(self, fake_ctypes):
        del fake_ctypes.windll
        with self.assertRaises(CollaboratorUnavailableError):
            WindowsIdleProvider()


if __name__ == '__main__':
    unittest.main()
