"""
Tests for configuration and the command line entry point.
"""

import json
import os
import tempfile
import unittest
from unittest import mock

import main
from facewatch.utils.config import Config
from facewatch.utils.logger import FaceWatchLogger


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        config = Config()
        self.assertEqual(config.engine.tick_interval_sec, 5.0)
        self.assertEqual(config.engine.idle_threshold_sec, 7)
        self.assertEqual(config.camera.cooldown_sec, 8.0)
        self.assertEqual(config.detection.min_face_size, 40)
        self.assertEqual(config.detection.min_brightness, 30.0)
        self.assertEqual(config.scoring.lock_threshold, 20)
        self.assertEqual(config.scoring.recovery_margin, 10)
        self.assertEqual((config.scoring.increment, config.scoring.decrement), (8, 12))
        self.assertTrue(config.validate_config())

    def test_invalid_values(self):
        config = Config()
        config.scoring.score_neutral = 150
        config.detection.backend = "dlib"
        errors = config.collect_errors()
        self.assertEqual(len(errors), 2)
        self.assertFalse(config.validate_config())

    def test_file_overrides(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "facewatch.json")
            with open(path, "w") as f:
                json.dump({"engine": {"idle_threshold_sec": 120, "unknown": 1},
                           "scoring": {"lock_threshold": 25},
                           "bogus": {"x": 1}}, f)
            config = Config(path)
        self.assertEqual(config.engine.idle_threshold_sec, 120)
        self.assertEqual(config.scoring.lock_threshold, 25)
        self.assertFalse(hasattr(config.engine, "unknown"))

    def test_unreadable_file_keeps_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "broken.json")
            with open(path, "w") as f:
                f.write("{not json")
            config = Config(path)
        self.assertEqual(config.engine.idle_threshold_sec, 7)


class TestConfigurationLog(unittest.TestCase):

    def test_logs_given_settings_not_global(self):
        settings = Config()
        settings.engine.idle_threshold_sec = 120
        log = FaceWatchLogger("facewatch.configuration_test")
        with mock.patch.object(log, "info") as info:
            log.log_configuration(settings)
        lines = [call[0][0] for call in info.call_args_list]
        self.assertIn("   - Idle Timeout: 120s", lines)


class TestCommandLine(unittest.TestCase):

    def test_arguments_override_config(self):
        args = main.parse_arguments(["--camera", "2", "--backend", "mediapipe",
                                     "--idle-threshold", "30", "--cooldown", "15", "--dry-run"])
        config = main.apply_arguments(Config(), args)
        self.assertEqual(config.camera.device_id, 2)
        self.assertEqual(config.detection.backend, "mediapipe")
        self.assertEqual(config.engine.idle_threshold_sec, 30)
        self.assertEqual(config.camera.cooldown_sec, 15)
        self.assertTrue(config.engine.dry_run)

    def test_save_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "out", "facewatch.json")
            self.assertEqual(main.main(["--save-config", path, "--tick-interval", "2"]), 0)
            with open(path) as f:
                saved = json.load(f)
        self.assertEqual(saved["engine"]["tick_interval_sec"], 2.0)
        self.assertIn("scoring", saved)


if __name__ == '__main__':
    unittest.main()
