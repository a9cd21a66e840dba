#!/usr/bin/env python3
"""
Main entry point for the FaceWatch auto-lock service.
Locks the workstation when the user is idle and no face is seen by the webcam.
"""

import argparse
import logging
import signal
import sys

from facewatch.core.orchestrator import build_service
from facewatch.core.types import FaceWatchError
from facewatch.utils.config import Config, DEFAULT_CONFIG_FILE, config
from facewatch.utils.logger import logger


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="FaceWatch - presence-aware workstation auto-lock")

    parser.add_argument("--config", type=str, default="",
                        help=f"JSON configuration file (default: {DEFAULT_CONFIG_FILE} if present)")
    parser.add_argument("--camera", "-c", type=int, default=None,
                        help="Camera device index")
    parser.add_argument("--backend", "-b", type=str, default=None,
                        choices=["opencv", "mediapipe"],
                        help="Face detection backend")
    parser.add_argument("--tick-interval", type=float, default=None,
                        help="Seconds between checks")
    parser.add_argument("--idle-threshold", type=int, default=None,
                        help="Idle seconds before the camera is used")
    parser.add_argument("--cooldown", type=float, default=None,
                        help="Minimum seconds between camera activations")
    parser.add_argument("--dry-run", action="store_true",
                        help="Log lock decisions instead of locking")
    parser.add_argument("--tray", action="store_true",
                        help="Show a system tray icon with notifications")
    parser.add_argument("--save-config", type=str, default="",
                        help="Write the effective configuration to this file and exit")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose output")

    return parser.parse_args(argv)


def apply_arguments(settings: Config, args) -> Config:
    """Overlay command line overrides on the loaded configuration."""
    if args.config:
        settings.load_from_file(args.config)
    if args.camera is not None:
        settings.camera.device_id = args.camera
    if args.backend is not None:
        settings.detection.backend = args.backend
    if args.tick_interval is not None:
        settings.engine.tick_interval_sec = args.tick_interval
    if args.idle_threshold is not None:
        settings.engine.idle_threshold_sec = args.idle_threshold
    if args.cooldown is not None:
        settings.camera.cooldown_sec = args.cooldown
    if args.dry_run:
        settings.engine.dry_run = True
    return settings


def main(argv=None) -> int:
    """Main function."""
    args = parse_arguments(argv)
    settings = apply_arguments(config, args)

    if args.verbose:
        logger.set_console_level(logging.DEBUG)

    if not settings.validate_config():
        return 2

    if args.save_config:
        settings.save_to_file(args.save_config)
        logger.info(f"Configuration written to {args.save_config}")
        return 0

    try:
        if args.tray:
            from facewatch.gui.tray import run_tray
            return run_tray(lambda sink: build_service(settings, notification_sink=sink))

        service = build_service(settings)
        signal.signal(signal.SIGTERM, lambda *_: service.stop())
        service.run_forever()
        return 0

    except FaceWatchError as e:
        logger.critical(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
