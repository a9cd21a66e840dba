"""Notification sinks and the optional system tray (PySide6)."""
