"""Startup cause detection for the connectivity watchdog."""

from .startup_detector import StartupDetector, classify

__all__ = ["StartupDetector", "classify"]
