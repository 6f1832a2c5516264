"""Application orchestration for the connectivity watchdog."""

from .app_manager import AppManager

__all__ = ["AppManager"]
