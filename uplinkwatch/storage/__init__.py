"""Storage components for the connectivity watchdog."""

from .state_store import JsonStateStore, load_or_default

__all__ = ["JsonStateStore", "load_or_default"]
