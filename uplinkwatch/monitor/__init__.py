"""Connectivity monitoring for the watchdog."""

from .connectivity_monitor import ConnectivityMonitor, MonitorState

__all__ = ["ConnectivityMonitor", "MonitorState"]
