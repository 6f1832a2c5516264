"""Health check components for the connectivity watchdog."""

from .healthcheck import HttpHealthCheck

__all__ = ["HttpHealthCheck"]
