"""Core interfaces and errors for the connectivity watchdog."""

from .errors import (
    ClockError,
    ConfigError,
    HealthCheckError,
    NotificationError,
    ProbeError,
    StateStoreError,
    WatchdogError,
)
from .interfaces import IAddressProber, IHealthCheck, INotifier, IStateStore, IUptimeSource

__all__ = [
    "ClockError",
    "ConfigError",
    "HealthCheckError",
    "IAddressProber",
    "IHealthCheck",
    "INotifier",
    "IStateStore",
    "IUptimeSource",
    "NotificationError",
    "ProbeError",
    "StateStoreError",
    "WatchdogError",
]
