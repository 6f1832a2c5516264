"""Exception hierarchy for the connectivity watchdog."""


class WatchdogError(Exception):
    """Base class for all watchdog errors."""


class StateStoreError(WatchdogError, OSError):
    """Raised when the persisted state file cannot be read or written."""


class ProbeError(WatchdogError):
    """Raised when no address-resolution backend is reachable."""


class NotificationError(WatchdogError):
    """Raised when a notification could not be delivered."""


class HealthCheckError(WatchdogError):
    """Raised when the external health ping fails."""


class ClockError(WatchdogError):
    """Raised when the system uptime cannot be determined."""


class ConfigError(WatchdogError):
    """Raised for invalid configuration values."""
