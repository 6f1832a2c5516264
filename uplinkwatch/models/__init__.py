"""Model components for the connectivity watchdog."""

from .events import (
    IpChangedPayload,
    NotificationKind,
    NotificationPayload,
    ReconnectedPayload,
    StartupCause,
    StartupPayload,
)
from .persisted_state import PersistedState

__all__ = [
    "IpChangedPayload",
    "NotificationKind",
    "NotificationPayload",
    "PersistedState",
    "ReconnectedPayload",
    "StartupCause",
    "StartupPayload",
]
