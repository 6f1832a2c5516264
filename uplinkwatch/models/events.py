"""Startup causes and notification payload models."""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field

from ..utils.time_utils import utc_now


class StartupCause(str, Enum):
    """Why the watchdog process is starting."""

    NORMAL = "normal"
    POWER_LOSS = "power_loss"
    INTERNET_LOSS = "internet_loss"

    @property
    def description(self) -> str:
        return _CAUSE_DESCRIPTIONS[self]


_CAUSE_DESCRIPTIONS = {
    StartupCause.NORMAL: "Normal start",
    StartupCause.POWER_LOSS: "Power loss",
    StartupCause.INTERNET_LOSS: "Internet loss",
}


class NotificationKind(str, Enum):
    """Kinds of notification the monitor can raise."""

    STARTUP = "startup"
    RECONNECTED = "reconnected"
    IP_CHANGED = "ip_changed"


class NotificationPayload(BaseModel):
    """Base model for notification payloads."""

    occurred_at: datetime = Field(default_factory=utc_now)


class StartupPayload(NotificationPayload):
    """Payload for the notification sent when the watchdog starts."""

    ip: str
    cause: StartupCause = StartupCause.NORMAL


class ReconnectedPayload(NotificationPayload):
    """Payload for the notification sent when connectivity comes back."""

    ip: str
    outage_duration: timedelta


class IpChangedPayload(NotificationPayload):
    """Payload for the notification sent when the external address changes."""

    old_ip: str
    new_ip: str
