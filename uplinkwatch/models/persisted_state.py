"""Pydantic model for the persisted connectivity record."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..utils.time_utils import ensure_utc, utc_now

# Zero-time sentinel written by older state files for "never disconnected"
_ZERO_TIME_PREFIX = "0001-01-01"


class PersistedState(BaseModel):
    """Connectivity and timing history that survives process restarts."""

    model_config = ConfigDict(validate_assignment=True)

    start_time: datetime
    is_connected: bool = True
    last_connected: datetime
    last_disconnected: Optional[datetime] = None  # None while no outage is open
    last_ip: str = ""

    @classmethod
    def fresh(cls, now: Optional[datetime] = None) -> "PersistedState":
        """
        Build the default "connected, now" record used on first run.

        Args:
            now: Timestamp to use for start_time and last_connected

        Returns:
            A new PersistedState
        """
        now = now or utc_now()
        return cls(start_time=now, last_connected=now, is_connected=True)

    @field_validator("last_disconnected", mode="before")
    @classmethod
    def _unset_timestamp(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, str) and value.startswith(_ZERO_TIME_PREFIX):
            return None
        if isinstance(value, datetime) and value.year == 1:
            return None
        return value

    @field_validator("last_ip", mode="before")
    @classmethod
    def _unset_ip(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("start_time", "last_connected", "last_disconnected")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @property
    def reference_time(self) -> datetime:
        """The later of last_connected and start_time."""
        return max(self.last_connected, self.start_time)
