"""Core interfaces for the connectivity watchdog."""

import abc
from datetime import timedelta
from typing import Optional, Protocol, runtime_checkable

from ..models import NotificationKind, NotificationPayload, PersistedState


@runtime_checkable
class IStateStore(Protocol):
    """Interface for persisted state stores."""

    def read(self) -> Optional[PersistedState]:
        """
        Read the persisted record.

        Returns:
            The stored record, or None if no record exists

        Raises:
            StateStoreError: If the record exists but cannot be read
        """
        ...

    def load(self) -> PersistedState:
        """
        Read the persisted record, falling back to a fresh default.

        Returns:
            The stored record, or a "connected, now" default if none exists

        Raises:
            StateStoreError: If the record exists but cannot be read
        """
        ...

    def save(self, state: PersistedState) -> None:
        """
        Persist the record, replacing any previous one.

        Args:
            state: Record to write

        Raises:
            StateStoreError: If the record cannot be written
        """
        ...


class IAddressProber(abc.ABC):
    """Interface for external address probers."""

    @abc.abstractmethod
    async def probe(self) -> str:
        """
        Resolve the externally visible address of this host.

        Returns:
            The external address

        Raises:
            ProbeError: If no address service is reachable
        """
        pass


class INotifier(abc.ABC):
    """Interface for notification senders."""

    @abc.abstractmethod
    async def send(self, kind: NotificationKind, payload: NotificationPayload) -> None:
        """
        Deliver a notification.

        Args:
            kind: What happened
            payload: Details for this kind of notification

        Raises:
            NotificationError: If delivery fails
        """
        pass


class IHealthCheck(abc.ABC):
    """Interface for external health ping clients."""

    @abc.abstractmethod
    async def ping(self) -> None:
        """
        Send one health ping.

        Raises:
            HealthCheckError: If the ping fails
        """
        pass


class IUptimeSource(abc.ABC):
    """Interface for system uptime sources."""

    @abc.abstractmethod
    def uptime(self) -> timedelta:
        """
        Get the time since the host last booted.

        Raises:
            ClockError: If the uptime is unavailable
        """
        pass
