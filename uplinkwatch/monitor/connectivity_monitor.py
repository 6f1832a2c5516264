"""Connectivity monitor: probes the external address and tracks transitions."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Optional, Set

import structlog
from pyee.asyncio import AsyncIOEventEmitter

from ..core.errors import ProbeError, StateStoreError
from ..core.interfaces import IAddressProber, IHealthCheck, INotifier, IStateStore
from ..models import (
    IpChangedPayload,
    NotificationKind,
    NotificationPayload,
    PersistedState,
    ReconnectedPayload,
)
from ..storage.state_store import load_or_default
from ..utils.time_utils import Clock, format_duration, utc_now

logger = structlog.get_logger(__name__)

EVENT_DISCONNECTED = "disconnected"
EVENT_RECONNECTED = "reconnected"
EVENT_IP_CHANGED = "ip_changed"


@dataclass(frozen=True)
class MonitorState:
    """In-memory view of connectivity, threaded through each probe cycle."""

    connected: bool = True
    disconnect_time: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: PersistedState) -> "MonitorState":
        if record.is_connected:
            return cls(connected=True)
        return cls(connected=False, disconnect_time=record.last_disconnected)


class ConnectivityMonitor:
    """
    Periodically probes internet connectivity and keeps the persisted
    record in step with connect, disconnect and address-change transitions.

    Probe cycles run one at a time on a fixed schedule. Notifications for a
    transition are sent before that transition is written, so a crash in
    between can only repeat a notification, never lose one. After each
    committed transition an event is emitted for in-process observers.
    """

    def __init__(
        self,
        store: IStateStore,
        prober: IAddressProber,
        notifier: INotifier,
        healthcheck: Optional[IHealthCheck] = None,
        interval: float = 60.0,
        clock: Clock = utc_now,
        initial_state: Optional[MonitorState] = None,
        stop_grace: float = 30.0,
    ):
        """
        Initialize the connectivity monitor.

        Args:
            store: Persisted state store; this monitor is its only periodic writer
            prober: External address prober, a failed probe means "disconnected"
            notifier: Sender for reconnection and address-change notifications
            healthcheck: Optional health ping fired after every cycle
            interval: Time in seconds between probe cycles
            clock: Source of "now"
            initial_state: Starting in-memory state, optimistic "connected" by default
            stop_grace: Seconds to let an in-flight cycle finish on stop
        """
        self._store = store
        self._prober = prober
        self._notifier = notifier
        self._healthcheck = healthcheck
        self._interval = interval
        self._clock = clock
        self._state = initial_state or MonitorState()
        self._stop_grace = stop_grace

        self._lock = asyncio.Lock()
        self._emitter = AsyncIOEventEmitter()
        self._emitter.on("error", self._on_observer_error)
        self._ping_tasks: Set[asyncio.Task] = set()
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def state(self) -> MonitorState:
        return self._state

    @state.setter
    def state(self, value: MonitorState) -> None:
        self._state = value

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending_pings(self) -> int:
        """Number of health pings still in flight."""
        return len(self._ping_tasks)

    def on(self, event: str, callback: Callable) -> None:
        """
        Register an observer for a transition event.

        Args:
            event: One of "disconnected", "reconnected" or "ip_changed"
            callback: Function or coroutine function to invoke
        """
        self._emitter.on(event, callback)

    async def start(self) -> None:
        """
        Start the monitoring loop. The first cycle runs immediately.

        Raises:
            ValueError: If the interval is not a positive number
        """
        if self._running:
            return

        if isinstance(self._interval, bool) or not isinstance(self._interval, (int, float)) \
                or self._interval <= 0:
            raise ValueError(f"Monitor interval must be a positive number, got {self._interval!r}")

        self._running = True
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._monitor_loop())
        logger.info(f"Connectivity monitor started (interval {self._interval}s)")

    async def stop(self) -> None:
        """Stop scheduling cycles, letting an in-flight cycle finish."""
        if not self._running:
            return

        self._running = False
        self._stop_event.set()

        if self._task:
            done, _ = await asyncio.wait({self._task}, timeout=self._stop_grace)
            if not done:
                logger.error("Timeout while waiting for the probe cycle to finish - cancelling it")
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
            self._task = None

        for task in list(self._ping_tasks):
            task.cancel()

        logger.info("Connectivity monitor stopped")

    async def mark_disconnected(self) -> None:
        """Write is_connected=False for shutdown. Repeated calls are no-ops."""
        async with self._lock:
            record = load_or_default(self._store, self._clock)
            if not record.is_connected:
                logger.debug("State already marked as disconnected")
                return
            record.is_connected = False
            self._save(record)
        self._state = MonitorState(connected=False)
        logger.info("Final state saved as disconnected")

    async def run_cycle(self, state: MonitorState) -> MonitorState:
        """
        Run one probe cycle.

        Args:
            state: In-memory state before the cycle

        Returns:
            In-memory state after the cycle
        """
        logger.debug("Checking internet connection")
        try:
            ip = await self._prober.probe()
        except ProbeError as e:
            if state.connected:
                logger.warning(f"Internet connection lost: {e}")
                state = await self._handle_disconnection()
            else:
                logger.debug(f"Still no internet connection: {e}")
        else:
            if state.connected:
                await self._refresh_connected(ip)
            else:
                state = await self._handle_reconnection(state, ip)

        self._start_healthcheck()
        return state

    async def _monitor_loop(self) -> None:
        """Main monitoring loop."""
        loop = asyncio.get_running_loop()
        next_run = loop.time()

        while self._running:
            try:
                self._state = await self.run_cycle(self._state)
            except asyncio.CancelledError:
                logger.debug("Connectivity monitor task cancelled")
                raise
            except Exception as e:
                logger.error(f"Error in connectivity monitor: {e}")

            next_run += self._interval
            now = loop.time()
            if now > next_run:
                skipped = int((now - next_run) // self._interval) + 1
                logger.warning(f"Probe cycle overran the interval, skipping {skipped} tick(s)")
                next_run += skipped * self._interval

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=next_run - loop.time())
            except asyncio.TimeoutError:
                pass

    async def _handle_disconnection(self) -> MonitorState:
        now = self._clock()
        async with self._state_scope() as record:
            record.is_connected = False
            record.last_disconnected = now

        self._emitter.emit(EVENT_DISCONNECTED, now)
        return MonitorState(connected=False, disconnect_time=now)

    async def _handle_reconnection(self, state: MonitorState, ip: str) -> MonitorState:
        now = self._clock()
        async with self._state_scope() as record:
            outage = self._outage_duration(record, state, now)
            if outage > timedelta(0):
                logger.info(f"Internet connection restored after {format_duration(outage)}", ip=ip)
                await self._notify(
                    NotificationKind.RECONNECTED,
                    ReconnectedPayload(ip=ip, outage_duration=outage, occurred_at=now),
                )
            else:
                logger.info("Internet connection restored", ip=ip)

            record.is_connected = True
            record.last_connected = now
            record.last_disconnected = None
            record.last_ip = ip

        self._emitter.emit(EVENT_RECONNECTED, ip, outage)
        return MonitorState(connected=True)

    async def _refresh_connected(self, ip: str) -> None:
        now = self._clock()
        previous_ip = None
        async with self._state_scope() as record:
            # No previous address means first observation, not a change
            if record.last_ip and record.last_ip != ip:
                previous_ip = record.last_ip
                logger.info(f"External IP changed from {previous_ip} to {ip}")
                await self._notify(
                    NotificationKind.IP_CHANGED,
                    IpChangedPayload(old_ip=previous_ip, new_ip=ip, occurred_at=now),
                )

            record.is_connected = True
            record.last_connected = now
            record.last_ip = ip

        if previous_ip is not None:
            self._emitter.emit(EVENT_IP_CHANGED, previous_ip, ip)

    @staticmethod
    def _outage_duration(record: PersistedState, state: MonitorState, now: datetime) -> timedelta:
        if record.last_disconnected is not None:
            return now - record.last_disconnected
        if state.disconnect_time is not None:
            return now - state.disconnect_time
        return timedelta(0)

    @asynccontextmanager
    async def _state_scope(self) -> AsyncIterator[PersistedState]:
        """Load the record, hand it to the caller to mutate, then save it."""
        async with self._lock:
            record = load_or_default(self._store, self._clock)
            yield record
            self._save(record)

    def _save(self, record: PersistedState) -> None:
        try:
            self._store.save(record)
        except StateStoreError as e:
            logger.error(f"Error saving state: {e}")

    async def _notify(self, kind: NotificationKind, payload: NotificationPayload) -> None:
        try:
            await self._notifier.send(kind, payload)
        except Exception as e:
            logger.error(f"Error sending {kind.value} notification: {e}")

    def _start_healthcheck(self) -> None:
        if self._healthcheck is None:
            return
        task = asyncio.create_task(self._healthcheck.ping())
        self._ping_tasks.add(task)
        task.add_done_callback(self._on_healthcheck_done)

    def _on_healthcheck_done(self, task: asyncio.Task) -> None:
        self._ping_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Error in healthcheck: {error}")

    def _on_observer_error(self, error: Exception) -> None:
        logger.error(f"Error in transition observer: {error}")
