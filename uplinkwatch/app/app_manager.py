"""Application Manager for the connectivity watchdog."""

from datetime import timedelta
from typing import Optional

import structlog

from ..core.errors import ProbeError, StateStoreError
from ..core.interfaces import IAddressProber, INotifier, IStateStore
from ..detector.startup_detector import StartupDetector
from ..models import NotificationKind, StartupCause, StartupPayload
from ..monitor.connectivity_monitor import (
    EVENT_DISCONNECTED,
    EVENT_IP_CHANGED,
    EVENT_RECONNECTED,
    ConnectivityMonitor,
    MonitorState,
)
from ..storage.state_store import load_or_default
from ..utils.time_utils import Clock, format_duration, utc_now

logger = structlog.get_logger(__name__)

UNAVAILABLE_IP = "unavailable"


class AppManager:
    """Application Manager for bootstrapping and coordinating components."""

    def __init__(
        self,
        store: IStateStore,
        prober: IAddressProber,
        notifier: INotifier,
        detector: StartupDetector,
        monitor: ConnectivityMonitor,
        app_name: str = "uplinkwatch",
        clock: Clock = utc_now,
    ):
        """
        Initialize the AppManager.

        Args:
            store: Persisted state store shared with the monitor
            prober: External address prober used for the startup address
            notifier: Sender for the startup notification
            detector: Startup cause classifier
            monitor: Connectivity monitor to run
            app_name: Name of this watchdog instance, for logs
            clock: Source of "now"
        """
        self._store = store
        self._prober = prober
        self._notifier = notifier
        self._detector = detector
        self._monitor = monitor
        self._app_name = app_name
        self._clock = clock
        self._running = False
        self._startup_cause: Optional[StartupCause] = None

    @property
    def startup_cause(self) -> Optional[StartupCause]:
        return self._startup_cause

    async def initialize(self) -> None:
        """
        Classify the startup, announce it, and reset the persisted record.

        The cause is detected before the record is touched, since the
        initialization write below replaces the timestamps it relies on.
        """
        logger.info(f"Initializing {self._app_name}")

        self._startup_cause = self._detector.detect()

        ip: Optional[str]
        try:
            ip = await self._prober.probe()
            logger.info(f"External IP: {ip}")
        except ProbeError as e:
            logger.warning(f"Error getting external IP, continuing without it: {e}")
            ip = None

        try:
            await self._notifier.send(
                NotificationKind.STARTUP,
                StartupPayload(ip=ip or UNAVAILABLE_IP, cause=self._startup_cause, occurred_at=self._clock()),
            )
        except Exception as e:
            logger.error(f"Error sending startup notification: {e}")

        # A manual restart during an outage must not be reported as one later
        now = self._clock()
        record = load_or_default(self._store, self._clock)
        record.is_connected = True
        record.last_connected = now
        record.last_disconnected = None
        if ip:
            record.last_ip = ip
        try:
            self._store.save(record)
        except StateStoreError as e:
            logger.error(f"Error saving initial state: {e}")

        self._monitor.state = MonitorState.from_record(record)

        self._monitor.on(EVENT_DISCONNECTED, self._handle_disconnected)
        self._monitor.on(EVENT_RECONNECTED, self._handle_reconnected)
        self._monitor.on(EVENT_IP_CHANGED, self._handle_ip_changed)

        logger.info(f"{self._app_name} initialized successfully")

    async def start(self) -> None:
        """
        Start monitoring.

        Raises:
            ValueError: If the monitor cannot start
        """
        if self._running:
            logger.info("Application is already running")
            return

        await self._monitor.start()
        self._running = True
        logger.info(f"{self._app_name} started and monitoring")

    async def stop(self) -> None:
        """Stop monitoring and record the final disconnected state."""
        if self._running:
            logger.info(f"Stopping {self._app_name}")
            await self._monitor.stop()
            self._running = False

        await self._monitor.mark_disconnected()
        logger.info(f"{self._app_name} stopped")

    def _handle_disconnected(self, at) -> None:
        logger.info(f"Disconnection recorded at {at.isoformat()}")

    def _handle_reconnected(self, ip: str, outage: timedelta) -> None:
        logger.info(f"Reconnection recorded - ip: {ip}, outage: {format_duration(outage)}")

    def _handle_ip_changed(self, old_ip: str, new_ip: str) -> None:
        logger.info(f"Address change recorded - old: {old_ip}, new: {new_ip}")
