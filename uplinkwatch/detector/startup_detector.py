"""Startup cause detection.

Reconciles the persisted connectivity record with the host uptime to guess
why the watchdog is starting: a fresh boot after a power cut, a process
restart during an internet outage, or a plain normal start.
"""

import time
from datetime import datetime, timedelta
from typing import Optional

import structlog

from ..core.errors import ClockError, StateStoreError
from ..core.interfaces import IStateStore, IUptimeSource
from ..models import PersistedState, StartupCause
from ..utils.time_utils import Clock, utc_now

logger = structlog.get_logger(__name__)

FRESH_BOOT_UPTIME = timedelta(minutes=5)
STALE_STATE_AGE = timedelta(hours=1)
RECENT_STATE_AGE = timedelta(minutes=10)


def classify(record: Optional[PersistedState], uptime: timedelta, now: datetime) -> StartupCause:
    """
    Decide the startup cause from the persisted record and the host uptime.

    Args:
        record: Persisted record, or None if there is none
        uptime: Time since the host booted
        now: Current time

    Returns:
        The startup cause
    """
    if record is None:
        if uptime < FRESH_BOOT_UPTIME:
            return StartupCause.POWER_LOSS
        return StartupCause.NORMAL

    age = now - record.reference_time

    # Stale state and a host that has not been up long enough to explain it
    if age > STALE_STATE_AGE and uptime < age:
        return StartupCause.POWER_LOSS

    # Host outlived the state but the process bounced recently
    if uptime > age and age < RECENT_STATE_AGE:
        return StartupCause.INTERNET_LOSS

    return StartupCause.NORMAL


class StartupDetector:
    """One-shot classifier run before the monitor starts."""

    def __init__(self, store: IStateStore, uptime_source: IUptimeSource, clock: Clock = utc_now):
        """
        Initialize the StartupDetector.

        Args:
            store: Store holding the persisted record
            uptime_source: Source of the host uptime
            clock: Source of "now"
        """
        self._store = store
        self._uptime_source = uptime_source
        self._clock = clock
        self._constructed_at = time.monotonic()

    def detect(self) -> StartupCause:
        """Classify why the process is starting. Never raises."""
        logger.info("Detecting startup cause")

        try:
            record = self._store.read()
        except StateStoreError as e:
            logger.error(f"Error checking state file, treating it as absent: {e}")
            record = None

        uptime = self._system_uptime()
        now = self._clock()

        if record is not None:
            logger.debug(f"State file present, reference time {record.reference_time.isoformat()}")
        else:
            logger.debug("No state file present")
        logger.debug(f"System uptime: {uptime}")

        cause = classify(record, uptime, now)
        logger.info(f"Startup cause detected: {cause.description}", cause=cause.value)
        return cause

    def _system_uptime(self) -> timedelta:
        try:
            return self._uptime_source.uptime()
        except ClockError as e:
            elapsed = timedelta(seconds=time.monotonic() - self._constructed_at)
            logger.warning(f"System uptime unavailable ({e}), approximating with process time {elapsed}")
            return elapsed
