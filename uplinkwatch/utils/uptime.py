"""System uptime source backed by /proc/uptime."""

import logging
from datetime import timedelta
from pathlib import Path

from ..core.errors import ClockError
from ..core.interfaces import IUptimeSource

logger = logging.getLogger(__name__)


class ProcUptimeSource(IUptimeSource):
    """Reads host uptime from the Linux proc filesystem."""

    def __init__(self, path: str = "/proc/uptime"):
        self._path = Path(path)

    def uptime(self) -> timedelta:
        # First field is seconds since boot, second is aggregate idle time
        try:
            fields = self._path.read_text().split()
        except OSError as e:
            raise ClockError(f"Could not read {self._path}: {e}") from e

        if not fields:
            raise ClockError(f"{self._path} is empty")

        try:
            seconds = float(fields[0])
        except ValueError as e:
            raise ClockError(f"Unexpected uptime value {fields[0]!r}") from e

        logger.debug(f"System uptime is {seconds:.0f}s")
        return timedelta(seconds=seconds)
