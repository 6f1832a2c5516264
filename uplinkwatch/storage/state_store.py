"""JSON file storage for the persisted connectivity record."""

import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

import structlog
from pydantic import ValidationError

from ..core.errors import StateStoreError
from ..core.interfaces import IStateStore
from ..models import PersistedState
from ..utils.time_utils import Clock, utc_now

logger = structlog.get_logger(__name__)


class JsonStateStore(IStateStore):
    """File system-based store for the persisted connectivity record."""

    def __init__(self, path: Union[str, Path], clock: Clock = utc_now):
        """
        Initialize the JsonStateStore.

        Args:
            path: Location of the state file
            clock: Source of "now" for default records
        """
        self._path = Path(path)
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        """Return whether a record has been written."""
        return self._path.is_file()

    def read(self) -> Optional[PersistedState]:
        """
        Read the persisted record.

        Returns:
            The stored record, or None if the file does not exist

        Raises:
            StateStoreError: If the file exists but cannot be read or decoded
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StateStoreError(f"Could not read state file {self._path}: {e}") from e

        try:
            return PersistedState.model_validate_json(raw)
        except (ValidationError, UnicodeDecodeError) as e:
            raise StateStoreError(f"State file {self._path} is corrupt: {e}") from e

    def load(self) -> PersistedState:
        """
        Read the persisted record, falling back to a fresh default if absent.

        Raises:
            StateStoreError: If the file exists but cannot be read or decoded
        """
        state = self.read()
        if state is None:
            logger.debug(f"No state file at {self._path}, starting from defaults")
            return PersistedState.fresh(self._clock())
        return state

    def save(self, state: PersistedState) -> None:
        """
        Write the record, replacing the previous one.

        The data is written to a temporary file in the same directory and
        moved over the record, so readers never see a partial write.

        Args:
            state: Record to persist

        Raises:
            StateStoreError: If the directory or file cannot be written
        """
        data = state.model_dump_json(indent=2)
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self._path.parent), prefix=f".{self._path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as e:
            raise StateStoreError(f"Could not write state file {self._path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass


def load_or_default(store: IStateStore, clock: Callable = utc_now) -> PersistedState:
    """
    Load the record, logging and replacing unreadable state with a default.

    Args:
        store: Store to read from
        clock: Source of "now" for the default record

    Returns:
        The stored record or a fresh default
    """
    try:
        return store.load()
    except StateStoreError as e:
        logger.error(f"Error loading state, using defaults: {e}")
        return PersistedState.fresh(clock())
