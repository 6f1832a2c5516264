"""Shared fixtures for the watchdog tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from uplinkwatch.config import Config
from uplinkwatch.core.interfaces import IAddressProber, INotifier
from uplinkwatch.storage.state_store import JsonStateStore


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path, clock):
    """State store backed by a file in a temporary directory."""
    return JsonStateStore(tmp_path / "state" / "state.json", clock=clock)


@pytest.fixture
def prober():
    return AsyncMock(spec=IAddressProber)


@pytest.fixture
def notifier():
    return AsyncMock(spec=INotifier)


@pytest.fixture(autouse=True)
def clean_config():
    """Keep dynamic config overrides from leaking between tests."""
    Config.reset()
    yield
    Config.reset()
