"""Tests for the JSON state store."""

import json
from datetime import timedelta

import pytest

from uplinkwatch.core.errors import StateStoreError
from uplinkwatch.models import PersistedState
from uplinkwatch.storage.state_store import JsonStateStore, load_or_default


def test_read_missing_file_returns_none(store):
    """An absent record is not an error."""
    assert store.read() is None
    assert store.exists() is False


def test_load_missing_file_returns_healthy_default(store, clock):
    """First run looks connected, with timestamps set to now."""
    state = store.load()

    assert state.is_connected is True
    assert state.start_time == clock.now
    assert state.last_connected == clock.now
    assert state.last_disconnected is None
    assert state.last_ip == ""


def test_save_creates_missing_directory(store):
    """The store can be the first writer of its directory."""
    assert not store.path.parent.exists()

    store.save(PersistedState.fresh())

    assert store.exists()


def test_round_trip_with_unset_fields(store, clock):
    """Unset last_disconnected and last_ip survive a save/load."""
    original = PersistedState.fresh(clock.now)

    store.save(original)

    assert store.load() == original


def test_round_trip_with_all_fields_set(store, clock):
    original = PersistedState(
        start_time=clock.now - timedelta(days=2),
        is_connected=False,
        last_connected=clock.now - timedelta(minutes=5),
        last_disconnected=clock.now - timedelta(minutes=4),
        last_ip="203.0.113.10",
    )

    store.save(original)
    loaded = store.load()

    assert loaded == original
    assert loaded.last_disconnected == original.last_disconnected


def test_saved_file_uses_named_fields_and_iso_timestamps(store, clock):
    store.save(PersistedState.fresh(clock.now))

    data = json.loads(store.path.read_text())

    assert set(data) == {"start_time", "is_connected", "last_connected", "last_disconnected", "last_ip"}
    assert data["last_disconnected"] is None
    assert data["start_time"].startswith("2026-03-01T12:00:00")


def test_zero_time_sentinel_reads_as_unset(tmp_path):
    """Zero timestamps and empty strings mean "unset"."""
    path = tmp_path / "state.json"
    path.write_text(json.dumps({
        "last_connected": "2026-03-01T11:59:00Z",
        "last_disconnected": "0001-01-01T00:00:00Z",
        "is_connected": True,
        "start_time": "2026-03-01T08:00:00Z",
    }))

    state = JsonStateStore(path).load()

    assert state.last_disconnected is None
    assert state.last_ip == ""
    assert state.reference_time.isoformat() == "2026-03-01T11:59:00+00:00"


def test_empty_string_timestamp_reads_as_unset(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({
        "last_connected": "2026-03-01T11:59:00Z",
        "last_disconnected": "",
        "is_connected": True,
        "start_time": "2026-03-01T08:00:00Z",
        "last_ip": None,
    }))

    state = JsonStateStore(path).load()

    assert state.last_disconnected is None
    assert state.last_ip == ""


def test_corrupt_file_raises_store_error(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json")

    with pytest.raises(StateStoreError):
        JsonStateStore(path).load()


def test_save_failure_raises_store_error(tmp_path):
    """A file where the directory should be makes the write fail."""
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    store = JsonStateStore(blocker / "state.json")

    with pytest.raises(StateStoreError):
        store.save(PersistedState.fresh())


def test_save_leaves_no_temporary_files(store):
    store.save(PersistedState.fresh())
    store.save(PersistedState.fresh())

    assert [p.name for p in store.path.parent.iterdir()] == ["state.json"]


def test_load_or_default_replaces_corrupt_state(tmp_path, clock):
    path = tmp_path / "state.json"
    path.write_text("garbage")

    state = load_or_default(JsonStateStore(path), clock)

    assert state.is_connected is True
    assert state.start_time == clock.now


def test_undecodable_file_raises_store_error(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(StateStoreError):
        store.read()


def test_load_or_default_replaces_undecodable_state(store, clock):
    store.path.parent.mkdir(parents=True)
    store.path.write_bytes(b"\xff\xfe\x00garbage")

    state = load_or_default(store, clock)

    assert state.is_connected is True
    assert state.start_time == clock.now
