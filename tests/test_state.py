"""Tests for state management."""

import json
import re
import pytest
from datetime import datetime, timezone

from adoption_monitor.identity import generate_change_id, generate_device_id
from adoption_monitor.state import (
    DEVICE_ID_KEY,
    JsonStateStore,
    MemoryStateStore,
    get_device_id,
    get_state_file_path,
    open_state_store,
)
from adoption_monitor.statistics import StatisticsAggregator


class TestStateFile:
    """Tests for state file operations."""

    def test_get_state_file_path(self, temp_state_dir):
        """State file path is in home directory."""
        path = get_state_file_path()
        assert path.name == 'state.json'
        assert '.adoption-monitor' in str(path)

    def test_get_state_file_path_custom_dir(self, tmp_path):
        """A custom state directory is created on demand."""
        path = get_state_file_path(tmp_path / 'custom')
        assert path.parent.exists()
        assert path == tmp_path / 'custom' / 'state.json'

    def test_load_missing_file(self, tmp_path):
        """Loading a nonexistent state file gives an empty store."""
        store = JsonStateStore(tmp_path / 'state.json')
        assert store.get('aiChanges') is None
        assert store.get('aiChanges', []) == []

    def test_set_writes_file(self, tmp_path):
        """Every set rewrites the JSON file."""
        path = tmp_path / 'state.json'
        store = JsonStateStore(path)
        store.set('startTime', '2026-01-15T10:00:00+00:00')

        assert json.loads(path.read_text()) == {'startTime': '2026-01-15T10:00:00+00:00'}

    def test_values_survive_reopen(self, tmp_path):
        path = tmp_path / 'state.json'
        JsonStateStore(path).set('manualEdits', [{'id': 'm1'}])

        store = JsonStateStore(path)
        assert store.get('manualEdits') == [{'id': 'm1'}]

    def test_load_corrupted(self, tmp_path):
        """Corrupted state file is treated as empty."""
        path = tmp_path / 'state.json'
        path.write_text("not valid json{")

        store = JsonStateStore(path)
        assert store.get('aiChanges') is None
        store.set('startTime', '2026-01-15T10:00:00+00:00')
        assert json.loads(path.read_text()) == {'startTime': '2026-01-15T10:00:00+00:00'}

    def test_load_non_object(self, tmp_path):
        """A JSON array is not a valid state file."""
        path = tmp_path / 'state.json'
        path.write_text("[1, 2, 3]")

        assert JsonStateStore(path).get('aiChanges') is None

    def test_open_state_store_default(self, temp_state_dir):
        store = open_state_store()
        assert store.path == temp_state_dir / 'state.json'


class TestDeviceId:
    """Tests for the per-installation device id."""

    def test_device_id_format(self):
        device_id = generate_device_id(datetime(2026, 1, 15, tzinfo=timezone.utc))
        assert re.fullmatch(r'device-\d+-[a-z0-9]{9}', device_id)
        assert device_id.startswith('device-1768435200000-')

    def test_device_id_created_once(self):
        store = MemoryStateStore()
        first = get_device_id(store)
        second = get_device_id(store)

        assert first == second
        assert store.get(DEVICE_ID_KEY) == first

    def test_existing_device_id_reused(self):
        store = MemoryStateStore({DEVICE_ID_KEY: 'device-1-abc'})
        assert get_device_id(store) == 'device-1-abc'

    def test_device_id_persists_across_processes(self, tmp_path):
        path = tmp_path / 'state.json'
        first = get_device_id(JsonStateStore(path))
        assert get_device_id(JsonStateStore(path)) == first


class TestChangeId:
    """Tests for change ids."""

    def test_change_id_is_16_hex(self):
        change_id = generate_change_id('/a.py', 3, datetime(2026, 1, 15, tzinfo=timezone.utc))
        assert re.fullmatch(r'[0-9a-f]{16}', change_id)

    def test_change_id_depends_on_inputs(self):
        now = datetime(2026, 1, 15, tzinfo=timezone.utc)
        assert generate_change_id('/a.py', 3, now) == generate_change_id('/a.py', 3, now)
        assert generate_change_id('/a.py', 3, now) != generate_change_id('/a.py', 4, now)
        assert generate_change_id('/a.py', 3, now) != generate_change_id('/b.py', 3, now)


class TestStateIntegration:
    """Integration tests for persisted statistics."""

    def test_full_workflow(self, tmp_path, clock, make_ai_change, make_manual_edit):
        """Record, reopen from disk, reset, reopen again."""
        path = tmp_path / 'state.json'

        aggregator = StatisticsAggregator(JsonStateStore(path), clock=clock)
        aggregator.record_ai_change(make_ai_change('a1', characters=30))
        aggregator.record_manual_edit(make_manual_edit('m1', characters=10))

        reopened = StatisticsAggregator(JsonStateStore(path), clock=clock)
        assert reopened.ai_changes == aggregator.ai_changes
        assert reopened.manual_edits == aggregator.manual_edits
        assert reopened.start_time == aggregator.start_time
        assert reopened.calculate_statistics().adoption_rate == pytest.approx(75.0)

        clock.advance(minutes=1)
        reopened.reset()

        after_reset = StatisticsAggregator(JsonStateStore(path), clock=clock)
        assert after_reset.ai_changes == ()
        assert after_reset.start_time == clock.now
