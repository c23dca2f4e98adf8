"""Durable key/value state for statistics logs and the device id."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .identity import generate_device_id


logger = logging.getLogger(__name__)


# Keys used by the statistics aggregator
AI_CHANGES_KEY = 'aiChanges'
MANUAL_EDITS_KEY = 'manualEdits'
START_TIME_KEY = 'startTime'
DEVICE_ID_KEY = 'deviceId'

STATE_FILE_NAME = 'state.json'


def get_default_state_dir() -> Path:
    """Get the default state directory (~/.adoption-monitor)."""
    return Path.home() / '.adoption-monitor'


def get_state_file_path(state_dir: Optional[Path] = None) -> Path:
    """Get the path to the state file.

    Args:
        state_dir: Directory holding the state file (defaults to ~/.adoption-monitor)

    Returns:
        Path to <state_dir>/state.json
    """
    state_dir = state_dir or get_default_state_dir()
    state_dir.mkdir(parents=True, exist_ok=True)
    return state_dir / STATE_FILE_NAME


class MemoryStateStore:
    """Dict-backed store that keeps nothing across processes."""

    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonStateStore(MemoryStateStore):
    """
    Store backed by a single JSON object on disk.

    The file is read once at construction and rewritten in full on every
    ``set``. A missing file is an empty store; a corrupted one is logged and
    treated as empty.
    """

    def __init__(self, path: Path):
        self.path = path
        super().__init__(self._load())

    def _load(self) -> dict:
        if not self.path.exists():
            return {}

        try:
            with self.path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path} ({type(e).__name__})")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring state file {self.path}: expected a JSON object")
            return {}
        return data

    def set(self, key: str, value: Any) -> None:
        super().set(key, value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open('w', encoding='utf-8') as f:
            json.dump(self._data, f, indent=2)


def open_state_store(state_dir: Optional[Path] = None) -> JsonStateStore:
    """Open the JSON state store in ``state_dir``."""
    return JsonStateStore(get_state_file_path(state_dir))


def get_device_id(store: MemoryStateStore) -> str:
    """Return the installation's device id, creating it on first use."""
    device_id = store.get(DEVICE_ID_KEY)
    if not device_id:
        device_id = generate_device_id()
        store.set(DEVICE_ID_KEY, device_id)
        logger.debug(f"Generated device id {device_id}")
    return device_id
