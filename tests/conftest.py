"""Pytest fixtures for adoption-monitor tests."""

import logging
import pytest
from pathlib import Path
from datetime import datetime, timedelta, timezone

from adoption_monitor.models import (
    AICodeChange,
    ContentChange,
    EditContent,
    EditEvent,
    EditRange,
    ManualEdit,
)
from adoption_monitor.state import MemoryStateStore
from adoption_monitor.statistics import StatisticsAggregator


BASE_TIME = datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock for deterministic timing."""

    def __init__(self, start: datetime = BASE_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by configure_logging between tests."""
    yield
    logger = logging.getLogger('adoption_monitor')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / 'fixtures'


@pytest.fixture
def sample_events_path(fixtures_dir) -> Path:
    """Path to the sample edit-event log."""
    return fixtures_dir / 'sample_events.jsonl'


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStateStore:
    return MemoryStateStore()


@pytest.fixture
def aggregator(store, clock) -> StatisticsAggregator:
    return StatisticsAggregator(store, clock=clock)


@pytest.fixture
def temp_state_dir(tmp_path, monkeypatch):
    """Create temporary state directory and point Path.home() at it."""
    state_dir = tmp_path / '.adoption-monitor'
    state_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setattr(Path, 'home', lambda: tmp_path)

    return state_dir


@pytest.fixture
def make_event():
    """Factory for edit events with one sub-edit per inserted text."""

    def _make(
        *texts: str,
        file_path: str = '/work/project/main.py',
        version: int = 2,
        document_text: str = '',
        replaced_length: int = 0,
        start_line: int = 0,
        end_line: int = 0,
        scheme: str = 'file',
        timestamp=None,
        extension_active=None,
    ) -> EditEvent:
        changes = [
            ContentChange(
                inserted_text=text,
                replaced_length=replaced_length if i == 0 else 0,
                range=EditRange(start_line + i, 0, end_line + i, 0),
            )
            for i, text in enumerate(texts)
        ]
        return EditEvent(
            file_path=file_path,
            document_version=version,
            content_changes=changes,
            document_full_text=document_text,
            scheme=scheme,
            timestamp=timestamp,
            extension_active=extension_active,
        )

    return _make


@pytest.fixture
def make_ai_change():
    """Factory for AI change records."""

    def _make(
        change_id: str,
        file_path: str = '/work/project/main.py',
        characters: int = 10,
        change_type: str = 'ai-edit',
        timestamp: datetime = BASE_TIME,
    ) -> AICodeChange:
        return AICodeChange(
            id=change_id,
            timestamp=timestamp,
            file_path=file_path,
            change_type=change_type,
            is_from_continue=True,
            content=EditContent(after='x' * characters, range=EditRange(0, 0, 0, 0)),
            character_count=characters,
            line_count=1,
        )

    return _make


@pytest.fixture
def make_manual_edit():
    """Factory for manual edit records."""

    def _make(
        edit_id: str,
        file_path: str = '/work/project/main.py',
        characters: int = 10,
        timestamp: datetime = BASE_TIME,
    ) -> ManualEdit:
        return ManualEdit(
            id=edit_id,
            timestamp=timestamp,
            file_path=file_path,
            content=EditContent(after='y' * characters, range=EditRange(0, 0, 0, 0)),
            character_count=characters,
        )

    return _make
