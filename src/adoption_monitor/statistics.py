"""Accumulation of classified edits into adoption statistics."""

import logging
from datetime import datetime
from typing import Callable, Optional

from .models import (
    AICodeChange,
    AdoptionStatistics,
    FileStatistics,
    ManualEdit,
    parse_timestamp,
    utc_now,
)
from .report import format_report
from .state import (
    AI_CHANGES_KEY,
    DEVICE_ID_KEY,
    MANUAL_EDITS_KEY,
    START_TIME_KEY,
    MemoryStateStore,
    get_device_id,
)


logger = logging.getLogger(__name__)


# Maximum records of each kind included in an upload payload
UPLOAD_HISTORY_LIMIT = 100


def adoption_rate(ai_characters: int, manual_characters: int) -> float:
    """Percentage of edited characters attributed to AI (0 when nothing was edited)."""
    total = ai_characters + manual_characters
    return (ai_characters / total * 100) if total > 0 else 0.0


def _load_records(record_type, key: str, saved) -> list:
    """Rebuild records from a stored log, skipping entries that don't parse."""
    if saved is None:
        return []
    if not isinstance(saved, list):
        logger.warning(f"Ignoring stored {key}: expected a list, got {type(saved).__name__}")
        return []

    records = []
    for i, data in enumerate(saved):
        try:
            records.append(record_type.from_dict(data))
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
            logger.warning(f"Skipping unreadable {key} entry {i}: {type(e).__name__}: {e}")
    return records


class StatisticsAggregator:
    """
    Append-only logs of AI changes and manual edits.

    Both logs and the period start are loaded from ``store`` once, at
    construction, and written back after every mutation.
    """

    def __init__(
        self,
        store: MemoryStateStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.clock = clock
        self._ai_changes: list[AICodeChange] = []
        self._manual_edits: list[ManualEdit] = []
        self.start_time: datetime = clock()
        self._load_from_storage()

    @property
    def ai_changes(self) -> tuple[AICodeChange, ...]:
        return tuple(self._ai_changes)

    @property
    def manual_edits(self) -> tuple[ManualEdit, ...]:
        return tuple(self._manual_edits)

    def record_ai_change(self, change: AICodeChange) -> None:
        """Append an AI change and persist."""
        self._ai_changes.append(change)
        self._save_to_storage()
        logger.info(
            f"AI change recorded: {change.change_type} in {change.file_path} "
            f"({change.character_count} chars)"
        )

    def record_manual_edit(self, edit: ManualEdit) -> None:
        """Append a manual edit and persist."""
        self._manual_edits.append(edit)
        self._save_to_storage()
        logger.debug(f"Manual edit recorded: {edit.file_path} ({edit.character_count} chars)")

    def calculate_statistics(self) -> AdoptionStatistics:
        """
        Compute a snapshot over everything recorded since the period start.

        The period end is the current time; every other field depends only
        on the logs.
        """
        now = self.clock()

        ai_accepted = sum(1 for c in self._ai_changes if c.change_type == 'ai-accept')
        ai_rejected = sum(1 for c in self._ai_changes if c.change_type == 'ai-reject')

        ai_characters = sum(c.character_count for c in self._ai_changes)
        manual_characters = sum(e.character_count for e in self._manual_edits)

        return AdoptionStatistics(
            period_start=self.start_time,
            period_end=now,
            total_ai_changes=len(self._ai_changes),
            ai_accepted=ai_accepted,
            ai_rejected=ai_rejected,
            total_manual_edits=len(self._manual_edits),
            ai_character_count=ai_characters,
            manual_character_count=manual_characters,
            adoption_rate=adoption_rate(ai_characters, manual_characters),
            by_file=self.calculate_file_statistics(),
        )

    def calculate_file_statistics(self) -> dict[str, FileStatistics]:
        """Group both logs by file path.

        Files appear in first-seen order, AI log first.
        """
        by_file: dict[str, FileStatistics] = {}

        for change in self._ai_changes:
            stats = by_file.setdefault(change.file_path, FileStatistics(file_path=change.file_path))
            stats.ai_changes += 1
            stats.ai_characters += change.character_count

        for edit in self._manual_edits:
            stats = by_file.setdefault(edit.file_path, FileStatistics(file_path=edit.file_path))
            stats.manual_edits += 1
            stats.manual_characters += edit.character_count

        for stats in by_file.values():
            stats.adoption_rate = adoption_rate(stats.ai_characters, stats.manual_characters)

        return by_file

    def get_formatted_report(self) -> str:
        return format_report(self.calculate_statistics())

    def get_upload_payload(self) -> dict:
        """
        Build the JSON-shaped upload payload.

        Includes the current snapshot and the most recently appended
        records (at most ``UPLOAD_HISTORY_LIMIT`` of each), in append order.
        """
        statistics = self.calculate_statistics()
        return {
            'deviceId': self.device_id,
            'uploadTime': self.clock().isoformat(),
            'statistics': statistics.to_dict(),
            'changes': [c.to_dict() for c in self._ai_changes[-UPLOAD_HISTORY_LIMIT:]],
            'manualEdits': [e.to_dict() for e in self._manual_edits[-UPLOAD_HISTORY_LIMIT:]],
        }

    @property
    def device_id(self) -> str:
        try:
            return get_device_id(self.store)
        except OSError as e:
            # The id is already held in memory; only the write failed
            logger.warning(f"Failed to persist device id: {e}")
            return self.store.get(DEVICE_ID_KEY)

    def reset(self) -> None:
        """Clear both logs and restart the period at the current time."""
        self._ai_changes = []
        self._manual_edits = []
        self.start_time = self.clock()
        self._save_to_storage()
        logger.info("Statistics reset")

    def _save_to_storage(self) -> None:
        try:
            self.store.set(AI_CHANGES_KEY, [c.to_dict() for c in self._ai_changes])
            self.store.set(MANUAL_EDITS_KEY, [e.to_dict() for e in self._manual_edits])
            self.store.set(START_TIME_KEY, self.start_time.isoformat())
        except OSError as e:
            logger.warning(f"Failed to persist statistics: {e}")

    def _load_from_storage(self) -> None:
        saved_changes = self.store.get(AI_CHANGES_KEY)
        saved_edits = self.store.get(MANUAL_EDITS_KEY)
        saved_start: Optional[datetime] = parse_timestamp(self.store.get(START_TIME_KEY))

        self._ai_changes = _load_records(AICodeChange, AI_CHANGES_KEY, saved_changes)
        self._manual_edits = _load_records(ManualEdit, MANUAL_EDITS_KEY, saved_edits)
        if saved_start is not None:
            self.start_time = saved_start

        logger.debug(
            f"Loaded {len(self._ai_changes)} AI changes and "
            f"{len(self._manual_edits)} manual edits from storage"
        )
