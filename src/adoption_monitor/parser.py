"""JSONL edit-event log parser."""

from pathlib import Path
from typing import Iterator, Optional, Union
import json
import logging

from .models import ContentChange, EditEvent, EditRange, SaveEvent, parse_timestamp


logger = logging.getLogger(__name__)


def parse_jsonl(path: Path) -> Iterator[dict]:
    """
    Stream parse a JSONL file, yielding records.

    Handles malformed lines by skipping them with a warning.
    Memory-efficient: processes line-by-line without loading entire file.
    """
    with open(path, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                # Only log error type and location; edit text can be large
                logger.warning(f"Skipping malformed JSON at {path}:{line_num} ({type(e).__name__})")
                continue
            if isinstance(record, dict):
                yield record


def _parse_content_change(data: dict) -> ContentChange:
    return ContentChange(
        inserted_text=data.get('insertedText', ''),
        replaced_length=int(data.get('replacedLength', 0)),
        range=EditRange.from_dict(data.get('range', {})),
    )


def parse_edit_event(record: dict) -> Optional[EditEvent]:
    """
    Build an EditEvent from a record.

    Returns None when required fields are missing.
    """
    file_path = record.get('filePath')
    version = record.get('documentVersion')
    if not file_path or version is None:
        return None

    changes = record.get('contentChanges', [])
    if not isinstance(changes, list):
        changes = []

    extension_active = record.get('extensionActive')

    return EditEvent(
        file_path=file_path,
        document_version=int(version),
        content_changes=[_parse_content_change(c) for c in changes if isinstance(c, dict)],
        document_full_text=record.get('documentFullText'),
        scheme=record.get('scheme', 'file'),
        timestamp=parse_timestamp(record.get('timestamp')),
        extension_active=bool(extension_active) if extension_active is not None else None,
    )


def parse_save_event(record: dict) -> Optional[SaveEvent]:
    """Build a SaveEvent from a record, or None if it has no file path."""
    file_path = record.get('filePath')
    if not file_path:
        return None

    return SaveEvent(
        file_path=file_path,
        full_text=record.get('fullText', ''),
        scheme=record.get('scheme', 'file'),
        timestamp=parse_timestamp(record.get('timestamp')),
    )


def get_events(path: Path) -> Iterator[Union[EditEvent, SaveEvent]]:
    """
    Extract edit and save events from an event log, in file order.

    Records of other types and records missing required fields are skipped.
    """
    for line_num, record in enumerate(parse_jsonl(path), 1):
        record_type = record.get('type')

        if record_type == 'edit':
            event = parse_edit_event(record)
        elif record_type == 'save':
            event = parse_save_event(record)
        else:
            continue

        if event is None:
            logger.debug(f"Skipping incomplete {record_type} record #{line_num} in {path}")
            continue
        yield event
