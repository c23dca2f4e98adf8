"""Tests for the event log parser."""

import logging
from datetime import datetime, timezone

from adoption_monitor.models import EditEvent, SaveEvent, parse_timestamp
from adoption_monitor.parser import (
    get_events,
    parse_edit_event,
    parse_jsonl,
    parse_save_event,
)


class TestParseJsonl:
    """Tests for parse_jsonl."""

    def test_skips_malformed_lines(self, sample_events_path, caplog):
        """Malformed lines are skipped with a warning."""
        with caplog.at_level(logging.WARNING, logger='adoption_monitor'):
            records = list(parse_jsonl(sample_events_path))

        assert len(records) == 9
        assert any('malformed JSON' in r.message for r in caplog.records)

    def test_skips_blank_lines(self, tmp_path):
        path = tmp_path / 'events.jsonl'
        path.write_text('{"type": "save"}\n\n   \n{"type": "edit"}\n')

        assert [r['type'] for r in parse_jsonl(path)] == ['save', 'edit']


class TestParseEvents:
    """Tests for event records."""

    def test_parse_edit_event(self):
        event = parse_edit_event({
            'type': 'edit',
            'timestamp': '2026-01-15T10:00:00Z',
            'filePath': '/a.py',
            'documentVersion': 4,
            'documentFullText': 'abc',
            'extensionActive': True,
            'contentChanges': [{
                'insertedText': 'abc',
                'replacedLength': 2,
                'range': {'startLine': 1, 'startCharacter': 2, 'endLine': 1, 'endCharacter': 4},
            }],
        })

        assert event.file_path == '/a.py'
        assert event.document_version == 4
        assert event.scheme == 'file'
        assert event.extension_active is True
        assert event.timestamp == datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
        change = event.content_changes[0]
        assert change.inserted_text == 'abc'
        assert change.replaced_length == 2
        assert change.range.end_character == 4

    def test_edit_event_defaults(self):
        event = parse_edit_event({'filePath': '/a.py', 'documentVersion': 1})

        assert event.content_changes == []
        assert event.document_full_text is None
        assert event.extension_active is None
        assert event.timestamp is None

    def test_edit_event_requires_path_and_version(self):
        assert parse_edit_event({'documentVersion': 1}) is None
        assert parse_edit_event({'filePath': '/a.py'}) is None

    def test_parse_save_event(self):
        event = parse_save_event({'filePath': '/a.py', 'fullText': 'x', 'timestamp': 1768471200000})

        assert event.full_text == 'x'
        assert event.timestamp == datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)

    def test_get_events_from_fixture(self, sample_events_path):
        events = list(get_events(sample_events_path))

        assert len(events) == 9
        assert sum(isinstance(e, SaveEvent) for e in events) == 1
        assert all(isinstance(e, (EditEvent, SaveEvent)) for e in events)
        assert events[6].scheme == 'untitled'

    def test_get_events_skips_unknown_types(self, tmp_path):
        path = tmp_path / 'events.jsonl'
        path.write_text(
            '{"type": "heartbeat"}\n'
            '{"type": "edit", "filePath": "/a.py", "documentVersion": 1}\n'
            '{"type": "edit"}\n'
        )

        events = list(get_events(path))
        assert len(events) == 1
        assert events[0].file_path == '/a.py'


class TestParseTimestamp:
    """Tests for timestamp parsing."""

    def test_iso_with_z(self):
        assert parse_timestamp('2026-01-15T10:00:00Z') == datetime(2026, 1, 15, 10, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_timestamp('2026-01-15T10:00:00').tzinfo is not None

    def test_invalid(self):
        assert parse_timestamp('yesterday') is None
        assert parse_timestamp(None) is None
