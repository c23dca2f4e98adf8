"""Data models for adoption-monitor."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Optional, Union


ChangeType = Literal["ai-suggestion", "ai-accept", "ai-reject", "ai-edit", "manual-edit"]
FileChangeType = Literal["created", "modified", "deleted"]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, int, float, datetime, None]) -> Optional[datetime]:
    """
    Parse a timestamp value.

    Handles ISO 8601 strings (with or without a Z suffix) and Unix
    milliseconds. Naive datetimes are assumed to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None

    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class EditRange:
    """Half-open text region touched by an edit."""
    start_line: int
    start_character: int
    end_line: int
    end_character: int

    def to_dict(self) -> dict:
        return {
            'startLine': self.start_line,
            'startCharacter': self.start_character,
            'endLine': self.end_line,
            'endCharacter': self.end_character,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EditRange":
        return cls(
            start_line=int(data.get('startLine', 0)),
            start_character=int(data.get('startCharacter', 0)),
            end_line=int(data.get('endLine', 0)),
            end_character=int(data.get('endCharacter', 0)),
        )


@dataclass(frozen=True)
class EditContent:
    """Text produced by an edit.

    ``before`` is the placeholder ``"replaced"`` when the edit overwrote a
    non-empty span; the prior text itself is never captured.
    """
    after: str
    range: EditRange
    before: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            'after': self.after,
            'range': self.range.to_dict(),
        }
        if self.before is not None:
            data['before'] = self.before
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "EditContent":
        return cls(
            after=data.get('after', ''),
            range=EditRange.from_dict(data.get('range', {})),
            before=data.get('before'),
        )


@dataclass(frozen=True)
class ContinueContext:
    """Session context reported by the AI assistant, when available."""
    session_id: Optional[str] = None
    prompt: Optional[str] = None
    model: Optional[str] = None

    def to_dict(self) -> dict:
        data = {}
        if self.session_id is not None:
            data['sessionId'] = self.session_id
        if self.prompt is not None:
            data['prompt'] = self.prompt
        if self.model is not None:
            data['model'] = self.model
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ContinueContext":
        return cls(
            session_id=data.get('sessionId'),
            prompt=data.get('prompt'),
            model=data.get('model'),
        )


@dataclass(frozen=True)
class AICodeChange:
    """An edit classified as AI-originated."""
    id: str
    timestamp: datetime
    file_path: str
    change_type: ChangeType
    is_from_continue: bool
    content: EditContent
    character_count: int
    line_count: int
    continue_context: Optional[ContinueContext] = None

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'timestamp': self.timestamp.isoformat(),
            'filePath': self.file_path,
            'changeType': self.change_type,
            'isFromContinue': self.is_from_continue,
            'content': self.content.to_dict(),
            'characterCount': self.character_count,
            'lineCount': self.line_count,
        }
        if self.continue_context is not None:
            data['continueContext'] = self.continue_context.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AICodeChange":
        context = data.get('continueContext')
        return cls(
            id=data['id'],
            timestamp=parse_timestamp(data.get('timestamp')) or utc_now(),
            file_path=data['filePath'],
            change_type=data.get('changeType', 'ai-edit'),
            is_from_continue=bool(data.get('isFromContinue', False)),
            content=EditContent.from_dict(data.get('content', {})),
            character_count=int(data.get('characterCount', 0)),
            line_count=int(data.get('lineCount', 1)),
            continue_context=ContinueContext.from_dict(context) if context is not None else None,
        )


@dataclass(frozen=True)
class ManualEdit:
    """An edit classified as typed by hand."""
    id: str
    timestamp: datetime
    file_path: str
    content: EditContent
    character_count: int

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat(),
            'filePath': self.file_path,
            'content': self.content.to_dict(),
            'characterCount': self.character_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ManualEdit":
        return cls(
            id=data['id'],
            timestamp=parse_timestamp(data.get('timestamp')) or utc_now(),
            file_path=data['filePath'],
            content=EditContent.from_dict(data.get('content', {})),
            character_count=int(data.get('characterCount', 0)),
        )


@dataclass
class FileStatistics:
    """Per-file breakdown of AI and manual activity."""
    file_path: str
    ai_changes: int = 0
    manual_edits: int = 0
    ai_characters: int = 0
    manual_characters: int = 0
    adoption_rate: float = 0.0

    def to_dict(self) -> dict:
        return {
            'filePath': self.file_path,
            'aiChanges': self.ai_changes,
            'manualEdits': self.manual_edits,
            'aiCharacters': self.ai_characters,
            'manualCharacters': self.manual_characters,
            'adoptionRate': self.adoption_rate,
        }


@dataclass
class AdoptionStatistics:
    """Snapshot of adoption statistics over a period."""
    period_start: datetime
    period_end: datetime
    total_ai_changes: int
    ai_accepted: int
    ai_rejected: int
    total_manual_edits: int
    ai_character_count: int
    manual_character_count: int
    adoption_rate: float
    by_file: dict[str, FileStatistics] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """JSON-shaped form; ``byFile`` becomes a list."""
        return {
            'period': {
                'start': self.period_start.isoformat(),
                'end': self.period_end.isoformat(),
            },
            'totalAIChanges': self.total_ai_changes,
            'aiAccepted': self.ai_accepted,
            'aiRejected': self.ai_rejected,
            'totalManualEdits': self.total_manual_edits,
            'aiCharacterCount': self.ai_character_count,
            'manualCharacterCount': self.manual_character_count,
            'adoptionRate': self.adoption_rate,
            'byFile': [stats.to_dict() for stats in self.by_file.values()],
        }


@dataclass(frozen=True)
class ContentChange:
    """A single text replacement within an edit event."""
    inserted_text: str
    replaced_length: int
    range: EditRange


@dataclass
class EditEvent:
    """An edit notification delivered by the host editor."""
    file_path: str
    document_version: int
    content_changes: list[ContentChange] = field(default_factory=list)
    document_full_text: Optional[str] = None
    scheme: str = 'file'
    timestamp: Optional[datetime] = None
    extension_active: Optional[bool] = None


@dataclass
class SaveEvent:
    """A document-save notification."""
    file_path: str
    full_text: str
    scheme: str = 'file'
    timestamp: Optional[datetime] = None


@dataclass
class FileChange:
    """A file-level change (created, modified or deleted)."""
    timestamp: datetime
    file_path: str
    change_type: FileChangeType
    content: Optional[str] = None

    def to_dict(self) -> dict:
        """JSON-shaped form; the file content is left out."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'filePath': self.file_path,
            'changeType': self.change_type,
        }
