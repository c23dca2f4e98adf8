"""Entry point for edit, save and file-system events.

The host integration subscribes to editor notifications and hands each one
to a ``ChangeMonitor`` serially. The monitor classifies edits, builds the
matching record and passes it to the statistics aggregator.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from .classifier import ChangeClassifier
from .identity import generate_change_id
from .models import (
    AICodeChange,
    ContinueContext,
    EditContent,
    EditEvent,
    EditRange,
    FileChange,
    FileChangeType,
    ManualEdit,
    SaveEvent,
    utc_now,
)
from .statistics import StatisticsAggregator
from .upload import UploadScheduler


logger = logging.getLogger(__name__)


FILE_SCHEME = 'file'
REPLACED_MARKER = 'replaced'

ContextProvider = Callable[[], Optional[ContinueContext]]
ExtensionProbe = Union[bool, Callable[[], bool]]


def build_edit_content(event: EditEvent) -> EditContent:
    """
    Build the content block for an edit record.

    ``after`` joins the inserted text of every sub-edit in order, while the
    range and the ``before`` marker come from the first sub-edit only.
    """
    first = event.content_changes[0]
    return EditContent(
        after=''.join(c.inserted_text for c in event.content_changes),
        range=EditRange(
            start_line=first.range.start_line,
            start_character=first.range.start_character,
            end_line=first.range.end_line,
            end_character=first.range.end_character,
        ),
        before=REPLACED_MARKER if first.replaced_length > 0 else None,
    )


class ChangeMonitor:
    """
    Routes editor events into the classifier and aggregator.

    Args:
        classifier: Heuristic engine deciding AI vs manual
        aggregator: Receives the resulting records
        track_only_ai: Skip recording edits classified as manual
        extension_active: Whether the AI assistant is running, or a callable
            answering that question at event time
        context_provider: Optional callable returning the assistant's
            current session context
        uploader: Optional upload scheduler that stages AI and file changes
    """

    def __init__(
        self,
        classifier: ChangeClassifier,
        aggregator: StatisticsAggregator,
        track_only_ai: bool = True,
        extension_active: ExtensionProbe = False,
        context_provider: Optional[ContextProvider] = None,
        uploader: Optional[UploadScheduler] = None,
    ):
        self.classifier = classifier
        self.aggregator = aggregator
        self.track_only_ai = track_only_ai
        self.extension_active = extension_active
        self.context_provider = context_provider
        self.uploader = uploader
        self.document_versions: dict[str, int] = {}
        self.is_monitoring = False

    def start(self) -> None:
        if self.is_monitoring:
            return
        self.is_monitoring = True
        logger.info("Monitoring started")

    def stop(self) -> None:
        if not self.is_monitoring:
            return
        self.is_monitoring = False
        self.document_versions.clear()
        logger.info("Monitoring stopped")

    def _is_extension_active(self, event: EditEvent) -> bool:
        if event.extension_active is not None:
            return event.extension_active
        if callable(self.extension_active):
            try:
                return bool(self.extension_active())
            except Exception as e:
                logger.debug(f"Extension probe failed, assuming inactive: {e}")
                return False
        return bool(self.extension_active)

    def handle_event(self, event: EditEvent) -> Optional[Union[AICodeChange, ManualEdit]]:
        """
        Process one edit event.

        Returns the record that was appended to the aggregator, or None when
        the event was ignored, used as a version baseline, or skipped as a
        manual edit in AI-only mode.
        """
        if not self.is_monitoring or event.scheme != FILE_SCHEME:
            return None

        path = event.file_path
        version = event.document_version
        previous_version = self.document_versions.get(path)
        self.document_versions[path] = version

        # The first event for a document only establishes its version
        if previous_version is None or version <= previous_version:
            return None

        if not event.content_changes:
            return None

        now = event.timestamp or utc_now()
        is_ai = self.classifier.classify(event, self._is_extension_active(event), now=now)

        if self.track_only_ai and not is_ai:
            logger.debug(f"Manual edit detected and skipped: {path}")
            return None

        return self._record(event, is_ai, now)

    def _record(self, event: EditEvent, is_ai: bool, now: datetime) -> Union[AICodeChange, ManualEdit]:
        changes = event.content_changes
        total_characters = sum(len(c.inserted_text) for c in changes)
        change_id = generate_change_id(event.file_path, event.document_version, now)
        content = build_edit_content(event)

        if is_ai:
            first_range = changes[0].range
            ai_change = AICodeChange(
                id=change_id,
                timestamp=now,
                file_path=event.file_path,
                change_type='ai-edit',
                is_from_continue=True,
                content=content,
                character_count=total_characters,
                line_count=first_range.end_line - first_range.start_line + 1,
                continue_context=self.extract_context(),
            )
            self.aggregator.record_ai_change(ai_change)
            logger.info(f"AI edit detected: {event.file_path} ({total_characters} chars)")
            if self.uploader is not None:
                self.uploader.stage('ai-change', ai_change.to_dict())
            return ai_change

        manual_edit = ManualEdit(
            id=change_id,
            timestamp=now,
            file_path=event.file_path,
            content=content,
            character_count=total_characters,
        )
        self.aggregator.record_manual_edit(manual_edit)
        logger.debug(f"Manual edit: {event.file_path} ({total_characters} chars)")
        return manual_edit

    def extract_context(self) -> Optional[ContinueContext]:
        """Ask the context provider for session details; failures yield None."""
        if self.context_provider is None:
            return None
        try:
            return self.context_provider()
        except Exception as e:
            logger.debug(f"Failed to extract assistant context: {e}")
            return None

    def handle_save(self, event: SaveEvent) -> Optional[FileChange]:
        """Record a document save as a ``modified`` file change."""
        if not self.is_monitoring or event.scheme != FILE_SCHEME:
            return None

        change = FileChange(
            timestamp=event.timestamp or utc_now(),
            file_path=event.file_path,
            change_type='modified',
            content=event.full_text,
        )
        logger.info(f"Document saved: {event.file_path}")
        self._log_change(change)
        return change

    def handle_file_change(
        self,
        file_path: str,
        change_type: FileChangeType,
        timestamp: Optional[datetime] = None,
    ) -> Optional[FileChange]:
        """Record a file-system notification (created, modified or deleted)."""
        if not self.is_monitoring:
            return None

        change = FileChange(
            timestamp=timestamp or utc_now(),
            file_path=file_path,
            change_type=change_type,
        )
        self._log_change(change)
        return change

    def _log_change(self, change: FileChange) -> None:
        logger.info(f"[{change.change_type.upper()}] {change.file_path} at {change.timestamp.isoformat()}")
        if self.uploader is not None:
            self.uploader.stage('file-change', change.to_dict())
