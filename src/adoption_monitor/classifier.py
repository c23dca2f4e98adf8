"""Heuristic classification of edit events as AI or manual."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .models import EditEvent, utc_now


logger = logging.getLogger(__name__)


# Thresholds for the size / speed heuristics
LARGE_CHANGE_CHARS = 50  # More than this is a "large" insertion
RAPID_CHANGE_MS = 100  # Edits closer together than this are "rapid"
RAPID_CHANGE_MIN_CHARS = 20  # Rapid edits must also insert more than this
RECENT_AI_TTL = timedelta(seconds=5)

DEFAULT_MARKER_TOOL = 'Continue'

# Comment openers checked in front of "Generated by <tool>"
MARKER_COMMENT_PREFIXES = ('//', '#', '/*', '<!--', '--')


def build_ai_markers(tool: str = DEFAULT_MARKER_TOOL) -> tuple[str, ...]:
    """Sentinel comments that mark a document as AI-generated."""
    return tuple(f"{prefix} Generated by {tool}" for prefix in MARKER_COMMENT_PREFIXES)


class ChangeClassifier:
    """
    Decides whether an edit event came from the AI assistant.

    Holds two pieces of per-file state: the time of the last edit seen and
    a short-lived "recent AI" marker. Both are owned by the instance and
    cleared by ``reset()``.
    """

    def __init__(self, marker_tool: str = DEFAULT_MARKER_TOOL):
        self.markers = build_ai_markers(marker_tool)
        self.last_change_times: dict[str, datetime] = {}
        self.recent_ai: dict[str, datetime] = {}  # path -> expiry

    def classify(
        self,
        event: EditEvent,
        extension_active: bool,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Classify an edit event.

        Args:
            event: The edit event to classify
            extension_active: Whether the AI assistant extension is running
            now: Evaluation time (defaults to the current UTC time)

        Returns:
            True if the edit is classified as AI-originated
        """
        now = now or utc_now()
        path = event.file_path

        last_change = self.last_change_times.get(path)
        self.last_change_times[path] = now

        if not extension_active:
            return False

        changes = event.content_changes
        if not changes:
            return False

        if event.document_full_text is None:
            logger.debug(f"Document text unavailable, treating as manual: {path}")
            return False

        total_chars = sum(len(c.inserted_text) for c in changes)

        is_large_change = total_chars > LARGE_CHANGE_CHARS
        if last_change is None:
            is_rapid_change = False
        else:
            elapsed_ms = (now - last_change).total_seconds() * 1000
            is_rapid_change = elapsed_ms < RAPID_CHANGE_MS
        has_multiple_lines = any('\n' in c.inserted_text for c in changes)
        has_ai_marker = self.has_ai_marker(path, event.document_full_text, now)

        is_ai = (
            (is_large_change and has_multiple_lines)
            or has_ai_marker
            or (is_rapid_change and total_chars > RAPID_CHANGE_MIN_CHARS)
        )

        if is_ai:
            self.recent_ai[path] = now + RECENT_AI_TTL

        return is_ai

    def has_ai_marker(self, path: str, text: str, now: Optional[datetime] = None) -> bool:
        """Check the document for sentinel comments or a recent AI edit."""
        if any(marker in text for marker in self.markers):
            return True
        return self.is_recent_ai(path, now)

    def is_recent_ai(self, path: str, now: Optional[datetime] = None) -> bool:
        """Whether ``path`` carries an unexpired recent-AI marker.

        Expired markers are dropped as they are encountered.
        """
        expiry = self.recent_ai.get(path)
        if expiry is None:
            return False
        if (now or utc_now()) >= expiry:
            del self.recent_ai[path]
            return False
        return True

    def reset(self) -> None:
        """Forget all per-file timing and marker state."""
        self.last_change_times.clear()
        self.recent_ai.clear()
