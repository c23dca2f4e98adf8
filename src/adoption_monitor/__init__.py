"""Adoption Monitor - classify editor edits as AI or manual and track adoption."""

from .models import (
    AICodeChange,
    AdoptionStatistics,
    ContentChange,
    ContinueContext,
    EditContent,
    EditEvent,
    EditRange,
    FileChange,
    FileStatistics,
    ManualEdit,
    SaveEvent,
)
from .identity import generate_change_id, generate_device_id
from .classifier import ChangeClassifier, build_ai_markers
from .state import JsonStateStore, MemoryStateStore, get_device_id, open_state_store
from .statistics import StatisticsAggregator, adoption_rate
from .report import format_report
from .monitor import ChangeMonitor, build_edit_content
from .parser import get_events, parse_jsonl
from .upload import UploadScheduler, log_transport, write_payload_json
from .config import Settings, load_settings
from .logs import configure_logging

__all__ = [
    # Models
    'AICodeChange',
    'AdoptionStatistics',
    'ContentChange',
    'ContinueContext',
    'EditContent',
    'EditEvent',
    'EditRange',
    'FileChange',
    'FileStatistics',
    'ManualEdit',
    'SaveEvent',
    # Identity
    'generate_change_id',
    'generate_device_id',
    # Classification
    'ChangeClassifier',
    'build_ai_markers',
    # Persistence
    'JsonStateStore',
    'MemoryStateStore',
    'get_device_id',
    'open_state_store',
    # Statistics
    'StatisticsAggregator',
    'adoption_rate',
    'format_report',
    # Event handling
    'ChangeMonitor',
    'build_edit_content',
    'get_events',
    'parse_jsonl',
    # Upload
    'UploadScheduler',
    'log_transport',
    'write_payload_json',
    # Settings / logging
    'Settings',
    'load_settings',
    'configure_logging',
]
