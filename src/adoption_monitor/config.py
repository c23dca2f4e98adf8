"""User settings for adoption-monitor."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .classifier import DEFAULT_MARKER_TOOL
from .state import get_default_state_dir


logger = logging.getLogger(__name__)


CONFIG_FILE_NAME = 'config.json'
LOG_LEVELS = ('info', 'debug', 'verbose')


@dataclass
class Settings:
    """Settings read from config.json; every field has a default."""
    enable_auto_start: bool = True
    track_only_ai_changes: bool = True
    upload_interval: int = 300  # seconds; 0 disables uploads
    upload_endpoint: str = ''
    log_level: str = 'info'
    ai_marker_tool: str = DEFAULT_MARKER_TOOL


# config.json key -> Settings attribute
_CONFIG_KEYS = {
    'enableAutoStart': 'enable_auto_start',
    'trackOnlyAIChanges': 'track_only_ai_changes',
    'uploadInterval': 'upload_interval',
    'uploadEndpoint': 'upload_endpoint',
    'logLevel': 'log_level',
    'aiMarkerTool': 'ai_marker_tool',
}


def get_config_file_path(state_dir: Optional[Path] = None) -> Path:
    """Get the path to config.json inside the state directory."""
    return (state_dir or get_default_state_dir()) / CONFIG_FILE_NAME


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from a JSON config file.

    Returns defaults if the file doesn't exist or can't be parsed.
    Unknown keys are ignored; an unknown log level falls back to 'info'.
    """
    path = path or get_config_file_path()
    settings = Settings()

    if not path.exists():
        return settings

    try:
        with path.open('r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Ignoring unreadable config file {path} ({type(e).__name__})")
        return settings

    if not isinstance(data, dict):
        return settings

    for key, attr in _CONFIG_KEYS.items():
        if key in data:
            setattr(settings, attr, data[key])

    try:
        settings.upload_interval = int(settings.upload_interval or 0)
    except (TypeError, ValueError):
        logger.warning(f"Invalid upload interval {settings.upload_interval!r}, using default")
        settings.upload_interval = Settings.upload_interval

    if settings.log_level not in LOG_LEVELS:
        logger.warning(f"Unknown log level {settings.log_level!r}, using 'info'")
        settings.log_level = 'info'

    return settings
