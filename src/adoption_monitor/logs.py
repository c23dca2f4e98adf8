"""Logging setup with the info / debug / verbose levels."""

import logging
import sys
from typing import Optional, TextIO


PACKAGE_LOGGER = 'adoption_monitor'

# Below DEBUG: upload simulation and other chatty output
VERBOSE = 5
logging.addLevelName(VERBOSE, 'VERBOSE')

LEVELS = {
    'info': logging.INFO,
    'debug': logging.DEBUG,
    'verbose': VERBOSE,
}

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
DATE_FORMAT = '%Y-%m-%dT%H:%M:%S'

_handler: Optional[logging.Handler] = None


def configure_logging(level: str = 'info', stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Route package log records to ``stream`` (stderr by default).

    Calling this again replaces the handler installed by the previous call.
    """
    global _handler
    logger = logging.getLogger(PACKAGE_LOGGER)

    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(LEVELS.get(level, logging.INFO))
    logger.debug(f"Log level set to: {level}")
    return logger
