"""
ollamalink Logging - Per-instance diagnostic loggers

Loggers built here are standalone ``logging.Logger`` objects that are not
registered with the logging manager, so changing the level or output of one
client never touches another client or the application's logging tree.
The default logger only has a ``NullHandler`` and prints nothing.
"""

import logging
import sys
from typing import Dict, Optional, TextIO, Union

LOGGER_NAME = "ollamalink"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# NONE sits above CRITICAL so nothing passes
LEVEL_NONE = logging.CRITICAL + 10

_LEVELS: Dict[str, int] = {
    "NONE": LEVEL_NONE,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def parse_level(level: Union[str, int, None]) -> int:
    """
    Convert a level name (NONE, ERROR, WARN, INFO, DEBUG) to a logging level.

    Integers pass through unchanged. Unknown names fall back to INFO.
    """
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    return _LEVELS.get(level.strip().upper(), logging.INFO)


def build_logger(
    debug: bool = False,
    level: Union[str, int, None] = None,
    stream: Optional[TextIO] = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """
    Create a standalone logger for one client.

    Args:
        debug: Emit DEBUG output (overrides ``level``)
        level: Level name or number; when set, output goes to ``stream``
        stream: Destination for output (default: stderr)
        name: Logger name shown in records

    Returns:
        A logger that is silent unless ``debug`` or ``level`` is given
    """
    logger = logging.Logger(name)
    if debug:
        level = logging.DEBUG

    if level is None and stream is None:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.INFO)
        return logger

    logger.setLevel(parse_level(level))
    _attach_stream(logger, stream or sys.stderr)
    return logger


def set_level(logger: logging.Logger, level: Union[str, int]) -> None:
    """
    Change the level of a single logger instance.

    A silent logger (only ``NullHandler``s) starts writing to stderr, so
    raising the level on a default client is enough to see output.
    """
    logger.setLevel(parse_level(level))
    if logger.handlers and all(isinstance(h, logging.NullHandler) for h in logger.handlers):
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        _attach_stream(logger, sys.stderr)


def set_output(logger: logging.Logger, stream: TextIO) -> None:
    """Redirect a logger instance's output to ``stream``."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    _attach_stream(logger, stream)


def _attach_stream(logger: logging.Logger, stream: TextIO) -> None:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
