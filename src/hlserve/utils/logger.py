"""Minimal logging utilities for hlserve.

Provides a simple get_logger function that wraps the standard library logging.
Library modules only create loggers; handlers are configured by the CLI,
which sends everything to stderr since stdout carries the protocol.

Example:
    >>> from hlserve.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Serving highlight requests")
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "hlserve." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'hlserve.mymodule'
    """
    if not (name == "hlserve" or name.startswith("hlserve.")):
        name = f"hlserve.{name}"
    return logging.getLogger(name)


def configure_logging(level: str | int = "WARNING") -> logging.Handler:
    """Attach a stderr handler to the ``hlserve`` logger.

    Args:
        level: Level name ("DEBUG", "info", ...) or numeric level

    Returns:
        The installed handler

    Raises:
        ValueError: If the level name is unknown
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"unknown log level: {level!r}")
        level = numeric

    root = logging.getLogger("hlserve")
    for existing in list(root.handlers):
        if getattr(existing, "_hlserve_cli", False):
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._hlserve_cli = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
    return handler
