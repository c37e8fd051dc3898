"""
Logging configuration for Topic Clustering.

Modules obtain their logger with ``get_logger(__name__)``. Applications (the
CLI, scripts, notebooks) call ``setup_logging()`` once to attach a handler.

Usage:
    from topic_clustering.utils.logging_config import get_logger, setup_logging

    setup_logging("DEBUG")
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER_NAME = "topic_clustering"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_ATTR = "_topic_clustering_handler"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the package namespace.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER_NAME and not name.startswith(PACKAGE_LOGGER_NAME + "."):
        name = f"{PACKAGE_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: Optional[Union[str, int]] = None,
    stream=None,
) -> logging.Logger:
    """
    Configure the package logger with a single stream handler.

    Calling this more than once only updates the level; handlers are never
    duplicated.

    Args:
        level: Log level name or number. Defaults to the configured
            ``TOPIC_CLUSTERING_LOG_LEVEL`` (INFO if unset).
        stream: Output stream for the handler (default: stderr)

    Returns:
        The configured package logger
    """
    if level is None:
        from ..config import get_config

        level = get_config().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(level)

    existing = [h for h in logger.handlers if getattr(h, _HANDLER_ATTR, False)]
    if not existing:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)
    elif stream is not None:
        existing[0].setStream(stream)

    return logger
