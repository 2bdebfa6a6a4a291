"""Shared logging utilities for ranking-run observability.

Usage example:
    from podcast_outreach_pipeline.observability.logging import get_logger, set_log_level

    logger = get_logger("podcast_outreach_pipeline.ranking")
    logger.info("Ranking %s candidates", candidate_count)
    set_log_level(logging.DEBUG)  # e.g. for --verbose runs
"""

from __future__ import annotations

import logging
import time

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
_ROOT_LOGGER_NAME = "podcast_outreach_pipeline"


def _build_handler() -> logging.Handler:
    # StreamHandler defaults to stderr, keeping stdout clean for tables and JSON.
    handler = logging.StreamHandler()
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)
    formatter.converter = time.gmtime
    handler.setFormatter(formatter)
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return a stderr logger configured for UTC timestamps.

    Args:
        name: Logger name (use a stable module-qualified name).

    Returns:
        A logger with a single stream handler and a consistent UTC format.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(_build_handler())
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def set_log_level(level: int) -> None:
    """Apply a level to every package logger created so far."""
    manager = logging.Logger.manager
    for name, candidate in list(manager.loggerDict.items()):
        if not isinstance(candidate, logging.Logger):
            continue
        if name == _ROOT_LOGGER_NAME or name.startswith(f"{_ROOT_LOGGER_NAME}."):
            candidate.setLevel(level)
