"""Logging configuration for the stderr error channel."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "logcollector"


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Route package log records to standard error through Rich.

    Calling this again replaces the handler installed by a previous call. Levels
    above ``WARNING`` are capped at ``WARNING`` so failed commands, their stderr
    and other collection errors always reach the error channel.

    Args:
        level: Name of the minimum level to emit, such as ``WARNING`` or ``DEBUG``.

    Returns:
        logging.Logger: The configured package logger.

    Raises:
        ValueError: If ``level`` is not a known logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown logging level: {level}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(min(numeric_level, logging.WARNING))
    logger.propagate = False
    return logger


__all__ = ["PACKAGE_LOGGER", "configure_logging"]
