"""Logging for the ``spendlite`` package.

Library modules only call ``get_logger("spendlite.<module>")`` and stay
silent until an application configures output. The CLI calls
:func:`configure_logging` with its ``--log-level`` value on every run;
repeated calls replace the package handler instead of stacking a new one.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

LOGGER_NAME = "spendlite"
LEVEL_ENV = "SPENDLITE_LOG_LEVEL"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "spendlite.stream"


def resolve_level(level: str | int | None = None) -> int:
    """Level from ``level``, else ``SPENDLITE_LOG_LEVEL``, else INFO.

    Accepts level names in any case or numeric strings. Unknown names raise
    :class:`ValueError` so a typo on the command line is reported.
    """

    if isinstance(level, int):
        return level
    raw = (level or os.getenv(LEVEL_ENV) or "INFO").strip().upper()
    if raw.isdigit():
        return int(raw)
    levels = logging.getLevelNamesMapping()
    if raw not in levels:
        raise ValueError(f"unknown log level {raw!r}; expected one of DEBUG, INFO, WARNING, ERROR")
    return levels[raw]


def configure_logging(level: str | int | None = None, *, stream: IO[str] | None = None) -> int:
    """Send package logs to ``stream`` (default: current ``sys.stderr``).

    Returns the resolved level.
    """

    resolved = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or h.get_name() == _HANDLER_NAME:
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False
    return resolved


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
