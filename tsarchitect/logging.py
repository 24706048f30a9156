"""Logging setup shared by the CLI, the HTTP service and the analyzers."""

from __future__ import annotations

import logging
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

_LOGGER_NAME = "tsarchitect"
_LEVEL_ENV = "TSARCHITECT_LOG_LEVEL"
_CONSOLE_FORMAT = "[tsarchitect] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``tsarchitect.<name>``, or the package logger itself."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _resolve_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    configured = os.environ.get(_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(configured) if configured else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route tsarchitect records to stderr and, optionally, a log file.

    Query results go to stdout, so diagnostics never mix with them.
    ``$TSARCHITECT_LOG_LEVEL`` picks the level unless ``verbose`` forces DEBUG.
    """
    level = _resolve_level(verbose)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated calls (tests, the service reloading) must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger


@contextmanager
def log_duration(logger: logging.Logger, action: str) -> Iterator[None]:
    """Log how long the wrapped block took, at DEBUG."""
    started = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s took %.1f ms", action, (time.perf_counter() - started) * 1000)


__all__ = ["configure_logging", "get_logger", "log_duration"]
