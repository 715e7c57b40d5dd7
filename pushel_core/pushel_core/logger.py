"""
Logging setup for the pushel daemon.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger as _logger

_LOG_INITIALISED = False
_ACTIVE_FORMAT: Optional[str] = None
LOG_FORMATS = ("pretty", "json")
LOG_DIR = Path(os.environ.get("XDG_STATE_HOME", str(Path.home() / ".local" / "state"))) / "pushel"
DEFAULT_LOG_PATH = LOG_DIR / "pushel.log"


def configure(log_format: str = "pretty", log_path: Optional[Path] = None) -> None:
    """
    Configure loguru for the daemon.

    Console output is human readable for "pretty" and one JSON object per
    line for "json". A rotating file sink keeps debug output. Calling again
    with the same format is a no-op.
    """
    global _LOG_INITIALISED, _ACTIVE_FORMAT
    if _LOG_INITIALISED and _ACTIVE_FORMAT == log_format and log_path is None:
        return
    target = log_path or DEFAULT_LOG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    serialize = log_format == "json"

    _logger.remove()
    if sys.stderr is not None:
        _logger.add(sys.stderr, level="INFO", enqueue=True, serialize=serialize)
    _logger.add(
        target,
        level="DEBUG",
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
        enqueue=True,
        backtrace=True,
        diagnose=False,
        serialize=serialize,
    )
    _LOG_INITIALISED = True
    _ACTIVE_FORMAT = log_format


class InterceptHandler(logging.Handler):
    """Forwards standard-library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk past the logging module so loguru reports the real caller.
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_stdlib(names: Iterable[str]) -> None:
    """Send the named standard-library loggers through loguru's sinks."""
    for name in names:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False


def get_logger():
    """Return the shared logger instance."""
    return _logger
