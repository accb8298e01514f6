"""Logging setup for **DepScout**.

Highlights
----------
* One format for the console and an optional rotating log file.
* Nothing is configured at import time. Components receive a
  :class:`logging.Logger` at construction and fall back to :func:`get_logger`::

      from dep_scout.logger import get_logger
      get_logger().info("Scanning started")

* The CLI calls :func:`configure` once it knows the verbosity flags.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, TextIO, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "DepScout"

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Helper builders                                                             #
# --------------------------------------------------------------------------- #


def _with_format(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _console_handler(fmt: str, stream: Optional[TextIO] = None) -> logging.Handler:
    # stdout is reserved for results
    return _with_format(logging.StreamHandler(stream or sys.stderr), fmt)


def _rotating_file_handler(file: Path | str, fmt: str) -> logging.Handler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    return _with_format(handler, fmt)


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def get_logger(logger: Optional[logging.Logger] = None) -> logging.Logger:
    """Return *logger* if given, otherwise the shared ``DepScout`` logger."""
    return logger if logger is not None else logging.getLogger(LOGGER_NAME)


def level_for(verbose: bool = False, silence: bool = False) -> int:
    """Map the scan verbosity flags to a logging level; ``verbose`` wins."""
    if verbose:
        return logging.DEBUG
    if silence:
        return logging.CRITICAL
    return logging.INFO


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """(Re)configure the ``DepScout`` logger and return it.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Rotating log file; *None* keeps output on the console only.
    log_format
        Format string shared by every handler.
    replace_handlers
        Drop previously installed handlers first.
    stream
        Console stream, ``sys.stderr`` when omitted.
    """
    project_logger = get_logger()
    project_logger.setLevel(level)

    if replace_handlers:
        for handler in list(project_logger.handlers):
            project_logger.removeHandler(handler)
            handler.close()

    project_logger.addHandler(_console_handler(log_format, stream))
    if log_file is not None:
        project_logger.addHandler(_rotating_file_handler(log_file, log_format))

    project_logger.propagate = False
    return project_logger


__all__ = ["DEFAULT_FORMAT", "LOGGER_NAME", "configure", "get_logger", "level_for"]
