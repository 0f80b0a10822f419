"""Logging for feed entry points.

:func:`setup_logger` gives a script its named logger with a ``stderr``
handler and, when the log directory is writable, a size-rotated file.
Backend fetches run on worker threads, so every record carries the thread
name.  The HTTP stack's per-connection debug chatter is capped at WARNING
so feed-level DEBUG output stays readable.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 3

_LEVEL_ENV_VAR = "SIGNALFEED_LOG_LEVEL"
_DIR_ENV_VAR = "SIGNALFEED_LOG_DIR"

_NOISY_LOGGERS = ("urllib3", "requests")

_configured: set[str] = set()


def resolve_level(level: int | str | None) -> int:
    """Turn ``"debug"``/``"INFO"``/``10``/``None`` into a logging level.

    ``None`` consults ``SIGNALFEED_LOG_LEVEL`` and defaults to ``INFO``.
    Unknown names also fall back to ``INFO``.
    """
    if level is None:
        level = os.environ.get(_LEVEL_ENV_VAR, "").strip() or logging.INFO
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def resolve_log_dir(log_dir: Path | None) -> Path:
    """Explicit *log_dir*, else ``SIGNALFEED_LOG_DIR``, else ``./logs``."""
    if log_dir is not None:
        return log_dir
    return Path(os.environ.get(_DIR_ENV_VAR, "").strip() or "logs")


def setup_logger(
    name: str,
    log_dir: Path | None = None,
    level: int | str | None = None,
) -> logging.Logger:
    """Configure the logger *name* once and return it.

    Parameters
    ----------
    name:
        Logger name; the file is ``<name>.log``.  Entry points pass
        ``"signalfeed"`` so the package's module loggers inherit it.
    log_dir:
        See :func:`resolve_log_dir`.
    level:
        An int or a level name; see :func:`resolve_level`.

    Repeated calls with the same *name* return the logger unchanged.
    """
    logger = logging.getLogger(name)
    if name in _configured:
        return logger

    resolved = resolve_level(level)
    logger.setLevel(resolved)
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    logger.addHandler(_console_handler(formatter, resolved))
    directory = resolve_log_dir(log_dir)
    file_handler = _file_handler(directory, name, formatter, resolved)
    if file_handler is None:
        logger.warning("Logging to console only: %s is not writable", directory)
    else:
        logger.addHandler(file_handler)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(resolved, logging.WARNING))

    _configured.add(name)
    return logger


def _console_handler(formatter: logging.Formatter, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def _file_handler(
    directory: Path, name: str, formatter: logging.Formatter, level: int
) -> logging.Handler | None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            directory / f"{name}.log",
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        return None
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler
