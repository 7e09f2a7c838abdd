"""Logging configuration for tailwatch.

Tailed lines go to stdout, so diagnostics never do:
- A log file (config ``logging.file`` or TAILWATCH_LOG) gets everything at the
  configured level
- Without a log file, stderr gets warnings and errors only, and only when it
  is a terminal; ``-v`` lowers that threshold
- Verbosity levels: error(0), warning(1), info(2), verbose(3), trace(4)

Every status a watcher emits can be logged as one structured record with
log_status(), which serializes it only when the level is enabled.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tailwatch.config.schema import LoggingConfig
    from tailwatch.watching.types import Status

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("tailwatch")

LOG_ENV_VAR = "TAILWATCH_LOG"

# Floor for the stderr handler unless -v was given
CONSOLE_LEVEL = logging.WARNING

_initialized = False

_LEVEL_MAP = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_VERBOSITY_MAP = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: VERBOSE,
    4: TRACE,
}


class _LowercaseLevelFormatter(logging.Formatter):
    """Formatter that emits lowercase level names."""

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Pick the effective log level; verbose (int) wins over level (str)."""
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        return _VERBOSITY_MAP.get(config.verbose, TRACE)
    if config.level:
        return _LEVEL_MAP.get(config.level.upper(), logging.INFO)
    return logging.INFO


def console_level(config: LoggingConfig | None) -> int:
    """Level of the stderr handler, which shares the terminal with tail output."""
    level = resolve_level(config)
    if config is not None and config.verbose is not None:
        return level
    return max(level, CONSOLE_LEVEL)


def resolve_log_path(config: LoggingConfig | None) -> str | None:
    """Log file from config, else from the environment, with ``~`` expanded."""
    path = config.file if config and config.file else os.environ.get(LOG_ENV_VAR)
    return os.path.expanduser(path) if path else None


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Initialize logging based on configuration.

    Call this once at startup. Subsequent calls are no-ops until
    reset_logging().
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    log_level = resolve_level(config)
    logger.setLevel(log_level)

    # Format: HH:MM:SS level name: message
    formatter = _LowercaseLevelFormatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"
    )

    log_path = resolve_log_path(config)
    if log_path:
        try:
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        except OSError as e:
            if sys.stderr.isatty():
                print(f"[tailwatch] Failed to open log file: {e}", file=sys.stderr)
                _add_stderr_handler(formatter, console_level(config))
            return
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    elif sys.stderr.isatty():
        _add_stderr_handler(formatter, console_level(config))


def _add_stderr_handler(formatter: logging.Formatter, level: int) -> None:
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)


def reset_logging() -> None:
    """Drop installed handlers so setup_logging() can run again (tests)."""
    global _initialized
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    _initialized = False


def log_status(log: logging.Logger, status: Status, level: int = logging.DEBUG) -> None:
    """Log ``status`` as one record carrying its serialized form.

    The status is only serialized (and its description only computed) when
    ``log`` would emit at ``level``. The dict is attached as ``record.status``
    for handlers that want structured data.
    """
    if not log.isEnabledFor(level):
        return
    data = status.to_dict()
    log.log(
        level,
        "%s %s: %s (%d items)",
        data["level"],
        data["watcher"],
        data["description"],
        len(data["items"]),
        extra={"status": data},
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Optional name for a child logger (e.g., "watching", "engine").
              If None, returns the root tailwatch logger.
    """
    if name:
        return logger.getChild(name)
    return logger
