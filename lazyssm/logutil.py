"""Logging setup for the CLI.

Records from lazyssm and from paramiko go to a rotating file in the platform
log directory. Verbose runs also echo DEBUG output to stderr, except while
the full-screen browser owns the terminal (see ``console_muted``).
"""

from __future__ import annotations

import contextlib
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "lazyssm"
LOG_FILENAME = "lazyssm.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
LOGGER_NAMES = (APP_NAME, "paramiko")


class ConsoleFormatter(logging.Formatter):
    """Readable one-line formatter: short timestamp, level, logger name."""

    def format(self, record: logging.LogRecord) -> str:
        ts = time.strftime("%H:%M:%S", time.localtime(record.created))
        lvl = record.levelname.ljust(7)
        line = f"{ts} {lvl} [{record.name}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class ConsoleHandler(logging.StreamHandler):
    """stderr handler that drops records while ``muted`` is set."""

    muted = False

    def emit(self, record: logging.LogRecord) -> None:
        if self.muted:
            return
        super().emit(record)


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def _file_handler(log_path: Path) -> logging.Handler | None:
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        print(f"Failed to set up log file {log_path}: {exc}", file=sys.stderr)
        print("Falling back to stderr logging", file=sys.stderr)
        return None


def _console_handlers() -> list[ConsoleHandler]:
    found: list[ConsoleHandler] = []
    for name in LOGGER_NAMES:
        for handler in logging.getLogger(name).handlers:
            if isinstance(handler, ConsoleHandler) and handler not in found:
                found.append(handler)
    return found


@contextlib.contextmanager
def console_muted():
    """Silence stderr logging for the duration of the block."""
    handlers = _console_handlers()
    for handler in handlers:
        handler.muted = True
    try:
        yield
    finally:
        for handler in handlers:
            handler.muted = False


def configure_logging(verbose: bool = False, log_path: Path | None = None) -> logging.Logger:
    """Install shared handlers on the lazyssm and paramiko loggers.

    Returns the lazyssm logger. Neither logger propagates, so nothing reaches
    Python's last-resort stderr handler.
    """
    stale: list[logging.Handler] = []
    for name in LOGGER_NAMES:
        named = logging.getLogger(name)
        for handler in list(named.handlers):
            named.removeHandler(handler)
            if handler not in stale:
                stale.append(handler)
    for handler in stale:
        handler.close()

    handlers: list[logging.Handler] = []
    file_handler = _file_handler(log_path or default_log_path())
    if file_handler is not None:
        handlers.append(file_handler)
    if verbose or file_handler is None:
        handlers.append(ConsoleHandler(sys.stderr))
    for handler in handlers:
        handler.setFormatter(ConsoleFormatter())

    for name, level in (
        (APP_NAME, logging.DEBUG if verbose else logging.INFO),
        ("paramiko", logging.INFO if verbose else logging.WARNING),
    ):
        named = logging.getLogger(name)
        for handler in handlers:
            named.addHandler(handler)
        named.setLevel(level)
        named.propagate = False

    logger = logging.getLogger(APP_NAME)
    if verbose:
        logger.debug("debug logging enabled")
    return logger
