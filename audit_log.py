"""
Append-only run log.

One line per event, `[YYYY-MM-DD HH:MM:SS] message`, with terminal
control codes removed before the line reaches the file.
"""

import logging
import os
from datetime import datetime
from typing import Optional

from rich.text import Text

HOME = os.path.expanduser("~")

LOGGER_NAME = "disk_audit"
LINE_FORMAT = "[%(asctime)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogSinkError(Exception):
    """Raised when the log file cannot be opened for appending."""


class AnsiStrippingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return Text.from_ansi(super().format(record)).plain


def default_log_path(home: str = HOME, now: Optional[datetime] = None) -> str:
    """~/Desktop/disk-audit-<timestamp>.log, or Downloads/home if Desktop is missing."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    log_dir = os.path.join(home, "Desktop")
    if not os.path.isdir(log_dir):
        log_dir = os.path.join(home, "Downloads")
    if not os.path.isdir(log_dir):
        log_dir = home
    return os.path.join(log_dir, f"disk-audit-{stamp}.log")


def open_log(path: str, name: str = LOGGER_NAME) -> logging.Logger:
    """
    Attach a fresh append-mode file handler to the run logger and return it.

    Any handler left over from an earlier run in the same process is
    closed first. Raises LogSinkError if the file cannot be opened.
    """
    logger = logging.getLogger(name)
    close_log(logger)

    try:
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as exc:
        raise LogSinkError(f"Cannot write log file '{path}': {exc}") from exc

    handler.setFormatter(AnsiStrippingFormatter(LINE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def close_log(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def log_path_of(logger: logging.Logger) -> Optional[str]:
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return handler.baseFilename
    return None
