"""Functions that turn a log record into a line of text."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

FormatFunction = Callable[[datetime, logging.LogRecord], str]


def _level_name(levelno: int) -> str:
    if levelno >= logging.ERROR:
        return "ERROR"
    if levelno >= logging.WARNING:
        return "WARN"
    if levelno >= logging.INFO:
        return "INFO"
    if levelno >= logging.DEBUG:
        return "DEBUG"
    return "TRACE"


def _timestamp(now: datetime) -> str:
    return now.isoformat(timespec="milliseconds")


def default_format(now: datetime, record: logging.LogRecord) -> str:
    """Format as ``<time> <LEVEL> [<module>] <message>`` plus a newline."""
    module = record.module or "<unnamed>"
    return (
        f"{_timestamp(now)} {_level_name(record.levelno)} "
        f"[{module}] {record.getMessage()}\n"
    )


def klog_format(now: datetime, record: logging.LogRecord) -> str:
    """Format as ``<time> <message>`` plus a newline, for command logs."""
    return f"{_timestamp(now)} {record.getMessage()}\n"