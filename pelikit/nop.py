"""A log that throws every record away."""

from __future__ import annotations

import logging

from .outputs import Drain
from .single import LevelFilter, RingLog


class NopLogger:
    """A logger that is never enabled and drops every record."""

    level_filter = LevelFilter.OFF

    def enabled(self, record: logging.LogRecord) -> bool:
        """Always ``False``."""
        return False

    def log(self, record: logging.LogRecord) -> None:
        """Drop ``record``."""


class NopLogDrain(Drain):
    """A drain with nothing to move."""

    def flush(self) -> None:
        """Do nothing."""


class NopLogBuilder:
    """Builds a :class:`RingLog` that drops all records."""

    def build(self) -> RingLog:
        """Build the ring log."""
        logger = NopLogger()
        return RingLog(
            logger=logger, drain=NopLogDrain(), level_filter=logger.level_filter
        )