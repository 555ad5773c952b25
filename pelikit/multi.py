"""A log that routes records to other logs by target.

A record's target is its ``target`` attribute when one is set (for example
through ``extra={"target": "command"}``) and otherwise the name of the
logger that produced it. Records whose target has no log of its own go to
the default log, or are dropped when there is none.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .outputs import Drain
from .single import LevelFilter, RingLog


def _target_of(record: logging.LogRecord) -> str:
    target = getattr(record, "target", None)
    return target if isinstance(target, str) else record.name


class MultiLogger:
    """Sends each record to the logger registered for its target."""

    def __init__(
        self,
        default: Optional[Any],
        targets: Dict[str, Any],
        level_filter: LevelFilter,
    ) -> None:
        self._default = default
        self._targets = dict(targets)
        self.level_filter = level_filter

    def _get_target(self, target: str) -> Optional[Any]:
        return self._targets.get(target, self._default)

    def enabled(self, record: logging.LogRecord) -> bool:
        """Whether the record passes this filter and its target's logger."""
        if not self.level_filter.allows(record.levelno):
            return False
        logger = self._get_target(_target_of(record))
        return logger is not None and logger.enabled(record)

    def log(self, record: logging.LogRecord) -> None:
        """Route ``record`` to its target's logger, if that logger accepts it."""
        if not self.level_filter.allows(record.levelno):
            return
        logger = self._get_target(_target_of(record))
        if logger is not None and logger.enabled(record):
            logger.log(record)


class MultiLogDrain(Drain):
    """Flushes the default drain and every target drain."""

    def __init__(self, default: Optional[Drain], targets: Dict[str, Drain]) -> None:
        self._default = default
        self._targets = dict(targets)

    def flush(self) -> None:
        """Flush every drain, stopping at the first error."""
        if self._default is not None:
            self._default.flush()
        for drain in self._targets.values():
            drain.flush()


class MultiLogBuilder:
    """Configures a :class:`RingLog` that routes records by target."""

    def __init__(self) -> None:
        self._default: Optional[RingLog] = None
        self._targets: Dict[str, RingLog] = {}
        self._level_filter = LevelFilter.TRACE

    def default(self, log: RingLog) -> MultiLogBuilder:
        """Set the log for records whose target has no log of its own."""
        self._default = log
        return self

    def add_target(self, target: str, log: RingLog) -> MultiLogBuilder:
        """Route records with ``target`` to ``log``, replacing any earlier one."""
        self._targets[target] = log
        return self

    def level_filter(self, level_filter: LevelFilter) -> MultiLogBuilder:
        """Set the most verbose level to let through."""
        self._level_filter = level_filter
        return self

    def build(self) -> RingLog:
        """Build the routing :class:`RingLog`."""
        default = self._default
        logger = MultiLogger(
            default.logger if default is not None else None,
            {name: log.logger for name, log in self._targets.items()},
            self._level_filter,
        )
        drain = MultiLogDrain(
            default.drain if default is not None else None,
            {name: log.drain for name, log in self._targets.items()},
        )
        return RingLog(logger=logger, drain=drain, level_filter=self._level_filter)