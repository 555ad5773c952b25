"""A queued log that keeps only one in every N records."""

from __future__ import annotations

import logging
import threading
from typing import Tuple

from . import logmetrics
from .logformat import FormatFunction
from .outputs import Output
from .single import LevelFilter, LogBuilder, LogDrain, Logger, RingLog

_DEFAULT_SAMPLE = 100


class SamplingLogger:
    """Passes every ``sample``-th enabled record on to a :class:`Logger`."""

    def __init__(self, logger: Logger, sample: int) -> None:
        if sample < 1:
            raise ValueError("sample must be at least 1")
        self._logger = logger
        self._sample = sample
        # Starts at 1 so the first record taken is the N-th one.
        self._counter = 1
        self._lock = threading.Lock()

    @property
    def level_filter(self) -> LevelFilter:
        """The level filter of the wrapped logger."""
        return self._logger.level_filter

    @property
    def sample(self) -> int:
        """One record in this many is kept."""
        return self._sample

    def enabled(self, record: logging.LogRecord) -> bool:
        """Whether the record's level passes the filter."""
        return self.level_filter.allows(record.levelno)

    def log(self, record: logging.LogRecord) -> None:
        """Queue ``record`` if it is the N-th enabled one, else count it as skipped."""
        if not self.enabled(record):
            return
        with self._lock:
            count = self._counter
            self._counter += 1
        if count % self._sample == 0:
            self._logger.log(record)
        else:
            logmetrics.LOG_SKIP.increment()


class SamplingLogBuilder:
    """Configures a :class:`RingLog` that sends 1 in N records to one output."""

    def __init__(self) -> None:
        self._log_builder = LogBuilder()
        self._sample = _DEFAULT_SAMPLE

    def log_queue_depth(self, messages: int) -> SamplingLogBuilder:
        """Set how many messages may wait in the queue before new ones drop."""
        self._log_builder.log_queue_depth(messages)
        return self

    def single_message_size(self, size: int) -> SamplingLogBuilder:
        """Set the expected size of a single message in bytes."""
        self._log_builder.single_message_size(size)
        return self

    def output(self, output: Output) -> SamplingLogBuilder:
        """Set the output the drain writes to."""
        self._log_builder.output(output)
        return self

    def format(self, format: FormatFunction) -> SamplingLogBuilder:
        """Set the function that formats each record."""
        self._log_builder.format(format)
        return self

    def sample(self, sample: int) -> SamplingLogBuilder:
        """Keep one record in every ``sample``."""
        if sample < 1:
            raise ValueError("sample must be at least 1")
        self._sample = sample
        return self

    def _build_raw(self) -> Tuple[SamplingLogger, LogDrain]:
        logger, drain = self._log_builder.build_raw()
        return SamplingLogger(logger, self._sample), drain

    def build(self) -> RingLog:
        """Build a :class:`RingLog`."""
        logger, drain = self._build_raw()
        return RingLog(logger=logger, drain=drain, level_filter=logger.level_filter)