"""A queued logging backend that writes every record to one output.

Records are formatted on the logging thread and pushed onto a bounded queue.
A :class:`LogDrain` must be flushed periodically, away from critical paths,
to move queued messages to the output. When the queue is full new messages
are dropped, which keeps the history that led up to a burst of logging.
"""

from __future__ import annotations

import enum
import logging
import queue
import weakref
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from . import logmetrics
from .logformat import FormatFunction, default_format
from .outputs import Drain, Output

_log = logging.getLogger(__name__)


class LevelFilter(enum.Enum):
    """The most verbose level let through; values are minimum logging levels."""

    OFF = 2**31 - 1
    ERROR = logging.ERROR
    WARN = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG
    TRACE = 1

    def allows(self, level: int) -> bool:
        """Whether a record of numeric ``level`` passes this filter."""
        return level >= self.value


class NoOutputConfigured(Exception):
    """Raised when a log is built without an output."""

    def __init__(self) -> None:
        super().__init__("no output configured")


class _RingLogHandler(logging.Handler):
    """Forwards records from the standard logging machinery to a ring log."""

    def __init__(self, target: Any) -> None:
        super().__init__(logging.NOTSET)
        self._target = target

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._target.log(record)
        except Exception:
            self.handleError(record)


@dataclass
class RingLog:
    """A logger paired with the drain that empties its queue."""

    logger: Any
    drain: Drain
    level_filter: LevelFilter

    def start(self, logger: Optional[logging.Logger] = None) -> Drain:
        """Attach to ``logger`` (the root logger by default) and return the drain.

        The caller is responsible for flushing the drain periodically.
        """
        target = logger if logger is not None else logging.getLogger()
        if any(isinstance(h, _RingLogHandler) for h in target.handlers):
            raise RuntimeError("failed to start logger: a ring log is already attached")
        target.addHandler(_RingLogHandler(self.logger))
        target.setLevel(self.level_filter.value)
        return self.drain


def _on_logger_destroyed() -> None:
    logmetrics.LOG_DESTROY.increment()
    logmetrics.LOG_CURR.decrement()


class Logger:
    """Formats records and queues them for a :class:`LogDrain`."""

    def __init__(
        self,
        channel: "queue.Queue[bytes]",
        buffer_size: int,
        format: FormatFunction,
        level_filter: LevelFilter,
    ) -> None:
        self._channel = channel
        self.buffer_size = buffer_size
        self._format = format
        self.level_filter = level_filter
        weakref.finalize(self, _on_logger_destroyed)

    def enabled(self, record: logging.LogRecord) -> bool:
        """Whether the record's level passes this logger's filter."""
        return self.level_filter.allows(record.levelno)

    def log(self, record: logging.LogRecord) -> None:
        """Format ``record`` and queue it, dropping it if the queue is full."""
        if not self.enabled(record):
            return
        data = self._format(datetime.now(timezone.utc), record).encode("utf-8")
        try:
            self._channel.put_nowait(data)
        except queue.Full:
            logmetrics.LOG_DROP.increment()
            logmetrics.LOG_DROP_BYTE.add(len(data))
        else:
            logmetrics.LOG_WRITE.increment()
            logmetrics.LOG_WRITE_BYTE.add(len(data))


class LogDrain(Drain):
    """Moves queued messages to a single output."""

    def __init__(self, channel: "queue.Queue[bytes]", buffer_size: int, output: Output) -> None:
        self._channel = channel
        self.buffer_size = buffer_size
        self._output = output

    def _write_all(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = self._output.write(bytes(view))
            if not written:
                raise OSError("failed to write whole buffer")
            view = view[written:]

    def flush(self) -> None:
        """Write every queued message to the output, then flush it."""
        logmetrics.LOG_FLUSH.increment()
        while True:
            try:
                data = self._channel.get_nowait()
            except queue.Empty:
                break
            try:
                self._write_all(data)
            except OSError as exc:
                logmetrics.LOG_WRITE_EX.increment()
                _log.warning("failed write to log buffer: %s", exc)
                raise
        try:
            self._output.flush()
        except OSError as exc:
            logmetrics.LOG_FLUSH_EX.increment()
            _log.warning("failed to flush log: %s", exc)
            raise


class LogBuilder:
    """Configures a :class:`RingLog` that sends every record to one output."""

    def __init__(self) -> None:
        self._log_queue_depth = 4096
        self._single_message_size = 1024
        self._format: FormatFunction = default_format
        self._level_filter = LevelFilter.TRACE
        self._output: Optional[Output] = None

    def log_queue_depth(self, messages: int) -> LogBuilder:
        """Set how many messages may wait in the queue before new ones drop."""
        if messages < 1:
            raise ValueError("log queue depth must be at least 1")
        self._log_queue_depth = messages
        return self

    def single_message_size(self, size: int) -> LogBuilder:
        """Set the expected size of a single message in bytes."""
        if size < 0:
            raise ValueError("message size cannot be negative")
        self._single_message_size = size
        return self

    def output(self, output: Output) -> LogBuilder:
        """Set the output the drain writes to."""
        self._output = output
        return self

    def format(self, format: FormatFunction) -> LogBuilder:
        """Set the function that formats each record."""
        self._format = format
        return self

    def level_filter(self, level_filter: LevelFilter) -> LogBuilder:
        """Set the most verbose level to let through."""
        self._level_filter = level_filter
        return self

    def build_raw(self) -> Tuple[Logger, LogDrain]:
        """Build the logger and its drain."""
        logmetrics.LOG_CREATE.increment()
        logmetrics.LOG_CURR.increment()
        if self._output is None:
            logmetrics.LOG_CREATE_EX.increment()
            raise NoOutputConfigured()
        channel: "queue.Queue[bytes]" = queue.Queue(self._log_queue_depth)
        logger = Logger(
            channel, self._single_message_size, self._format, self._level_filter
        )
        drain = LogDrain(channel, self._single_message_size, self._output)
        return logger, drain

    def build(self) -> RingLog:
        """Build a :class:`RingLog`."""
        logger, drain = self.build_raw()
        return RingLog(logger=logger, drain=drain, level_filter=logger.level_filter)