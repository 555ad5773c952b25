"""Counters and gauges describing the state of the logging backend."""

from __future__ import annotations

import threading
from typing import Dict, Tuple, Union


class Counter:
    """A monotonically increasing, thread-safe count."""

    def __init__(self, name: str, description: str = "") -> None:
        self.name = name
        self.description = description
        self._value = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Counter({self.name!r}, value={self.value()})"

    def increment(self) -> None:
        """Add one to the count."""
        self.add(1)

    def add(self, amount: int) -> None:
        """Add ``amount`` to the count; ``amount`` cannot be negative."""
        if amount < 0:
            raise ValueError("a counter cannot be decreased")
        with self._lock:
            self._value += amount

    def value(self) -> int:
        """Current count."""
        with self._lock:
            return self._value


class Gauge:
    """A thread-safe value that can move up and down."""

    def __init__(self, name: str, description: str = "") -> None:
        self.name = name
        self.description = description
        self._value = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Gauge({self.name!r}, value={self.value()})"

    def increment(self) -> None:
        """Raise the value by one."""
        with self._lock:
            self._value += 1

    def decrement(self) -> None:
        """Lower the value by one."""
        with self._lock:
            self._value -= 1

    def value(self) -> int:
        """Current value."""
        with self._lock:
            return self._value


LOG_CREATE = Counter("log_create", "logging targets initialized")
LOG_CREATE_EX = Counter(
    "log_create_ex", "number of exceptions while initializing logging targets"
)
LOG_DESTROY = Counter("log_destroy", "logging targets destroyed")
LOG_CURR = Gauge("log_curr", "current number of logging targets")
LOG_OPEN = Counter("log_open", "number of logging destinations which have been opened")
LOG_OPEN_EX = Counter(
    "log_open_ex", "number of exceptions while opening logging destinations"
)
LOG_WRITE = Counter("log_write", "number of writes to all logging destinations")
LOG_WRITE_BYTE = Counter(
    "log_write_byte", "number of bytes written to all logging destinations"
)
LOG_WRITE_EX = Counter(
    "log_write_ex", "number of exceptions while writing to logging destinations"
)
LOG_SKIP = Counter("log_skip", "number of log messages skipped due to sampling policy")
LOG_DROP = Counter("log_drop", "number of log messages dropped due to full queues")
LOG_DROP_BYTE = Counter("log_drop_byte", "number of bytes dropped due to full queues")
LOG_FLUSH = Counter(
    "log_flush", "number of times logging destinations have been flushed"
)
LOG_FLUSH_EX = Counter(
    "log_flush_ex", "number of exceptions while flushing logging destinations"
)

_METRICS: Tuple[Union[Counter, Gauge], ...] = (
    LOG_CREATE,
    LOG_CREATE_EX,
    LOG_DESTROY,
    LOG_CURR,
    LOG_OPEN,
    LOG_OPEN_EX,
    LOG_WRITE,
    LOG_WRITE_BYTE,
    LOG_WRITE_EX,
    LOG_SKIP,
    LOG_DROP,
    LOG_DROP_BYTE,
    LOG_FLUSH,
    LOG_FLUSH_EX,
)


def snapshot() -> Dict[str, int]:
    """Return the current value of every logging metric, keyed by name."""
    return {metric.name: metric.value() for metric in _METRICS}