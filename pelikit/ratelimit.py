"""A thread-safe token bucket ratelimiter.

Tokens are added in fixed amounts after each refill interval. The bucket holds
at most ``max_tokens`` tokens; tokens that would overflow it are counted as
dropped.
"""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Union

_U64_MAX = 2**64 - 1
_NANOS_PER_SECOND = 1_000_000_000

Interval = Union[timedelta, int, float]


class RatelimitError(Exception):
    """Base class for invalid ratelimiter configuration."""

    message = "invalid ratelimiter configuration"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class AvailableTokensTooHigh(RatelimitError):
    message = "available tokens cannot be set higher than max tokens"


class MaxTokensTooLow(RatelimitError):
    message = "max tokens cannot be less than the refill amount"


class RefillAmountTooHigh(RatelimitError):
    message = "refill amount cannot exceed the max tokens"


class RefillIntervalTooLong(RatelimitError):
    message = "refill interval in nanoseconds exceeds maximum u64"


class RateLimited(Exception):
    """Raised by ``try_wait`` when no token is available.

    ``retry_after`` holds the number of seconds until the next refill.
    """

    def __init__(self, retry_after: float) -> None:
        super().__init__(f"no tokens available, next refill in {retry_after:.9f}s")
        self.retry_after = retry_after


def _to_nanos(interval: Interval) -> int:
    if isinstance(interval, timedelta):
        nanos = (interval // timedelta(microseconds=1)) * 1000
    elif isinstance(interval, int):
        nanos = interval * _NANOS_PER_SECOND
    else:
        nanos = round(interval * _NANOS_PER_SECOND)
    if nanos < 0:
        raise ValueError("interval cannot be negative")
    return nanos


def _check_count(value: int, name: str) -> int:
    if value < 0:
        raise ValueError(f"{name} cannot be negative")
    return value


class Ratelimiter:
    """A token bucket that can be shared between threads.

    Create one with :meth:`Ratelimiter.builder`.
    """

    def __init__(
        self,
        capacity: int,
        refill_amount: int,
        refill_interval_ns: int,
        available: int,
    ) -> None:
        self._lock = threading.Lock()
        self._capacity = capacity
        self._refill_amount = refill_amount
        self._interval_ns = refill_interval_ns
        self._available = available
        self._dropped = 0
        self._refill_at = time.monotonic_ns() + refill_interval_ns

    @staticmethod
    def builder(amount: int, interval: Interval) -> Builder:
        """Start building a ratelimiter adding ``amount`` tokens every ``interval``.

        ``interval`` is a ``timedelta`` or a number of seconds.
        """
        return Builder(amount, interval)

    def rate(self) -> float:
        """Effective rate in tokens per second."""
        with self._lock:
            return self._refill_amount * 1e9 / self._interval_ns

    def refill_interval(self) -> float:
        """Interval between refills, in seconds."""
        with self._lock:
            return self._interval_ns / _NANOS_PER_SECOND

    def set_refill_interval(self, interval: Interval) -> None:
        """Change the interval between refills."""
        nanos = _to_nanos(interval)
        if nanos > _U64_MAX:
            raise RefillIntervalTooLong()
        with self._lock:
            self._interval_ns = nanos

    def refill_amount(self) -> int:
        """Number of tokens added on each refill."""
        with self._lock:
            return self._refill_amount

    def set_refill_amount(self, amount: int) -> None:
        """Change the number of tokens added on each refill."""
        _check_count(amount, "refill amount")
        with self._lock:
            if amount > self._capacity:
                raise RefillAmountTooHigh()
            self._refill_amount = amount

    def max_tokens(self) -> int:
        """Maximum number of tokens the bucket can hold."""
        with self._lock:
            return self._capacity

    def set_max_tokens(self, amount: int) -> None:
        """Change the bucket capacity; the bucket is topped up to the new value."""
        _check_count(amount, "max tokens")
        with self._lock:
            if amount < self._refill_amount:
                raise MaxTokensTooLow()
            self._capacity = amount
            if amount > self._available:
                self._available = amount

    def available(self) -> int:
        """Number of tokens currently available."""
        with self._lock:
            return self._available

    def set_available(self, amount: int) -> None:
        """Set the number of available tokens."""
        _check_count(amount, "available tokens")
        with self._lock:
            if amount > self._capacity:
                raise AvailableTokensTooHigh()
            self._available = amount

    def next_refill(self) -> int:
        """Time of the next refill, on the ``time.monotonic_ns`` clock."""
        with self._lock:
            return self._refill_at

    def dropped(self) -> int:
        """Number of tokens dropped because the bucket was full."""
        with self._lock:
            return self._dropped

    def _refill(self, now: int) -> None:
        if now < self._refill_at:
            return
        intervals = (now - self._refill_at) // self._interval_ns + 1
        self._refill_at += intervals * self._interval_ns

        amount = intervals * self._refill_amount
        if self._available + amount >= self._capacity:
            to_add = max(self._capacity - self._available, 0)
            self._available += to_add
            self._dropped += amount - to_add
        else:
            self._available += amount

    def try_wait(self) -> None:
        """Take one token without blocking.

        Raises :class:`RateLimited` with the time until the next refill when
        no token is available.
        """
        now = time.monotonic_ns()
        with self._lock:
            self._refill(now)
            if self._available > 0:
                self._available -= 1
                return
            wait_ns = max(self._refill_at - now, 0)
        raise RateLimited(wait_ns / _NANOS_PER_SECOND)


class Builder:
    """Configures and constructs a :class:`Ratelimiter`."""

    def __init__(self, amount: int, interval: Interval) -> None:
        self._refill_amount = _check_count(amount, "refill amount")
        self._interval_ns = _to_nanos(interval)
        self._initial_available = 0
        self._max_tokens = 1

    def max_tokens(self, tokens: int) -> Builder:
        """Set the bucket capacity, which bounds the burst size."""
        self._max_tokens = _check_count(tokens, "max tokens")
        return self

    def initial_available(self, tokens: int) -> Builder:
        """Set the number of tokens available right after construction."""
        self._initial_available = _check_count(tokens, "available tokens")
        return self

    def build(self) -> Ratelimiter:
        """Construct the ratelimiter, checking the configuration."""
        if self._max_tokens < self._refill_amount:
            raise MaxTokensTooLow()
        if self._interval_ns > _U64_MAX:
            raise RefillIntervalTooLong()
        return Ratelimiter(
            capacity=self._max_tokens,
            refill_amount=self._refill_amount,
            refill_interval_ns=self._interval_ns,
            available=self._initial_available,
        )