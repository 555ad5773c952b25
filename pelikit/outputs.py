"""Log destinations and the drain interface that feeds them."""

from __future__ import annotations

import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Union

PathLike = Union[str, "os.PathLike[str]"]

_BUFFER_CAPACITY = 8192


class Output(ABC):
    """A logging destination such as standard out or a file."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write ``data``; return the number of bytes accepted."""

    @abstractmethod
    def flush(self) -> None:
        """Push buffered bytes to the destination."""


class Drain(ABC):
    """Moves queued log messages to an :class:`Output`.

    ``flush`` must be called periodically, away from any critical path, so
    that the queue keeps room for new messages.
    """

    @abstractmethod
    def flush(self) -> None:
        """Write queued messages to the output and flush it."""


class _StreamOutput(Output):
    """Buffers bytes and writes them to a standard stream."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def _stream(self) -> IO[str]:
        raise NotImplementedError

    def write(self, data: bytes) -> int:
        self._buffer += data
        if len(self._buffer) >= _BUFFER_CAPACITY:
            self._write_out()
        return len(data)

    def _write_out(self) -> None:
        if not self._buffer:
            return
        data = bytes(self._buffer)
        self._buffer.clear()
        stream = self._stream()
        binary = getattr(stream, "buffer", None)
        if binary is not None:
            stream.flush()
            binary.write(data)
            binary.flush()
        else:
            stream.write(data.decode("utf-8", errors="replace"))
            stream.flush()

    def flush(self) -> None:
        self._write_out()


class Stdout(_StreamOutput):
    """An output that writes to standard out."""

    def _stream(self) -> IO[str]:
        return sys.stdout


class Stderr(_StreamOutput):
    """An output that writes to standard error."""

    def _stream(self) -> IO[str]:
        return sys.stderr


class File(Output):
    """A file output that rotates the live log to a backup path.

    The live file is created (or truncated) on construction. After each
    flush, if it has reached ``max_size`` bytes it is moved to ``backup``
    and a fresh live file is started.
    """

    def __init__(self, active: PathLike, backup: PathLike, max_size: int) -> None:
        self._active = Path(active)
        self._backup = Path(backup)
        self._max_size = max_size
        self._file = open(self._active, "wb")

    def __enter__(self) -> File:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def write(self, data: bytes) -> int:
        return self._file.write(data)

    def flush(self) -> None:
        self._file.flush()
        self._rotate()

    def close(self) -> None:
        """Flush and close the live file."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def _size(self) -> int:
        return os.fstat(self._file.fileno()).st_size

    def _rotate(self) -> None:
        if self._size() >= self._max_size:
            self._file.close()
            os.replace(self._active, self._backup)
            self._file = open(self._active, "wb")