"""Bounded queues for routing items between two groups of threads.

Side ``a`` sends items to side ``b`` and side ``b`` answers back. Every item
is tagged with the index of the queue that sent it, so a reply can be
directed to the original sender. Items can be sent to one chosen receiver,
to a random receiver, or to all receivers on the other side.
"""

from __future__ import annotations

import queue
import random
from dataclasses import dataclass
from typing import Generic, List, Optional, Protocol, Sequence, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")


class Waker(Protocol):
    """Anything that can wake the event loop owning a receiving queue."""

    def wake(self) -> None:
        ...


class QueueFull(Exception):
    """Raised when an item could not be queued; ``item`` holds it."""

    def __init__(self, item: object) -> None:
        super().__init__("queue is full")
        self.item = item


@dataclass(frozen=True)
class TrackedItem(Generic[T]):
    """An item together with the index of the queue that sent it."""

    sender: int
    inner: T


class _WakingSender(Generic[V]):
    """Sending half of a bounded queue that remembers whether to wake."""

    def __init__(self, channel: "queue.Queue[V]", waker: Waker) -> None:
        self._channel = channel
        self._waker = waker
        self._needs_wake = False

    def copy(self) -> _WakingSender[V]:
        return _WakingSender(self._channel, self._waker)

    def try_send(self, item: V) -> bool:
        try:
            self._channel.put_nowait(item)
        except queue.Full:
            return False
        self._needs_wake = True
        return True

    def wake(self) -> None:
        if self._needs_wake:
            self._waker.wake()
            self._needs_wake = False


class Queues(Generic[T, U]):
    """One endpoint: sends items of type ``T`` and receives items of type ``U``."""

    def __init__(
        self,
        id: int,
        senders: List[_WakingSender[TrackedItem[T]]],
        receiver: "queue.Queue[TrackedItem[U]]",
    ) -> None:
        self._id = id
        self._senders = senders
        self._receiver = receiver
        self._rng = random.Random()

    @property
    def id(self) -> int:
        """Index of this endpoint on its own side."""
        return self._id

    @staticmethod
    def create(
        a_wakers: Sequence[Waker],
        b_wakers: Sequence[Waker],
        capacity: int,
    ) -> Tuple[List[Queues[T, U]], List[Queues[U, T]]]:
        """Build the endpoints for both sides.

        One endpoint is returned per waker, in the order the wakers were
        given. ``capacity`` bounds the number of pending items per receiver.
        """
        a_wakers = list(a_wakers)
        b_wakers = list(b_wakers)
        if bool(a_wakers) != bool(b_wakers):
            raise ValueError("both sides need at least one waker")
        if capacity <= 0:
            raise ValueError("capacity must be positive")

        b_rx = [queue.Queue(capacity) for _ in b_wakers]
        a_tx = [_WakingSender(q, w) for q, w in zip(b_rx, b_wakers)]

        a_rx = [queue.Queue(capacity) for _ in a_wakers]
        b_tx = [_WakingSender(q, w) for q, w in zip(a_rx, a_wakers)]

        side_a = [
            Queues(index, [s.copy() for s in a_tx], receiver)
            for index, receiver in enumerate(a_rx)
        ]
        side_b = [
            Queues(index, [s.copy() for s in b_tx], receiver)
            for index, receiver in enumerate(b_rx)
        ]
        return side_a, side_b

    def try_recv(self) -> Optional[TrackedItem[U]]:
        """Take one pending item, or return ``None`` if there is none."""
        try:
            return self._receiver.get_nowait()
        except queue.Empty:
            return None

    def try_recv_all(self) -> List[TrackedItem[U]]:
        """Take every item that was pending when the call started."""
        items = []
        for _ in range(self._receiver.qsize()):
            item = self.try_recv()
            if item is not None:
                items.append(item)
        return items

    def _send(self, index: int, item: T) -> None:
        if not self._senders[index].try_send(TrackedItem(self._id, item)):
            raise QueueFull(item)

    def try_send_to(self, id: int, item: T) -> None:
        """Send ``item`` to the receiver with index ``id``."""
        self._send(id, item)

    def try_send_any(self, item: T) -> None:
        """Send ``item`` to a receiver picked uniformly at random."""
        self._send(self._rng.randrange(len(self._senders)), item)

    def try_send_all(self, item: T) -> None:
        """Send ``item`` to every receiver; raise if any of them was full."""
        failed = False
        for sender in self._senders:
            if not sender.try_send(TrackedItem(self._id, item)):
                failed = True
        if failed:
            raise QueueFull(item)

    def wake(self) -> None:
        """Wake every receiver sent to since the last successful wake.

        All receivers are tried; the last error met is raised afterwards.
        """
        error: Optional[OSError] = None
        for sender in self._senders:
            try:
                sender.wake()
            except OSError as exc:
                error = exc
        if error is not None:
            raise error