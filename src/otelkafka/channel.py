"""
Closable FIFO channel for hand-off between threads.

The Kafka client interfaces wrapped by this package exchange messages
through channels: the producer accepts messages on an input channel and
reports outcomes on success and error channels, consumers deliver
messages on a messages channel. :class:`Channel` is the thread-safe
primitive those interfaces are expressed with.

Capacity modes:
    - ``None``: unbounded, ``put`` never waits
    - ``0``: rendezvous, ``put`` returns once a reader has taken the item
    - ``n > 0``: bounded, ``put`` waits while ``n`` items are buffered

Example:
    >>> channel: Channel[int] = Channel()
    >>> channel.put(1)
    >>> channel.close()
    >>> list(channel)
    [1]
"""

from __future__ import annotations

import queue
import threading
import time
from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

from otelkafka.exceptions import ChannelClosed

T = TypeVar("T")


class Channel(Generic[T]):
    """
    Thread-safe FIFO channel that can be closed by its writer.

    Readers drain buffered items after close; once the channel is closed and
    empty, ``get`` raises :class:`ChannelClosed` and iteration stops.

    Args:
        capacity: Buffer size. ``None`` for unbounded, ``0`` for rendezvous.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity < 0:
            raise ValueError(f"capacity must be None or >= 0, got {capacity}")
        self._capacity = capacity
        self._items: deque[T] = deque()
        self._cond = threading.Condition()
        self._closed = False
        # Monotonic counters of items ever enqueued/dequeued, used by
        # rendezvous writers to wait until their item was taken.
        self._put_count = 0
        self._taken_count = 0

    @property
    def capacity(self) -> int | None:
        """Configured buffer size."""
        return self._capacity

    @property
    def closed(self) -> bool:
        """True once :meth:`close` has been called."""
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def put(self, item: T) -> None:
        """
        Send an item.

        Blocks while a bounded channel is full, and until a reader has taken
        the item on a rendezvous channel.

        Raises:
            ChannelClosed: If the channel is closed
        """
        with self._cond:
            if self._capacity:
                while len(self._items) >= self._capacity and not self._closed:
                    self._cond.wait()
            if self._closed:
                raise ChannelClosed("send on closed channel")

            self._items.append(item)
            ticket = self._put_count
            self._put_count += 1
            self._cond.notify_all()

            if self._capacity == 0:
                while self._taken_count <= ticket:
                    self._cond.wait()

    def get(self, timeout: float | None = None) -> T:
        """
        Receive the next item.

        Args:
            timeout: Seconds to wait for an item, ``None`` to wait forever

        Returns:
            The oldest buffered item

        Raises:
            ChannelClosed: If the channel is closed and drained
            queue.Empty: If ``timeout`` elapsed with no item available
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while not self._items:
                if self._closed:
                    raise ChannelClosed("receive on closed channel")
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise queue.Empty
                self._cond.wait(remaining)

            item = self._items.popleft()
            self._taken_count += 1
            self._cond.notify_all()
            return item

    def close(self) -> None:
        """
        Close the channel.

        Buffered items stay readable. Closing twice is a programming error.

        Raises:
            ChannelClosed: If the channel is already closed
        """
        with self._cond:
            if self._closed:
                raise ChannelClosed("close of closed channel")
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except ChannelClosed:
                return

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"Channel(capacity={self._capacity!r}, buffered={len(self)}, {state})"


__all__ = ["Channel"]
