"""Bounded delivery channel between request handlers and the consumer.

Many request handlers push classified envelopes concurrently; exactly one
long-lived consumer pulls them in order. When the channel is full, producers
wait (this is the only backpressure in the system and it delays the
acknowledgment sent to the provider).

Example:
    >>> channel = CallbackChannel(capacity=100)
    >>> await channel.enqueue(envelope)          # request handler
    >>> async for update in channel.updates():   # consumer task
    ...     handle(update)
    >>> await channel.close()                    # shutdown
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from momo_callbacks.callbacks.models import CallbackEnvelope

logger = logging.getLogger(__name__)

__all__ = [
    "ChannelClosedError",
    "ChannelFullError",
    "CallbackChannel",
    "UpdateStream",
]

DEFAULT_CAPACITY = 100


class ChannelClosedError(Exception):
    """Raised when enqueueing on a closed channel."""


class ChannelFullError(Exception):
    """Raised when an enqueue timeout expires while the channel is full."""


class CallbackChannel:
    """Bounded multi-producer, single-consumer FIFO of callback envelopes.

    Envelopes are delivered in the order their ``enqueue`` calls complete.
    After :meth:`close`, new enqueues fail, envelopes already buffered are
    still handed out, then readers see the end of the stream.

    Attributes:
        capacity: Maximum number of buffered envelopes
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: deque[CallbackEnvelope] = deque()
        self._condition = asyncio.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._closed

    def pending(self) -> int:
        """Number of envelopes waiting for the consumer."""
        return len(self._items)

    def full(self) -> bool:
        return len(self._items) >= self.capacity

    async def enqueue(
        self, envelope: CallbackEnvelope, timeout: float | None = None
    ) -> None:
        """Append an envelope, waiting for free capacity.

        Args:
            envelope: Envelope to deliver
            timeout: Seconds to wait for capacity (None waits indefinitely)

        Raises:
            ChannelClosedError: The channel was closed before or while waiting
            ChannelFullError: ``timeout`` expired with the channel still full
        """
        async with self._condition:
            try:
                await asyncio.wait_for(
                    self._condition.wait_for(
                        lambda: self._closed or len(self._items) < self.capacity
                    ),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                raise ChannelFullError(
                    f"channel still full after {timeout}s (capacity={self.capacity})"
                ) from None
            if self._closed:
                raise ChannelClosedError("callback channel is closed")
            self._items.append(envelope)
            self._condition.notify_all()

    async def dequeue(self) -> CallbackEnvelope | None:
        """Remove and return the oldest envelope, waiting if none is buffered.

        Returns:
            The next envelope, or None once the channel is closed and empty
        """
        async with self._condition:
            await self._condition.wait_for(lambda: self._closed or bool(self._items))
            if not self._items:
                return None
            envelope = self._items.popleft()
            self._condition.notify_all()
            return envelope

    async def close(self) -> None:
        """Stop accepting envelopes and wake every waiter.

        Idempotent.
        """
        async with self._condition:
            if self._closed:
                return
            self._closed = True
            self._condition.notify_all()
        logger.info(f"Callback channel closed with {len(self._items)} pending envelopes")

    def updates(self) -> UpdateStream:
        """Return an async iterator over delivered envelopes."""
        return UpdateStream(self)


class UpdateStream:
    """Sequential async iterator draining a :class:`CallbackChannel`.

    Effectively infinite while the channel is open; finite once it is closed.
    A new stream may be created over the same channel after a previous one
    stopped (for example when a consumer task is restarted).
    """

    def __init__(self, channel: CallbackChannel) -> None:
        self._channel = channel

    def __aiter__(self) -> UpdateStream:
        return self

    async def __anext__(self) -> CallbackEnvelope:
        envelope = await self._channel.dequeue()
        if envelope is None:
            raise StopAsyncIteration
        return envelope
