"""Bounded producer/consumer channel for response events.

The transport reader (producer) pushes decoded events through a
ResponseEventSender; the agent runtime (consumer) pulls them from the
paired ResponseStream with ``async for``.

Contract:
    - Events arrive in exactly the order they were sent.
    - ``send()`` waits while the queue is full (backpressure).
    - ``send_error()`` delivers an error that the consumer sees raised from
      ``__anext__``; the stream ends after it.
    - ``close()`` ends the stream once buffered events are drained.
    - ``abort()`` ends the stream with an error without waiting for queue
      space; a producer that is cancelled mid-reply calls it on the way out.
    - ``ResponseStream.aclose()`` releases the consumer side. Buffered events
      are discarded and further sends raise StreamClosedError, which is the
      producer's signal to stop reading from the network.

One producer, one consumer. Reading the same stream from two tasks at once
raises RuntimeError.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Tuple

from responses_client.errors import StreamClosedError
from responses_client.events import ResponseEvent
from responses_constants import RESPONSE_CHANNEL_CAPACITY

logger = logging.getLogger(__name__)

_END_OF_STREAM = object()


@dataclass(frozen=True)
class _ErrorItem:
    error: BaseException


class _Channel:
    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"channel capacity must be positive, got {capacity}")
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        self.producer_closed = False
        self.consumer_closed = False
        # Terminal item that did not fit in a full queue; read once the queue drains.
        self.final_item = None

    def finish(self, item) -> None:
        self.producer_closed = True
        try:
            self.queue.put_nowait(item)
        except asyncio.QueueFull:
            self.final_item = item

    def drain(self) -> int:
        dropped = 0
        while True:
            try:
                self.queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            dropped += 1
        self.final_item = None
        return dropped


class ResponseEventSender:
    """Producer handle. Owned by the task reading the transport."""

    def __init__(self, channel: _Channel):
        self._channel = channel

    @property
    def is_closed(self) -> bool:
        """True once the consumer released the stream."""
        return self._channel.consumer_closed

    async def send(self, event: ResponseEvent) -> None:
        self._check_open()
        await self._channel.queue.put(event)
        if self._channel.consumer_closed:
            self._channel.drain()

    async def send_error(self, error: BaseException) -> None:
        """Deliver ``error`` to the consumer and end the stream."""
        self._check_open()
        self._channel.finish(_ErrorItem(error))

    async def close(self) -> None:
        """End the stream. Safe to call more than once or after the consumer left."""
        if self._channel.producer_closed or self._channel.consumer_closed:
            self._channel.producer_closed = True
            return
        self._channel.finish(_END_OF_STREAM)

    def abort(self, error: BaseException) -> None:
        """End the stream with ``error`` without waiting for queue space.

        No-op once the stream is already closed from either side. Usable
        from ``finally`` blocks of a cancelled producer.
        """
        if self._channel.producer_closed or self._channel.consumer_closed:
            return
        self._channel.finish(_ErrorItem(error))

    def _check_open(self) -> None:
        if self._channel.consumer_closed:
            raise StreamClosedError("response stream was released by the consumer")
        if self._channel.producer_closed:
            raise RuntimeError("cannot send on a closed response stream")


class ResponseStream:
    """Consumer handle: an async iterator of ResponseEvent."""

    def __init__(self, channel: _Channel):
        self._channel = channel
        self._finished = False
        self._reading = False

    def __aiter__(self) -> "ResponseStream":
        return self

    async def __anext__(self) -> ResponseEvent:
        if self._finished:
            raise StopAsyncIteration
        if self._reading:
            raise RuntimeError("ResponseStream is already being read by another task")

        channel = self._channel
        if channel.queue.empty() and channel.final_item is not None:
            item, channel.final_item = channel.final_item, None
        else:
            self._reading = True
            try:
                item = await channel.queue.get()
            finally:
                self._reading = False

        if item is _END_OF_STREAM:
            self._finished = True
            raise StopAsyncIteration
        if isinstance(item, _ErrorItem):
            self._finished = True
            raise item.error
        return item

    async def aclose(self) -> None:
        """Release the stream; buffered events are dropped."""
        if self._channel.consumer_closed:
            return
        self._finished = True
        self._channel.consumer_closed = True
        dropped = self._channel.drain()
        if dropped:
            logger.debug("Response stream released with %d unread events", dropped)

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


def response_channel(capacity: int = RESPONSE_CHANNEL_CAPACITY) -> Tuple[ResponseEventSender, ResponseStream]:
    """Create a connected (sender, stream) pair with a bounded queue."""
    channel = _Channel(capacity)
    return ResponseEventSender(channel), ResponseStream(channel)
