"""
Bounded event queue between an update source and the dispatch loop.
"""

import asyncio
import logging
from typing import Optional

from .events import InboundEvent

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class UpdateQueue:
    """
    Fixed-capacity FIFO of inbound events.

    Producers use offer(), which never blocks and reports whether the event
    was accepted. The single consumer awaits get(), which returns None once
    the queue has been closed and drained.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self.capacity = capacity
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        # Separate flag so close() works even when the queue is full
        self._closed = asyncio.Event()

    def __len__(self) -> int:
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def offer(self, event: InboundEvent) -> bool:
        """Enqueue without waiting. Returns False if the queue is full or closed."""
        if self.closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    async def get(self) -> Optional[InboundEvent]:
        """Wait for the next event. Returns None after close() once drained."""
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self.closed:
            return None

        getter = asyncio.ensure_future(self._queue.get())
        closer = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({getter, closer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closer.cancel()
            if not getter.done():
                getter.cancel()

        if getter.done() and not getter.cancelled():
            return getter.result()
        return None

    def close(self) -> None:
        """End the sequence. Events already queued are still delivered."""
        if not self.closed:
            logger.debug(f"Update queue closed with {len(self)} pending events")
        self._closed.set()
