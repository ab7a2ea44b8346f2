"""Pull-and-subscribe holder for values that change over time."""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class ChangeFeed(Generic[T]):
    """Holds the latest value and fans changes out to async subscribers.

    Publishing is safe from worker threads: each subscriber's queue is fed
    through its own event loop. Closing the iterator returned by
    ``subscribe`` (``aclose`` or task cancellation) unregisters it.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: set[
            tuple[asyncio.AbstractEventLoop, asyncio.Queue[T]]
        ] = set()

    def current(self) -> T:
        """Return the most recently published value."""
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, value: T) -> None:
        """Store ``value`` and deliver it to every live subscriber."""
        self._value = value
        for loop, queue in list(self._subscribers):
            if loop.is_closed():
                self._subscribers.discard((loop, queue))
                continue
            loop.call_soon_threadsafe(queue.put_nowait, value)

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield the current value, then every subsequent change."""
        entry = (asyncio.get_running_loop(), asyncio.Queue())
        self._subscribers.add(entry)
        _logger.debug("Feed subscriber added: total=%s", len(self._subscribers))
        try:
            yield self._value
            while True:
                yield await entry[1].get()
        finally:
            self._subscribers.discard(entry)
