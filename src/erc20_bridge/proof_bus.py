"""
Broadcast channel for acquired registration proofs.

Every published proof reaches the subscribers attached at publish time and
nobody else; there is no replay for late subscribers. Events are not scoped
by token, subscribers filter on `ProofEvent.source` themselves.
"""

import asyncio
import logging

from .exceptions import SubscriptionClosed
from .models import ProofEvent

logger = logging.getLogger(__name__)

# Queued on unsubscribe to wake consumers blocked in get()
_CLOSED = object()


class ProofSubscriber:
    """Receiving end of a ProofBus subscription, iterable with `async for`."""

    def __init__(self, bus: "ProofBus") -> None:
        self._bus = bus
        self._queue: asyncio.Queue[ProofEvent | object] = asyncio.Queue()
        self.active = True

    def _deliver(self, event: ProofEvent) -> None:
        self._queue.put_nowait(event)

    def _close(self) -> None:
        self.active = False
        self._queue.put_nowait(_CLOSED)

    @property
    def pending(self) -> int:
        return self._queue.qsize() - (0 if self.active else 1)

    async def get(self) -> ProofEvent:
        """
        Wait for the next proof.

        Raises:
            SubscriptionClosed: Once every proof received before unsubscribing has been consumed
        """
        event = await self._queue.get()
        if event is _CLOSED:
            # Keep the marker queued so later calls fail the same way
            self._queue.put_nowait(_CLOSED)
            raise SubscriptionClosed("Proof subscriber is unsubscribed")
        return event

    async def next_for(self, address: str) -> ProofEvent:
        """Wait for the next proof of `address`, discarding proofs of other tokens."""
        while True:
            event = await self.get()
            if event.source.lower() == address.lower():
                return event

    def unsubscribe(self) -> None:
        self._bus.unsubscribe(self)

    def __aiter__(self) -> "ProofSubscriber":
        return self

    async def __anext__(self) -> ProofEvent:
        try:
            return await self.get()
        except SubscriptionClosed:
            raise StopAsyncIteration from None

    def __enter__(self) -> "ProofSubscriber":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class ProofBus:
    """Publish/subscribe registry shared by all proof monitors."""

    def __init__(self) -> None:
        self._subscribers: list[ProofSubscriber] = []
        self.published = 0

    def subscribe(self) -> ProofSubscriber:
        subscriber = ProofSubscriber(self)
        self._subscribers.append(subscriber)
        logger.debug(f"Proof subscriber attached ({len(self._subscribers)} active)")
        return subscriber

    def unsubscribe(self, subscriber: ProofSubscriber) -> None:
        if subscriber.active:
            subscriber._close()
        try:
            self._subscribers.remove(subscriber)
        except ValueError:
            return
        logger.debug(f"Proof subscriber detached ({len(self._subscribers)} active)")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: ProofEvent) -> int:
        """
        Deliver `event` to every currently attached subscriber.

        Returns:
            Number of subscribers the event was delivered to
        """
        receivers = list(self._subscribers)
        for subscriber in receivers:
            subscriber._deliver(event)

        self.published += 1
        logger.info(f"Published {event} to {len(receivers)} subscriber(s)")
        return len(receivers)
