import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable

from idlink.domain.shared.event import Event
from idlink.domain.shared.port.event_bus import EventBus

logger = logging.getLogger(__name__)

EventHandlerFunc = Callable[[Event], Awaitable[None]]


class InMemoryEventBus(EventBus):
    """Delivers events to in-process subscribers.

    Publishing is fire-and-forget for the publisher: a failing subscriber is
    logged and does not fail the publish.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type[Event], list[EventHandlerFunc]] = defaultdict(list)

    def subscribe(self, event_type: type[Event], handler: EventHandlerFunc) -> None:
        self._subscribers[event_type].append(handler)

    async def publish(self, event: Event) -> None:
        event_type = type(event)
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug("No handlers for event %s", event_type.__name__)
            return

        logger.info("Publishing event %s to %d handlers", event_type.__name__, len(handlers))

        results = await asyncio.gather(*[h(event) for h in handlers], return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(
                    "Event handler %s failed for %s: %s",
                    getattr(handler, "__name__", repr(handler)),
                    event_type.__name__,
                    result,
                    exc_info=result,
                )
