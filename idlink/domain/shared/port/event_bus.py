from abc import abstractmethod
from typing import Protocol

from idlink.domain.shared.event import Event
from idlink.domain.shared.port import Port


class EventBus(Port, Protocol):
    """Fire-and-forget publication of domain events."""

    @abstractmethod
    async def publish(self, event: Event) -> None: ...
