"""Dependency injection provider for the event bus and background work."""

from dishka import alias, provide

from idlink.domain.link.event import LinkCreated, LinkUpdated
from idlink.domain.shared.port.dispatcher import BackgroundDispatcher
from idlink.domain.shared.port.event_bus import EventBus
from idlink.infrastructure.event.dispatcher import AsyncioBackgroundDispatcher
from idlink.infrastructure.event.memory_bus import InMemoryEventBus
from idlink.infrastructure.event.subscribers import record_link_event
from idlink.util.di.base import Provider
from idlink.util.di.scope import Scope


class EventProvider(Provider):
    @provide(scope=Scope.APP)
    def get_event_bus(self) -> EventBus:
        bus = InMemoryEventBus()
        bus.subscribe(LinkCreated, record_link_event)
        bus.subscribe(LinkUpdated, record_link_event)
        return bus

    # Drained by the app lifespan before the container (and its HTTP client) closes
    dispatcher = provide(AsyncioBackgroundDispatcher, scope=Scope.APP)

    background_dispatcher = alias(source=AsyncioBackgroundDispatcher, provides=BackgroundDispatcher)
