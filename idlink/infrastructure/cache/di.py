from dishka import provide

from idlink.config import Config
from idlink.domain.link.port.cache import LinkCache
from idlink.infrastructure.cache.memory import InMemoryLinkCache
from idlink.util.di.base import Provider
from idlink.util.di.scope import Scope


class CacheProvider(Provider):
    @provide(scope=Scope.APP)
    def get_link_cache(self, config: Config) -> LinkCache:
        return InMemoryLinkCache(ttl_seconds=config.cache.link_ttl_seconds)
