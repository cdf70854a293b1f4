import httpx
from dishka import provide

from idlink.config import Config
from idlink.domain.link.port.directory import DirectoryClient
from idlink.infrastructure.directory.graph import GraphDirectoryClient
from idlink.util.di.base import Provider
from idlink.util.di.scope import Scope


class DirectoryProvider(Provider):
    """Provides the Graph directory client.

    Always constructed; consumers check config.graph.is_configured before
    relying on it.
    """

    @provide(scope=Scope.APP)
    def get_directory_client(
        self, config: Config, http_client: httpx.AsyncClient
    ) -> DirectoryClient:
        return GraphDirectoryClient(config=config.graph, http_client=http_client)
