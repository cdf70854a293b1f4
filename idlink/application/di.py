from dishka import AsyncContainer, from_context, make_async_container

from idlink.config import Config
from idlink.domain.link.util.di import LinkProvider
from idlink.infrastructure.cache.di import CacheProvider
from idlink.infrastructure.directory.di import DirectoryProvider
from idlink.infrastructure.event.di import EventProvider
from idlink.infrastructure.http.di import HttpProvider
from idlink.infrastructure.mail.di import MailProvider
from idlink.infrastructure.persistence import PersistenceProvider
from idlink.util.di.base import Provider
from idlink.util.di.scope import Scope


class ConfigProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        HttpProvider(),
        DirectoryProvider(),
        CacheProvider(),
        EventProvider(),
        MailProvider(),
        LinkProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
