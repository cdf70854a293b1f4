"""DI provider for the shared outbound HTTP client."""

from typing import AsyncIterable

import httpx
from dishka import provide

from idlink.util.di.base import Provider
from idlink.util.di.scope import Scope

# HTTP client timeout configuration
_HTTP_TIMEOUT = httpx.Timeout(
    connect=5.0,
    read=10.0,
    write=5.0,
    pool=5.0,
)


class HttpProvider(Provider):
    @provide(scope=Scope.APP)
    async def get_http_client(self) -> AsyncIterable[httpx.AsyncClient]:
        """Shared HTTP client for directory and mail calls (connection pooling)."""
        async with httpx.AsyncClient(timeout=_HTTP_TIMEOUT) as client:
            yield client
