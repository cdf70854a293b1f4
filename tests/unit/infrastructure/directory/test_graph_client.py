"""Tests for GraphDirectoryClient using httpx.MockTransport."""

import httpx
import pytest

from idlink.config import GraphConfig
from idlink.domain.shared.error import DirectoryLookupError
from idlink.infrastructure.directory.graph import GraphDirectoryClient

USER = {
    "id": "aad-1",
    "displayName": "Pat Guest",
    "userPrincipalName": "pat#EXT#@contoso.onmicrosoft.com",
    "userType": "Guest",
    "mail": "pat@example.com",
}


def _make_config() -> GraphConfig:
    return GraphConfig(tenant_id="tenant", client_id="client", client_secret="secret")


def _make_client(
    routes: dict[str, httpx.Response], calls: list[httpx.Request]
) -> GraphDirectoryClient:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.url.path.endswith("/oauth2/v2.0/token"):
            return httpx.Response(200, json={"access_token": "app-token", "expires_in": 3600})
        for suffix, response in routes.items():
            if request.url.path.endswith(suffix):
                # Fresh response per call; the same route may be hit more than once
                return httpx.Response(
                    response.status_code, content=response.content, headers=response.headers
                )
        return httpx.Response(404)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GraphDirectoryClient(config=_make_config(), http_client=http)


class TestGetUserById:
    @pytest.mark.asyncio
    async def test_maps_graph_fields(self):
        calls: list[httpx.Request] = []
        client = _make_client({"/users/aad-1": httpx.Response(200, json=USER)}, calls)

        user = await client.get_user_by_id("aad-1")

        assert user.user_type == "Guest"
        assert user.is_guest
        assert user.display_name == "Pat Guest"
        assert user.user_principal_name == "pat#EXT#@contoso.onmicrosoft.com"
        lookup = calls[-1]
        assert lookup.headers["Authorization"] == "Bearer app-token"
        assert "userType" in lookup.url.params["$select"]

    @pytest.mark.asyncio
    async def test_token_is_reused(self):
        calls: list[httpx.Request] = []
        client = _make_client({"/users/aad-1": httpx.Response(200, json=USER)}, calls)

        await client.get_user_by_id("aad-1")
        await client.get_user_by_id("aad-1")

        token_calls = [c for c in calls if c.url.path.endswith("/token")]
        assert len(token_calls) == 1

    @pytest.mark.asyncio
    async def test_unknown_user_raises(self):
        client = _make_client({}, [])

        with pytest.raises(DirectoryLookupError) as exc_info:
            await client.get_user_by_id("ghost")

        assert exc_info.value.code == "directory_user_not_found"

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        client = _make_client({"/users/aad-1": httpx.Response(500, text="oops")}, [])

        with pytest.raises(DirectoryLookupError):
            await client.get_user_by_id("aad-1")

    @pytest.mark.asyncio
    async def test_token_failure_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "invalid_client"})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = GraphDirectoryClient(config=_make_config(), http_client=http)

        with pytest.raises(DirectoryLookupError):
            await client.get_user_by_id("aad-1")

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = GraphDirectoryClient(config=_make_config(), http_client=http)

        with pytest.raises(DirectoryLookupError):
            await client.get_user_by_id("aad-1")


class TestGetUserAndManager:
    @pytest.mark.asyncio
    async def test_includes_manager(self):
        manager = {"id": "boss", "displayName": "The Boss", "userType": "Member"}
        client = _make_client(
            {
                "/users/aad-1/manager": httpx.Response(200, json=manager),
                "/users/aad-1": httpx.Response(200, json=USER),
            },
            [],
        )

        user = await client.get_user_and_manager_by_id("aad-1")

        assert user.manager is not None
        assert user.manager.id == "boss"

    @pytest.mark.asyncio
    async def test_no_manager(self):
        client = _make_client({"/users/aad-1": httpx.Response(200, json=USER)}, [])

        user = await client.get_user_and_manager_by_id("aad-1")

        assert user.manager is None
