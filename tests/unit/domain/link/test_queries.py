"""Tests for link page, reconnect and my-link queries, and LinkLookup."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from idlink.config import AuthenticationConfig
from idlink.domain.link.model.link import Link
from idlink.domain.link.model.value import (
    CorporateIdentity,
    DirectoryUser,
    GitHubIdentity,
    GuestDecision,
    GuestOutcome,
    LinkContext,
)
from idlink.domain.link.query.check_reconnect import (
    CheckReconnect,
    CheckReconnectHandler,
    ReconnectStatus,
)
from idlink.domain.link.query.get_link import GetMyLink, GetMyLinkHandler
from idlink.domain.link.query.get_link_page import (
    GetLinkPage,
    GetLinkPageHandler,
    LinkPageState,
)
from idlink.domain.link.service.lookup import LinkLookup
from idlink.domain.shared.error import (
    AuthorizationError,
    DirectoryLookupError,
    InvalidStateError,
    NotFoundError,
)


def _make_context(*, github: bool = True, corporate: bool = True) -> LinkContext:
    return LinkContext(
        github=GitHubIdentity(id="1001", login="octocat") if github else None,
        corporate=(
            CorporateIdentity(id="aad-1", upn="octo@contoso.com") if corporate else None
        ),
    )


def _make_link(*, token: str | None = "gho_x", hub_import: bool = False) -> Link:
    return Link(
        github_id="1001",
        github_login="octocat",
        github_token=token,
        aad_id="aad-1",
        aad_upn="octo@contoso.com",
        hub_import=hub_import,
        created_at=datetime.now(UTC),
    )


def _make_gate(outcome: GuestOutcome = GuestOutcome.ALLOWED) -> AsyncMock:
    gate = AsyncMock()
    gate.evaluate.return_value = GuestDecision(
        aad_id="aad-1",
        outcome=outcome,
        message="not for guests" if outcome is GuestOutcome.BLOCKED else None,
    )
    return gate


def _make_lookup(link: Link | None = None) -> AsyncMock:
    lookup = AsyncMock()
    lookup.find.return_value = link
    lookup.find_by_aad_id.return_value = link
    return lookup


class TestGetLinkPage:
    def _handler(self, context=None, *, link=None, directory=None, gate=None, scheme="aad"):
        return GetLinkPageHandler(
            context=context or _make_context(),
            auth_config=AuthenticationConfig(scheme=scheme),
            guest_gate=gate or _make_gate(),
            lookup=_make_lookup(link),
            directory=directory,
        )

    @pytest.mark.asyncio
    async def test_needs_sign_in_without_both_identities(self):
        page = await self._handler(_make_context(github=False)).run(GetLinkPage())

        assert page.state is LinkPageState.NEEDS_SIGN_IN

    @pytest.mark.asyncio
    async def test_blocked_guest(self):
        page = await self._handler(gate=_make_gate(GuestOutcome.BLOCKED)).run(GetLinkPage())

        assert page.state is LinkPageState.BLOCKED
        assert page.message == "not for guests"

    @pytest.mark.asyncio
    async def test_already_linked(self):
        link = _make_link()

        page = await self._handler(link=link).run(GetLinkPage())

        assert page.state is LinkPageState.ALREADY_LINKED
        assert page.link == link

    @pytest.mark.asyncio
    async def test_user_without_manager_is_service_account_candidate(self):
        directory = AsyncMock()
        directory.get_user_and_manager_by_id.return_value = DirectoryUser(id="aad-1")

        page = await self._handler(directory=directory).run(GetLinkPage())

        assert page.state is LinkPageState.SHOW_LINK_PAGE
        assert page.is_service_account_candidate is True

    @pytest.mark.asyncio
    async def test_user_with_manager_is_not_candidate(self):
        directory = AsyncMock()
        directory.get_user_and_manager_by_id.return_value = DirectoryUser(
            id="aad-1", manager=DirectoryUser(id="boss")
        )

        page = await self._handler(directory=directory).run(GetLinkPage())

        assert page.is_service_account_candidate is False
        assert page.directory_user.manager.id == "boss"

    @pytest.mark.asyncio
    async def test_directory_failure_still_shows_page(self):
        directory = AsyncMock()
        directory.get_user_and_manager_by_id.side_effect = DirectoryLookupError("down")

        page = await self._handler(directory=directory).run(GetLinkPage())

        assert page.state is LinkPageState.SHOW_LINK_PAGE
        assert page.directory_user is None

    @pytest.mark.asyncio
    async def test_github_scheme_skips_directory(self):
        directory = AsyncMock()

        page = await self._handler(directory=directory, scheme="github").run(GetLinkPage())

        assert page.state is LinkPageState.SHOW_LINK_PAGE
        directory.get_user_and_manager_by_id.assert_not_called()


class TestCheckReconnect:
    @pytest.mark.asyncio
    async def test_only_for_aad_scheme(self):
        handler = CheckReconnectHandler(
            context=_make_context(),
            auth_config=AuthenticationConfig(scheme="github"),
            lookup=_make_lookup(),
        )

        with pytest.raises(InvalidStateError):
            await handler.run(CheckReconnect())

    @pytest.mark.asyncio
    async def test_reconnected_when_github_present(self):
        handler = CheckReconnectHandler(
            context=_make_context(),
            auth_config=AuthenticationConfig(scheme="aad"),
            lookup=_make_lookup(_make_link(token=None)),
        )

        check = await handler.run(CheckReconnect())

        assert check.status is ReconnectStatus.RECONNECTED

    @pytest.mark.asyncio
    async def test_needs_reconnect_without_token(self):
        handler = CheckReconnectHandler(
            context=_make_context(github=False),
            auth_config=AuthenticationConfig(scheme="aad"),
            lookup=_make_lookup(_make_link(token=None, hub_import=True)),
        )

        check = await handler.run(CheckReconnect())

        assert check.status is ReconnectStatus.NEEDS_RECONNECT
        assert check.expected_login == "octocat"
        assert check.migrated_hub_user is True

    @pytest.mark.asyncio
    async def test_no_link_means_nothing_to_reconnect(self):
        handler = CheckReconnectHandler(
            context=_make_context(github=False),
            auth_config=AuthenticationConfig(scheme="aad"),
            lookup=_make_lookup(None),
        )

        check = await handler.run(CheckReconnect())

        assert check.status is ReconnectStatus.RECONNECTED


class TestGetMyLink:
    @pytest.mark.asyncio
    async def test_returns_view_without_token(self):
        handler = GetMyLinkHandler(context=_make_context(), lookup=_make_lookup(_make_link()))

        view = await handler.run(GetMyLink())

        assert view.github_id == "1001"
        assert not hasattr(view, "github_token")

    @pytest.mark.asyncio
    async def test_not_linked(self):
        handler = GetMyLinkHandler(context=_make_context(), lookup=_make_lookup(None))

        with pytest.raises(NotFoundError):
            await handler.run(GetMyLink())

    @pytest.mark.asyncio
    async def test_requires_github_identity(self):
        handler = GetMyLinkHandler(context=_make_context(github=False), lookup=_make_lookup())

        with pytest.raises(AuthorizationError):
            await handler.run(GetMyLink())


class TestLinkLookup:
    @pytest.mark.asyncio
    async def test_cache_hit_skips_repository(self):
        repo, cache = AsyncMock(), AsyncMock()
        link = _make_link()
        cache.get.return_value = (True, link)

        assert await LinkLookup(_repo=repo, _cache=cache).find("1001") == link
        repo.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_miss_reads_and_fills(self):
        repo, cache = AsyncMock(), AsyncMock()
        cache.get.return_value = (False, None)
        repo.get.return_value = None

        assert await LinkLookup(_repo=repo, _cache=cache).find("1001") is None
        repo.get.assert_awaited_once_with("1001")
        cache.put.assert_awaited_once_with("1001", None)

    @pytest.mark.asyncio
    async def test_find_by_aad_id_returns_oldest(self):
        repo, cache = AsyncMock(), AsyncMock()
        first, second = _make_link(), _make_link()
        repo.list_by_aad_id.return_value = [first, second]

        assert await LinkLookup(_repo=repo, _cache=cache).find_by_aad_id("aad-1") is first
