"""Tests for SqlLinkRepository against in-memory SQLite."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from idlink.domain.link.model.link import Link
from idlink.domain.link.model.value import (
    CorporateIdentity,
    GitHubIdentity,
    LinkContext,
    LinkOutcome,
    LinkRequest,
)
from idlink.domain.link.service.lifecycle import LinkLifecycle
from idlink.domain.shared.error import ConflictError, NotFoundError, StorageUnavailableError
from idlink.infrastructure.persistence.repository.link import SqlLinkRepository
from idlink.infrastructure.persistence.tables import metadata


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


def _make_link(
    github_id: str = "1001",
    *,
    aad_id: str = "aad-1",
    aad_upn: str = "octo@contoso.com",
    created_at: datetime | None = None,
    hub_import: bool = False,
) -> Link:
    return Link(
        github_id=github_id,
        github_login=f"user{github_id}",
        github_token="gho_x",
        aad_id=aad_id,
        aad_upn=aad_upn,
        aad_name="Octo Cat",
        hub_import=hub_import,
        created_at=created_at or datetime.now(UTC),
    )


class TestInsertAndGet:
    @pytest.mark.asyncio
    async def test_insert_then_get(self, session: AsyncSession):
        repo = SqlLinkRepository(session)

        await repo.insert(_make_link())
        link = await repo.get("1001")

        assert link is not None
        assert link.github_login == "user1001"
        assert link.aad_upn == "octo@contoso.com"
        assert link.is_service_account is False
        assert link.hub_import is False

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, session: AsyncSession):
        assert await SqlLinkRepository(session).get("nope") is None

    @pytest.mark.asyncio
    async def test_duplicate_insert_is_conflict(self, session: AsyncSession):
        repo = SqlLinkRepository(session)
        await repo.insert(_make_link())

        with pytest.raises(ConflictError) as exc_info:
            await repo.insert(_make_link(aad_id="aad-2"))

        assert exc_info.value.code == "link_exists"
        # The first record is untouched and the session is still usable
        link = await repo.get("1001")
        assert link is not None
        assert link.aad_id == "aad-1"

    @pytest.mark.asyncio
    async def test_non_key_constraint_failure_is_not_conflict(self, session: AsyncSession):
        repo = SqlLinkRepository(session)
        # Bypass model validation to hit the NOT NULL constraint on aad_id
        broken = Link.model_construct(
            github_id="1001", github_login="octocat", aad_id=None, created_at=datetime.now(UTC)
        )

        with pytest.raises(StorageUnavailableError) as exc_info:
            await repo.insert(broken)

        assert exc_info.value.code == "storage_error"
        assert await repo.get("1001") is None

    @pytest.mark.asyncio
    async def test_service_account_fields_persist(self, session: AsyncSession):
        repo = SqlLinkRepository(session)
        link = _make_link().model_copy(
            update={"is_service_account": True, "service_account_mail": "ops@example.com"}
        )

        await repo.insert(link)
        stored = await repo.get("1001")

        assert stored.is_service_account is True
        assert stored.service_account_mail == "ops@example.com"


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_overwrites_but_keeps_created_at(self, session: AsyncSession):
        repo = SqlLinkRepository(session)
        original = _make_link(created_at=datetime(2020, 1, 1, tzinfo=UTC))
        await repo.insert(original)

        changed = _make_link(aad_id="aad-2", aad_upn="new@contoso.com")
        changed.touch()
        await repo.update(changed)
        stored = await repo.get("1001")

        assert stored.aad_id == "aad-2"
        assert stored.aad_upn == "new@contoso.com"
        assert stored.updated_at is not None
        assert stored.created_at.year == 2020

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(self, session: AsyncSession):
        with pytest.raises(NotFoundError):
            await SqlLinkRepository(session).update(_make_link())

    @pytest.mark.asyncio
    async def test_insert_conflict_then_update_recovers(self, session: AsyncSession):
        repo = SqlLinkRepository(session)
        await repo.insert(_make_link())
        retry = _make_link(aad_upn="again@contoso.com")

        with pytest.raises(ConflictError):
            await repo.insert(retry)
        await repo.update(retry)

        stored = await repo.get("1001")
        assert stored.aad_upn == "again@contoso.com"

    @pytest.mark.asyncio
    async def test_update_keeps_hub_import(self, session: AsyncSession):
        repo = SqlLinkRepository(session)
        await repo.insert(_make_link(hub_import=True))

        await repo.update(_make_link(aad_upn="again@contoso.com"))

        stored = await repo.get("1001")
        assert stored.aad_upn == "again@contoso.com"
        assert stored.hub_import is True

    @pytest.mark.asyncio
    async def test_create_recovery_keeps_hub_import(self, session: AsyncSession):
        repo = SqlLinkRepository(session)
        await repo.insert(_make_link(hub_import=True))
        lifecycle = LinkLifecycle(
            _repo=repo,
            _cache=AsyncMock(),
            _event_bus=AsyncMock(),
            _mailer=MagicMock(),
            _dispatcher=MagicMock(),
        )
        context = LinkContext(
            github=GitHubIdentity(id="1001", login="user1001", access_token="gho_y"),
            corporate=CorporateIdentity(id="aad-2", upn="new@contoso.com"),
        )

        creation = await lifecycle.create(context, LinkRequest())

        assert creation.outcome is LinkOutcome.RECOVERED_VIA_UPDATE
        stored = await repo.get("1001")
        assert stored.aad_id == "aad-2"
        assert stored.hub_import is True


class TestListByAadId:
    @pytest.mark.asyncio
    async def test_oldest_first(self, session: AsyncSession):
        repo = SqlLinkRepository(session)
        now = datetime.now(UTC)
        await repo.insert(_make_link("2", created_at=now))
        await repo.insert(_make_link("1", created_at=now - timedelta(days=1)))
        await repo.insert(_make_link("3", aad_id="other"))

        links = await repo.list_by_aad_id("aad-1")

        assert [link.github_id for link in links] == ["1", "2"]
