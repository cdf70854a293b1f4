"""SQL repository implementation for the link domain."""

import logging

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from idlink.domain.link.model.link import Link
from idlink.domain.link.port.repository import LinkRepository
from idlink.domain.shared.error import ConflictError, NotFoundError, StorageUnavailableError
from idlink.infrastructure.persistence.tables import links_table

logger = logging.getLogger(__name__)

# Columns a rewrite of an existing link must not touch. hub_import records
# provenance and is only ever set when the link is first stored.
_IMMUTABLE_COLUMNS = ("github_id", "created_at", "hub_import")


def _row_to_link(row: dict) -> Link:
    """Convert a database row to a Link model."""
    return Link(
        github_id=row["github_id"],
        github_login=row["github_login"],
        github_avatar=row["github_avatar"],
        github_token=row["github_token"],
        aad_id=row["aad_id"],
        aad_upn=row["aad_upn"],
        aad_name=row["aad_name"],
        is_service_account=bool(row["is_service_account"]),
        service_account_mail=row["service_account_mail"],
        hub_import=bool(row["hub_import"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _link_to_dict(link: Link) -> dict:
    """Convert a Link model to a database row dict."""
    return {
        "github_id": link.github_id,
        "github_login": link.github_login,
        "github_avatar": link.github_avatar,
        "github_token": link.github_token,
        "aad_id": link.aad_id,
        "aad_upn": link.aad_upn,
        "aad_name": link.aad_name,
        "is_service_account": link.is_service_account,
        "service_account_mail": link.service_account_mail,
        "hub_import": link.hub_import,
        "created_at": link.created_at,
        "updated_at": link.updated_at,
    }


class SqlLinkRepository(LinkRepository):
    """SQLAlchemy implementation of LinkRepository.

    Writes commit before returning so that events and mail describing a
    write never go out for a write that could still roll back.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, github_id: str) -> Link | None:
        stmt = select(links_table).where(links_table.c.github_id == github_id)
        result = await self._execute(stmt)
        row = result.mappings().first()
        return _row_to_link(dict(row)) if row else None

    async def list_by_aad_id(self, aad_id: str) -> list[Link]:
        stmt = (
            select(links_table)
            .where(links_table.c.aad_id == aad_id)
            .order_by(links_table.c.created_at)
        )
        result = await self._execute(stmt)
        return [_row_to_link(dict(row)) for row in result.mappings().all()]

    async def insert(self, link: Link) -> None:
        stmt = insert(links_table).values(**_link_to_dict(link))
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            # Only a taken primary key is a conflict; other constraint failures are not
            if await self.get(link.github_id) is None:
                logger.error(
                    "Link insert violated a constraint: github_id=%s, error=%s",
                    link.github_id,
                    e.orig,
                )
                raise StorageUnavailableError(
                    f"Link insert failed: {e.orig}", code="storage_error"
                ) from e
            raise ConflictError(
                f"A link already exists for GitHub account {link.github_id}",
                code="link_exists",
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Link insert failed: github_id=%s", link.github_id)
            raise StorageUnavailableError(f"Link insert failed: {e}", code="storage_error") from e

    async def update(self, link: Link) -> None:
        values = _link_to_dict(link)
        for column in _IMMUTABLE_COLUMNS:
            values.pop(column)
        stmt = (
            update(links_table).where(links_table.c.github_id == link.github_id).values(**values)
        )
        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFoundError(
                    f"No link exists for GitHub account {link.github_id}", code="no_link"
                )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Link update failed: github_id=%s", link.github_id)
            raise StorageUnavailableError(f"Link update failed: {e}", code="storage_error") from e

    async def _execute(self, stmt):
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.exception("Link query failed")
            raise StorageUnavailableError(f"Link query failed: {e}", code="storage_error") from e
