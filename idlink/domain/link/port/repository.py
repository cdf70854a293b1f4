"""Repository port for the link domain."""

from abc import abstractmethod
from typing import Protocol

from idlink.domain.link.model.link import Link
from idlink.domain.shared.port import Port


class LinkRepository(Port, Protocol):
    """Persistence for Link aggregates, keyed by GitHub account id.

    Writes are durable when they return: callers fire events and send mail
    describing a write only after it has returned.
    """

    @abstractmethod
    async def get(self, github_id: str) -> Link | None:
        """Get the link for a GitHub account, if any."""
        ...

    @abstractmethod
    async def list_by_aad_id(self, aad_id: str) -> list[Link]:
        """All links for a corporate identity, oldest first."""
        ...

    @abstractmethod
    async def insert(self, link: Link) -> None:
        """Store a new link.

        Raises:
            ConflictError: If a link already exists for link.github_id
            StorageUnavailableError: On any other storage failure
        """
        ...

    @abstractmethod
    async def update(self, link: Link) -> None:
        """Overwrite the existing link for link.github_id.

        created_at and hub_import keep their stored values.

        Raises:
            NotFoundError: If no link exists for link.github_id
            StorageUnavailableError: On any other storage failure
        """
        ...
