from abc import abstractmethod
from typing import Protocol

from idlink.domain.link.model.link import Link
from idlink.domain.shared.port import Port


class LinkCache(Port, Protocol):
    """Short-lived cache of link lookups."""

    @abstractmethod
    async def get(self, github_id: str) -> tuple[bool, Link | None]:
        """Return (hit, link). A hit may carry None: "known to be unlinked"."""
        ...

    @abstractmethod
    async def put(self, github_id: str, link: Link | None) -> None: ...

    @abstractmethod
    async def invalidate(self, github_id: str) -> None:
        """Drop any cached view of the link. Complete once this returns."""
        ...
