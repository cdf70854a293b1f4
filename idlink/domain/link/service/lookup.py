from idlink.domain.link.model.link import Link
from idlink.domain.link.port.cache import LinkCache
from idlink.domain.link.port.repository import LinkRepository
from idlink.domain.shared.service import Service


class LinkLookup(Service):
    """Read-through access to links by GitHub account id."""

    _repo: LinkRepository
    _cache: LinkCache

    async def find(self, github_id: str) -> Link | None:
        hit, link = await self._cache.get(github_id)
        if hit:
            return link
        link = await self._repo.get(github_id)
        await self._cache.put(github_id, link)
        return link

    async def find_by_aad_id(self, aad_id: str) -> Link | None:
        """Oldest link for a corporate identity. Not cached; used by low-traffic flows."""
        links = await self._repo.list_by_aad_id(aad_id)
        return links[0] if links else None
