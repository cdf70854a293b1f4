"""In-process link cache with a fixed time-to-live."""

import time
from collections.abc import Callable

from idlink.domain.link.model.link import Link
from idlink.domain.link.port.cache import LinkCache


class InMemoryLinkCache(LinkCache):
    """Caches link lookups, including negative ones, for `ttl_seconds`.

    Entries are copies so callers mutating a returned Link never change the
    cached value. Expired entries are swept on write so keys that are never
    read again do not accumulate.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Link | None]] = {}
        self._next_sweep = 0.0

    async def get(self, github_id: str) -> tuple[bool, Link | None]:
        entry = self._entries.get(github_id)
        if entry is None:
            return False, None
        expires_at, link = entry
        if self._clock() >= expires_at:
            del self._entries[github_id]
            return False, None
        return True, link.model_copy() if link is not None else None

    async def put(self, github_id: str, link: Link | None) -> None:
        if self._ttl <= 0:
            return
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)
        stored = link.model_copy() if link is not None else None
        self._entries[github_id] = (now + self._ttl, stored)

    async def invalidate(self, github_id: str) -> None:
        self._entries.pop(github_id, None)

    def _sweep(self, now: float) -> None:
        """Drop every expired entry. Runs at most once per TTL period."""
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        self._next_sweep = now + self._ttl

    def __len__(self) -> int:
        return len(self._entries)
