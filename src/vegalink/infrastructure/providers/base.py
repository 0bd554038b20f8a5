"""Shared base class for providers that delegate to host resolvers.

A provider knows *where* a title is hosted (a list of hosting-page URLs
per catalog id); the host resolvers know *how* to turn those pages into
playable links.  Subclasses only implement ``source_urls()``.

This base class lives in the *infrastructure* layer because it depends
on the resolver registry.  The *domain* layer only knows
``StreamProviderPort``; providers inheriting from ``ResolverProvider``
structurally satisfy that Protocol.
"""

from __future__ import annotations

import asyncio

import structlog

from vegalink.domain.entities.streams import StreamCandidate, StreamQuery
from vegalink.infrastructure.host_resolvers.registry import HostResolverRegistry


class ResolverProvider:
    """Base for providers whose streams come from hosting-page URLs.

    Subclasses **must** set ``name`` and ``value`` and override
    ``source_urls()``.  The registry calls ``bind()`` on registration.
    """

    name: str = ""
    value: str = ""

    def __init__(self) -> None:
        self._resolvers: HostResolverRegistry | None = None
        self._log = structlog.get_logger(self.value or __name__)

    def bind(self, resolvers: HostResolverRegistry) -> None:
        """Attach the shared host resolver registry."""
        self._resolvers = resolvers

    @property
    def resolvers(self) -> HostResolverRegistry:
        if self._resolvers is None:
            raise RuntimeError(f"provider '{self.value}' is not bound to resolvers")
        return self._resolvers

    async def source_urls(
        self,
        query: StreamQuery,
        signal: asyncio.Event | None = None,
    ) -> list[str]:
        """Return hosting-page URLs carrying *query*'s title."""
        raise NotImplementedError

    async def get_streams(
        self,
        query: StreamQuery,
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]:
        urls = await self.source_urls(query, signal)
        if not urls:
            self._log.debug("provider_no_sources", imdb_id=query.imdb_id)
            return []
        candidates = await self.resolvers.resolve_many(urls, signal)
        self._log.debug(
            "provider_resolved",
            imdb_id=query.imdb_id,
            sources=len(urls),
            candidates=len(candidates),
        )
        return candidates
