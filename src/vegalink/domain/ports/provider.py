"""Ports for the collaborators around the resolution pipeline."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from vegalink.domain.entities.streams import StreamCandidate, StreamQuery


@runtime_checkable
class StreamProviderPort(Protocol):
    """A content site that yields raw stream candidates for a query."""

    @property
    def name(self) -> str:
        """Human-readable provider name, used as the display label."""
        ...

    @property
    def value(self) -> str:
        """Stable key used in user configuration and subtitle ids."""
        ...

    async def get_streams(
        self,
        query: StreamQuery,
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate | Mapping[str, Any]]:
        """Return candidates (or candidate-shaped mappings) for *query*."""
        ...


@runtime_checkable
class CatalogIdResolverPort(Protocol):
    """Maps an external catalog id (IMDb) to host-site identifiers."""

    async def imdb_to_tmdb(self, imdb_id: str, content_type: str) -> str | None:
        """Return the TMDB id for *imdb_id*, or None if unknown."""
        ...


@runtime_checkable
class SubtitleLookupPort(Protocol):
    """Looks up external subtitles for a title."""

    async def get_subtitles(
        self,
        imdb_id: str,
        content_type: str,
        season: int | None = None,
        episode: int | None = None,
    ) -> list[dict[str, str]]:
        """Return ``{"id": ..., "url": ..., "lang": ...}`` entries."""
        ...
