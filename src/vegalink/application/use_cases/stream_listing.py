"""Stremio stream listing use case.

IMDb ID -> TMDB id -> concurrent provider fan-out (providers call host
resolvers) -> aggregate -> ranked PlayableStream list.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol

import structlog

from vegalink.domain.entities.streams import (
    PlayableStream,
    StreamCandidate,
    StreamQuery,
    StremioStreamRequest,
)
from vegalink.domain.ports.provider import CatalogIdResolverPort, StreamProviderPort

# ---------------------------------------------------------------------------
# Protocols: what this use case needs from its dependencies.
# Infrastructure components satisfy these via structural subtyping.
# ---------------------------------------------------------------------------


class _ProviderDispatcher(Protocol):
    """Selects and runs providers for one request."""

    def enabled(
        self, user_config: Mapping[str, Any] | None = None
    ) -> list[StreamProviderPort]: ...

    async def dispatch(
        self,
        query: StreamQuery,
        providers: Iterable[StreamProviderPort],
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]: ...


_AggregateFn = Callable[..., list[PlayableStream]]

log = structlog.get_logger(__name__)


class StreamListingUseCase:
    """Resolves every playable stream for one Stremio stream request."""

    def __init__(
        self,
        *,
        providers: _ProviderDispatcher,
        aggregate_fn: _AggregateFn,
        catalog_ids: CatalogIdResolverPort | None = None,
        default_label: str = "Vega",
    ) -> None:
        self._providers = providers
        self._aggregate = aggregate_fn
        self._catalog_ids = catalog_ids
        self._default_label = default_label

    async def _resolve_tmdb_id(self, request: StremioStreamRequest) -> str:
        if self._catalog_ids is None:
            return ""
        try:
            return await self._catalog_ids.imdb_to_tmdb(
                request.imdb_id, request.content_type
            ) or ""
        except Exception:
            log.warning("tmdb_lookup_failed", imdb_id=request.imdb_id, exc_info=True)
            return ""

    async def execute(
        self,
        request: StremioStreamRequest,
        user_config: Mapping[str, Any] | None = None,
    ) -> list[PlayableStream]:
        """Fan the request out to the enabled providers and rank the result.

        Never raises: any failure yields an empty list.  The per-request
        abort signal is set on exit, so resolvers still running (because
        a provider timed out or the client went away) stop fetching.
        """
        signal = asyncio.Event()
        try:
            tmdb_id = await self._resolve_tmdb_id(request)
            if not tmdb_id and not request.imdb_id:
                return []

            providers = self._providers.enabled(user_config)
            if not providers:
                log.warning("stream_no_providers_enabled", imdb_id=request.imdb_id)
                return []

            query = StreamQuery(
                imdb_id=request.imdb_id,
                content_type=request.content_type,
                tmdb_id=tmdb_id,
                season=request.season,
                episode=request.episode,
            )
            candidates = await self._providers.dispatch(query, providers, signal)
            streams = self._aggregate(candidates, self._default_label)

            log.info(
                "stream_listing_done",
                imdb_id=request.imdb_id,
                tmdb_id=tmdb_id or None,
                providers=len(providers),
                candidates=len(candidates),
                streams=len(streams),
            )
            return streams
        except Exception:
            log.exception("stream_listing_failed", imdb_id=request.imdb_id)
            return []
        finally:
            signal.set()
