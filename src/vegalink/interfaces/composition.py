"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from vegalink.application.use_cases import StreamListingUseCase, SubtitleListingUseCase
from vegalink.infrastructure.cache import DiskcacheAdapter
from vegalink.infrastructure.common import HttpFetcher
from vegalink.infrastructure.config.schema import AppConfig
from vegalink.infrastructure.host_resolvers import (
    GDFlixResolver,
    GoFileResolver,
    HostResolverRegistry,
    HubCloudResolver,
    OxxFileResolver,
)
from vegalink.infrastructure.providers import ProviderRegistry
from vegalink.infrastructure.stremio import aggregate_streams
from vegalink.infrastructure.subtitles import StremioSubtitlesClient
from vegalink.infrastructure.tmdb import HttpxTmdbClient
from vegalink.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_resolver_registry(fetcher: HttpFetcher, config: AppConfig) -> HostResolverRegistry:
    """Wire every host resolver around one shared fetcher."""
    oxxfile = OxxFileResolver(fetcher)
    return HostResolverRegistry(
        resolvers=[
            GDFlixResolver(fetcher),
            GoFileResolver(fetcher),
            HubCloudResolver(fetcher, oxxfile=oxxfile),
            oxxfile,
        ],
        resolve_timeout=config.addon.resolver_timeout_seconds,
        max_concurrent=config.addon.max_concurrent_resolvers,
    )


async def _release(http_client: httpx.AsyncClient | None, cache: DiskcacheAdapter) -> None:
    if http_client is not None:
        await http_client.aclose()
        log.info("http_client_closed")

    await cache.aclose()
    log.info("cache_closed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared resources on startup, release them on shutdown."""
    state = cast(AppState, app.state)
    config = state.config

    # 1) Cache (catalog-id and subtitle lookups)
    cache = DiskcacheAdapter(
        directory=config.cache_dir,
        ttl_seconds=config.cache_ttl_seconds,
    )
    await cache.__aenter__()
    state.cache = cache
    log.info("cache_initialized", directory=str(config.cache_dir))

    http_client: httpx.AsyncClient | None = None
    try:
        # 2) HTTP client + fetch capability
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.http.timeout_seconds),
            headers=config.http.default_headers(),
            follow_redirects=config.http.follow_redirects,
        )
        state.http_client = http_client
        state.fetcher = HttpFetcher(http_client, config.http)
        log.info("http_client_initialized", timeout=config.http.timeout_seconds)

        # 3) Host resolvers
        state.host_resolvers = build_resolver_registry(state.fetcher, config)
        log.info(
            "host_resolver_registry_initialized",
            hosts=state.host_resolvers.supported_hosts,
        )

        # 4) Providers
        state.providers = ProviderRegistry(
            state.host_resolvers,
            max_concurrent=config.addon.max_concurrent_providers,
            provider_timeout=config.addon.provider_timeout_seconds,
            default_enabled=config.addon.enabled_providers,
        )
        if config.addon.provider_dir is not None:
            state.providers.discover(config.addon.provider_dir)
        log.info("providers_initialized", count=len(state.providers))

        # 5) Catalog-id resolution (optional, requires a TMDB API key)
        if config.tmdb_api_key:
            state.tmdb_client = HttpxTmdbClient(
                api_key=config.tmdb_api_key,
                http_client=state.http_client,
                cache=state.cache,
            )
            log.info("tmdb_client_initialized")
        else:
            state.tmdb_client = None
            log.info("tmdb_client_disabled", reason="no API key, IMDb ids only")

        # 6) Subtitle lookup (optional)
        if config.addon.subtitles_url:
            state.subtitle_lookup = StremioSubtitlesClient(
                base_url=config.addon.subtitles_url,
                http_client=state.http_client,
                cache=state.cache,
            )
        else:
            state.subtitle_lookup = None

        # 7) Use cases
        state.stream_listing_uc = StreamListingUseCase(
            providers=state.providers,
            aggregate_fn=aggregate_streams,
            catalog_ids=state.tmdb_client,
            default_label=config.addon.default_provider_label,
        )
        state.subtitle_listing_uc = SubtitleListingUseCase(lookup=state.subtitle_lookup)

        log.info("app_startup_complete")
    except Exception:
        log.exception("app_startup_failed")
        await _release(http_client, cache)
        raise

    try:
        yield
    finally:
        await _release(http_client, cache)
        log.info("app_shutdown_complete")
