"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from vegalink.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from vegalink.application.use_cases import (
        StreamListingUseCase,
        SubtitleListingUseCase,
    )
    from vegalink.domain.ports import (
        CachePort,
        CatalogIdResolverPort,
        SubtitleLookupPort,
    )
    from vegalink.infrastructure.common import HttpFetcher
    from vegalink.infrastructure.host_resolvers import HostResolverRegistry
    from vegalink.infrastructure.providers import ProviderRegistry


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort
    http_client: httpx.AsyncClient
    fetcher: HttpFetcher

    # Resolution pipeline
    host_resolvers: HostResolverRegistry
    providers: ProviderRegistry

    # Optional collaborators
    tmdb_client: CatalogIdResolverPort | None
    subtitle_lookup: SubtitleLookupPort | None

    # Application services
    stream_listing_uc: StreamListingUseCase
    subtitle_listing_uc: SubtitleListingUseCase
