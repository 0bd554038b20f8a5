"""TMDB API client: async httpx implementation with caching."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from vegalink.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_BASE_URL = "https://api.themoviedb.org/3"

# Cache TTL (seconds)
_TTL_FIND = 86_400  # 24 hours

# Stremio content type -> /find result list
_RESULT_KEYS = {"movie": "movie_results", "series": "tv_results"}


class HttpxTmdbClient:
    """Async TMDB client using httpx + CachePort.

    Implements ``CatalogIdResolverPort`` from domain.ports.provider.
    """

    def __init__(
        self,
        *,
        api_key: str,
        http_client: httpx.AsyncClient,
        cache: CachePort,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._cache = cache

    async def _get(self, path: str, **extra: Any) -> dict[str, Any] | None:
        """GET request with error handling. Returns parsed JSON or None."""
        url = f"{_BASE_URL}{path}"
        try:
            resp = await self._http.get(url, params={"api_key": self._api_key, **extra})
            if resp.status_code == 401:
                log.error("tmdb_api_key_invalid", status=401)
                return None
            if resp.status_code == 404:
                log.debug("tmdb_resource_not_found", path=path)
                return None
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError:
            log.warning("tmdb_http_error", path=path, exc_info=True)
            return None
        except httpx.HTTPError:
            log.warning("tmdb_network_error", path=path, exc_info=True)
            return None

    async def imdb_to_tmdb(self, imdb_id: str, content_type: str) -> str | None:
        """Map an IMDb id to the TMDB id of the matching movie or TV show."""
        result_key = _RESULT_KEYS.get(content_type, "movie_results")
        cache_key = f"tmdb:find:{result_key}:{imdb_id}"
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        data = await self._get(f"/find/{imdb_id}", external_source="imdb_id")
        if data is None:
            return None

        results = data.get(result_key) or []
        if not results or not results[0].get("id"):
            log.debug("tmdb_no_match", imdb_id=imdb_id, content_type=content_type)
            return None

        tmdb_id = str(results[0]["id"])
        await self._cache.set(cache_key, tmdb_id, ttl=_TTL_FIND)
        return tmdb_id
