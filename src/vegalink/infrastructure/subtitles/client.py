"""Subtitle lookup via a Stremio subtitles addon (OpenSubtitles v3 by default).

Stremio subtitle addons answer ``GET /subtitles/{type}/{id}.json`` with
``{"subtitles": [{"id": ..., "url": ..., "lang": ...}, ...]}`` where
series ids carry ``:season:episode``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from vegalink.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_TTL_SUBTITLES = 21_600  # 6 hours


class StremioSubtitlesClient:
    """Implements ``SubtitleLookupPort`` against a Stremio subtitles addon."""

    def __init__(
        self,
        *,
        base_url: str,
        http_client: httpx.AsyncClient,
        cache: CachePort | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_client
        self._cache = cache

    async def get_subtitles(
        self,
        imdb_id: str,
        content_type: str,
        season: int | None = None,
        episode: int | None = None,
    ) -> list[dict[str, str]]:
        stremio_id = imdb_id
        if content_type == "series" and season is not None and episode is not None:
            stremio_id = f"{imdb_id}:{season}:{episode}"

        cache_key = f"subtitles:{content_type}:{stremio_id}"
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return cached

        url = f"{self._base_url}/subtitles/{content_type}/{stremio_id}.json"
        try:
            resp = await self._http.get(url)
            resp.raise_for_status()
            data: Any = resp.json()
        except (httpx.HTTPError, ValueError):
            log.warning("subtitles_lookup_failed", url=url, exc_info=True)
            return []

        raw = data.get("subtitles") if isinstance(data, dict) else None
        subtitles = [
            {
                "id": str(s.get("id") or f"{stremio_id}-sub-{index}"),
                "url": str(s["url"]),
                "lang": str(s.get("lang") or "eng"),
            }
            for index, s in enumerate(raw or [])
            if isinstance(s, dict) and s.get("url")
        ]
        log.debug("subtitles_found", id=stremio_id, count=len(subtitles))

        if self._cache is not None and subtitles:
            await self._cache.set(cache_key, subtitles, ttl=_TTL_SUBTITLES)
        return subtitles
