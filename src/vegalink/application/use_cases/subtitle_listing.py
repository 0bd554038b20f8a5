"""Stremio subtitle listing use case."""

from __future__ import annotations

import structlog

from vegalink.domain.entities.streams import StremioStreamRequest
from vegalink.domain.ports.provider import SubtitleLookupPort

log = structlog.get_logger(__name__)


class SubtitleListingUseCase:
    """Looks up external subtitles; a missing or failing lookup gives ``[]``."""

    def __init__(self, *, lookup: SubtitleLookupPort | None = None) -> None:
        self._lookup = lookup

    async def execute(self, request: StremioStreamRequest) -> list[dict[str, str]]:
        if self._lookup is None:
            return []
        try:
            return await self._lookup.get_subtitles(
                request.imdb_id,
                request.content_type,
                request.season,
                request.episode,
            )
        except Exception:
            log.warning("subtitle_listing_failed", imdb_id=request.imdb_id, exc_info=True)
            return []
