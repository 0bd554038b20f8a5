"""OxxFile / FilePress resolver.

Download pages list their files as buttons or plain anchors; metadata is
guessed per button and completed from the page title and card body.
"""

from __future__ import annotations

import asyncio
from urllib.parse import urljoin

import structlog

from vegalink.domain.entities.streams import StreamCandidate
from vegalink.domain.exceptions import FetchError
from vegalink.infrastructure.common.html_selectors import (
    joined_text,
    parse_html,
)
from vegalink.infrastructure.common.http_fetch import HttpFetcher
from vegalink.infrastructure.metadata.heuristics import guess_meta, merge_meta

log = structlog.get_logger(__name__)

_DOMAINS = frozenset({"oxxfile", "filepress"})

_LINK_SELECTOR = 'a.btn, a[class*="download"], a[href*=".mkv"], a[href*=".mp4"]'
_LINK_MARKERS = (".mkv", ".mp4", "download")


class OxxFileResolver:
    """Resolves OxxFile and FilePress download pages."""

    def __init__(self, fetcher: HttpFetcher) -> None:
        self._fetcher = fetcher

    @property
    def name(self) -> str:
        return "oxxfile"

    @property
    def supported_domains(self) -> frozenset[str]:
        return _DOMAINS

    async def resolve(
        self,
        url: str,
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]:
        try:
            resp = await self._fetcher.fetch(url, signal=signal)
            if not resp.ok:
                log.warning("oxxfile_http_error", url=url, status=resp.status)
                return []
            return self._extract(resp.body, url)
        except FetchError as exc:
            log.warning("oxxfile_fetch_failed", url=url, error=str(exc))
            return []
        except Exception:
            log.exception("oxxfile_parse_failed", url=url)
            return []

    def _extract(self, html: str, page_url: str) -> list[StreamCandidate]:
        soup = parse_html(html)
        seed = guess_meta(f"{joined_text(soup, 'title')} {joined_text(soup, '.card-body')}")

        candidates: list[StreamCandidate] = []
        for anchor in soup.select(_LINK_SELECTOR):
            href = str(anchor.get("href") or "")
            if not href or not any(marker in href for marker in _LINK_MARKERS):
                continue
            meta = merge_meta(guess_meta(anchor.get_text(" ", strip=True)), seed)
            candidates.append(
                StreamCandidate(
                    server="Oxxfile",
                    link=urljoin(page_url, href),
                    size=meta.size,
                    quality=meta.quality,
                    language=meta.language,
                    type="mkv",
                )
            )

        log.debug("oxxfile_resolved", count=len(candidates))
        return candidates
