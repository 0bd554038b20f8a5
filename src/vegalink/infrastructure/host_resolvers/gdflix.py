"""GDFlix resolver: harvests every playable link from a GDFlix listing page.

GDFlix pages mix three kinds of links on one page:
- Google Drive share links (``/file/d/{id}/view`` or ``?id={id}``),
  rewritten to the direct ``uc?export=download`` form
- ``<video><source src=...>`` tags
- download buttons pointing straight at ``.mp4`` / ``.mkv`` files

Metadata is guessed once from the page text and shared by all links.
"""

from __future__ import annotations

import asyncio
import re

import structlog

from vegalink.domain.entities.streams import StreamCandidate, StreamFileType
from vegalink.domain.exceptions import FetchError
from vegalink.infrastructure.common.html_selectors import page_text, parse_html
from vegalink.infrastructure.common.http_fetch import HttpFetcher
from vegalink.infrastructure.metadata.heuristics import guess_meta

log = structlog.get_logger(__name__)

_DOMAINS = frozenset({"gdflix"})

_DRIVE_PATH_ID_RE = re.compile(r"/d/([^/]+)")
_DRIVE_QUERY_ID_RE = re.compile(r"id=([^&]+)")

_DRIVE_DOWNLOAD = "https://drive.google.com/uc?export=download&id={file_id}"


def _drive_file_id(href: str) -> str | None:
    match = _DRIVE_PATH_ID_RE.search(href) or _DRIVE_QUERY_ID_RE.search(href)
    return match.group(1) if match else None


def _file_type(href: str) -> StreamFileType:
    return "mkv" if ".mkv" in href.lower() else "mp4"


class GDFlixResolver:
    """Resolves GDFlix listing pages (any ``gdflix.*`` mirror)."""

    def __init__(self, fetcher: HttpFetcher) -> None:
        self._fetcher = fetcher

    @property
    def name(self) -> str:
        return "gdflix"

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
        except FetchError as exc:
            log.warning("gdflix_fetch_failed", url=url, error=str(exc))
            return []

        if not resp.ok:
            log.warning("gdflix_http_error", url=url, status=resp.status)
            return []

        try:
            return self._extract(resp.body)
        except Exception:
            log.exception("gdflix_parse_failed", url=url)
            return []

    def _extract(self, html: str) -> list[StreamCandidate]:
        soup = parse_html(html)
        meta = guess_meta(page_text(soup))

        def candidate(server: str, link: str, file_type: StreamFileType) -> StreamCandidate:
            return StreamCandidate(
                server=server,
                link=link,
                size=meta.size,
                quality=meta.quality,
                language=meta.language,
                type=file_type,
            )

        candidates: list[StreamCandidate] = []

        for anchor in soup.select('a[href*="drive.google.com"]'):
            file_id = _drive_file_id(str(anchor.get("href") or ""))
            if file_id:
                link = _DRIVE_DOWNLOAD.format(file_id=file_id)
                candidates.append(candidate("GDrive", link, "mp4"))

        for source in soup.select("video source, source"):
            src = str(source.get("src") or "")
            if src:
                candidates.append(candidate("GDflix Direct", src, _file_type(src)))

        for button in soup.select('a.btn, a[class*="download"]'):
            href = str(button.get("href") or "")
            if ".mp4" in href or ".mkv" in href:
                candidates.append(candidate("GDflix Download", href, _file_type(href)))

        log.debug("gdflix_resolved", count=len(candidates))
        return candidates
