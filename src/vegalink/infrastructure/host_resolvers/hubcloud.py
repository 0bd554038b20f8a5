"""HubCloud / VCloud resolver: follows the redirect chain to the button page.

Resolution flow:
1. Fetch the entry page and guess page-level metadata from its headings
   (topped up with the start of the body text when the headings are thin).
2. Find the next hop: the inline ``var url = '...'`` script assignment,
   whose ``r=`` query value is a base64-encoded target URL.  Pages
   without the script expose the hop on the ``.fa-file-download`` icon's
   parent link instead.
3. Fetch the terminal page and emit one candidate per download button,
   each classified by the host its ``href`` points at.

OxxFile / FilePress URLs are handed to the dedicated resolver.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import re

import structlog

from vegalink.domain.entities.streams import MetaGuess, StreamCandidate
from vegalink.domain.exceptions import FetchError
from vegalink.infrastructure.common.html_selectors import (
    extract_attr,
    joined_text,
    origin_of,
    page_text,
    parse_html,
)
from vegalink.infrastructure.common.http_fetch import HttpFetcher
from vegalink.infrastructure.host_resolvers.oxxfile import OxxFileResolver
from vegalink.infrastructure.metadata.heuristics import guess_meta, merge_meta

log = structlog.get_logger(__name__)

_DOMAINS = frozenset({"hubcloud", "vcloud"})

_REDIRECT_RE = re.compile(r"var\s+url\s*=\s*'([^']+)';")
_R_PARAM_RE = re.compile(r"[?&]r=([^&#]+)")

_SEED_SELECTOR = ".file-name, .name, h2, h3, title"
_SEED_MIN_CHARS = 20
_SEED_BODY_CHARS = 1500

_BUTTON_SELECTOR = "a.btn, .btn-primary, .btn-success, .btn-danger"

# href substring -> server label, first match wins
_SERVER_RULES: tuple[tuple[str, str], ...] = (
    ("pixeldrain", "Pixeldrain"),
    ("drive.google", "GDrive"),
    ("workers.dev", "CF Worker"),
    ("gofile", "Gofile"),
    ("wish", "StreamWish"),
)


def decode_redirect(hop: str) -> str:
    """Decode the base64 ``r=`` payload of *hop*; keep *hop* on any failure."""
    match = _R_PARAM_RE.search(hop)
    if not match:
        return hop
    payload = match.group(1)
    payload += "=" * (-len(payload) % 4)
    try:
        decoded = base64.b64decode(payload, validate=False).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        log.debug("hubcloud_redirect_undecodable", hop=hop)
        return hop
    return decoded or hop


def classify_server(href: str, button_text: str) -> str:
    """Label a terminal button by the host its link points at."""
    for marker, label in _SERVER_RULES:
        if marker in href:
            return label
    if "download" in button_text.lower():
        return "Direct"
    return "Hubcloud"


class HubCloudResolver:
    """Resolves HubCloud / VCloud share pages through their redirect hop."""

    def __init__(
        self,
        fetcher: HttpFetcher,
        oxxfile: OxxFileResolver | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._oxxfile = oxxfile or OxxFileResolver(fetcher)

    @property
    def name(self) -> str:
        return "hubcloud"

    @property
    def supported_domains(self) -> frozenset[str]:
        return _DOMAINS

    async def resolve(
        self,
        url: str,
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]:
        if "oxxfile" in url or "filepress" in url:
            return await self._oxxfile.resolve(url, signal)

        try:
            return await self._resolve_chain(url, signal)
        except FetchError as exc:
            log.warning("hubcloud_fetch_failed", url=url, error=str(exc))
            return []
        except Exception:
            log.exception("hubcloud_resolve_failed", url=url)
            return []

    async def _resolve_chain(
        self,
        url: str,
        signal: asyncio.Event | None,
    ) -> list[StreamCandidate]:
        entry = await self._fetcher.fetch(url, signal=signal)
        if not entry.ok:
            log.warning("hubcloud_http_error", url=url, status=entry.status)
            return []

        soup = parse_html(entry.body)
        seed_text = joined_text(soup, _SEED_SELECTOR)
        if len(seed_text) < _SEED_MIN_CHARS:
            seed_text = f"{seed_text} {page_text(soup, _SEED_BODY_CHARS)}"
        seed = guess_meta(seed_text)

        match = _REDIRECT_RE.search(entry.body)
        if match:
            hop = match.group(1)
            next_url = decode_redirect(hop)
            if next_url != hop:
                log.debug("hubcloud_redirect_decoded", url=next_url)
        else:
            icon = soup.select_one(".fa-file-download.fa-lg")
            parent = icon.parent if icon is not None else None
            next_url = (extract_attr(parent, "", "href") if parent else "") or url

        if next_url.startswith("/"):
            next_url = f"{origin_of(url)}{next_url}"

        terminal = await self._fetcher.fetch(next_url, signal=signal)
        return self._extract_buttons(terminal.body, seed)

    def _extract_buttons(self, html: str, seed: MetaGuess) -> list[StreamCandidate]:
        soup = parse_html(html)
        seen: set[str] = set()
        candidates: list[StreamCandidate] = []

        for button in soup.select(_BUTTON_SELECTOR):
            href = str(button.get("href") or "")
            if not href or href.startswith(("javascript", "#")) or href in seen:
                continue
            seen.add(href)

            text = button.get_text(" ", strip=True)
            meta = merge_meta(guess_meta(text), seed)
            candidates.append(
                StreamCandidate(
                    server=classify_server(href, text),
                    link=href,
                    size=meta.size,
                    quality=meta.quality,
                    language=meta.language,
                )
            )

        log.debug("hubcloud_resolved", count=len(candidates))
        return candidates
