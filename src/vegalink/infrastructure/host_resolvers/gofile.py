"""GoFile resolver: lists downloadable files via the GoFile content API.

GoFile is a file hosting/sharing service. URLs follow the pattern:
    https://gofile.io/d/{contentId}

Resolution requires an ephemeral guest token obtained via:
    POST https://api.gofile.io/accounts → {"status": "ok", "data": {"token": "..."}}

The folder listing is then fetched via:
    GET https://api.gofile.io/contents/{contentId}?wt=...
    (token passed as Bearer auth and as the ``accountToken`` cookie)

Every file in the listing becomes one candidate.  Any failure returns a
single empty placeholder candidate instead of raising, so aggregation is
never blocked; the aggregator drops it because its link is empty.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any
from urllib.parse import urlparse

import structlog

from vegalink.domain.entities.streams import StreamCandidate
from vegalink.domain.exceptions import FetchError
from vegalink.infrastructure.common.http_fetch import HttpFetcher
from vegalink.infrastructure.metadata.heuristics import format_byte_size, guess_meta

log = structlog.get_logger(__name__)

_DOMAINS = frozenset({"gofile"})

# Content ID: alphanumeric from /d/ path
_CONTENT_ID_RE = re.compile(r"^/d/([A-Za-z0-9]+)$")
_BARE_ID_RE = re.compile(r"^[A-Za-z0-9]+$")

_API_BASE = "https://api.gofile.io"

# Static website token the GoFile web client sends with content requests.
_WEBSITE_TOKEN = "4fd6sg89d7s6"

_API_HEADERS = {
    "Origin": "https://gofile.io",
    "Referer": "https://gofile.io/",
}


class GoFileError(Exception):
    """Raised internally when the GoFile API breaks its contract."""


def _extract_content_id(url_or_id: str) -> str | None:
    """Extract the content ID from a GoFile URL, or accept a bare ID."""
    if _BARE_ID_RE.match(url_or_id or ""):
        return url_or_id
    try:
        parsed = urlparse(url_or_id)
        hostname = parsed.hostname or ""
        if "gofile" not in hostname:
            return None
        match = _CONTENT_ID_RE.search(parsed.path.rstrip("/"))
        return match.group(1) if match else None
    except Exception:  # noqa: BLE001
        return None


def _listing_entries(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Return file entries from a content response (old and new API shapes)."""
    payload = data.get("data")
    if not isinstance(payload, dict):
        return []
    children = payload.get("children") or payload.get("contents") or {}
    if isinstance(children, dict):
        entries = list(children.values())
    elif isinstance(children, list):
        entries = children
    else:
        entries = []
    return [
        e for e in entries if isinstance(e, dict) and e.get("type", "file") == "file"
    ]


def _entry_to_candidate(entry: dict[str, Any]) -> StreamCandidate:
    name = str(entry.get("name") or "")
    meta = guess_meta(name)
    return StreamCandidate(
        server="Gofile",
        link=str(entry.get("link") or ""),
        size=format_byte_size(entry.get("size")),
        quality=meta.quality,
        language=meta.language,
        file_name=name or None,
    )


class GoFileResolver:
    """Token-gated resolver for GoFile folders."""

    def __init__(self, fetcher: HttpFetcher) -> None:
        self._fetcher = fetcher

    @property
    def name(self) -> str:
        return "gofile"

    @property
    def supported_domains(self) -> frozenset[str]:
        return _DOMAINS

    async def _create_guest_token(self, signal: asyncio.Event | None) -> str:
        resp = await self._fetcher.fetch(
            f"{_API_BASE}/accounts",
            method="POST",
            json_body={},
            headers=_API_HEADERS,
            signal=signal,
        )
        if not resp.ok:
            raise GoFileError(f"token endpoint returned HTTP {resp.status}")
        data = resp.json()
        payload = data.get("data") if isinstance(data, dict) else None
        token = payload.get("token") if isinstance(payload, dict) else None
        if not token:
            log.warning("gofile_no_token")
            raise GoFileError("no token")
        return str(token)

    async def _fetch_listing(
        self,
        content_id: str,
        token: str,
        signal: asyncio.Event | None,
    ) -> list[dict[str, Any]]:
        resp = await self._fetcher.fetch(
            f"{_API_BASE}/contents/{content_id}",
            params={"wt": _WEBSITE_TOKEN},
            headers={
                **_API_HEADERS,
                "Authorization": f"Bearer {token}",
                "Cookie": f"accountToken={token}",
            },
            signal=signal,
        )
        if not resp.ok:
            raise GoFileError(f"content endpoint returned HTTP {resp.status}")
        data = resp.json()
        if not isinstance(data, dict) or data.get("status") != "ok":
            raise GoFileError("content listing not ok")
        entries = _listing_entries(data)
        if not entries:
            raise GoFileError("no content found")
        return entries

    async def resolve(
        self,
        url: str,
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]:
        """Resolve a GoFile folder into one candidate per file.

        Never raises: any failure yields ``[StreamCandidate.placeholder()]``.
        """
        content_id = _extract_content_id(url)
        if not content_id:
            log.warning("gofile_invalid_url", url=url)
            return [StreamCandidate.placeholder()]

        try:
            token = await self._create_guest_token(signal)
            entries = await self._fetch_listing(content_id, token, signal)
        except (FetchError, GoFileError, ValueError) as exc:
            log.warning("gofile_resolve_failed", content_id=content_id, error=str(exc))
            return [StreamCandidate.placeholder()]

        candidates = [_entry_to_candidate(e) for e in entries]
        log.debug("gofile_resolved", content_id=content_id, files=len(candidates))
        return candidates
