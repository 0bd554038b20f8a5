"""Merge raw StreamCandidates into ranked, display-ready PlayableStreams.

Pure transformation logic without I/O.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from vegalink.domain.entities.streams import (
    UNKNOWN_LANGUAGE,
    PlayableStream,
    StreamCandidate,
    SubtitleEntry,
)

DEFAULT_PROVIDER_LABEL = "Vega"
DEFAULT_SUBTITLE_PREFIX = "vega"
DEFAULT_SUBTITLE_LANG = "eng"
HD_TOKEN = "HD"

_LABEL_SEPARATORS_RE = re.compile(r"[-!|]")
_LABEL_FILLER_RE = re.compile(r"WebStreamr|Direct|Server|Link|Cloud", re.IGNORECASE)
_SERVER_FILLER_RE = re.compile(r"Server|Link|CDN", re.IGNORECASE)
_DIGITS_RE = re.compile(r"\d{3,4}")

_BAR_SEPARATOR = " | "


def clean_provider_name(
    name: str | None,
    default_label: str = DEFAULT_PROVIDER_LABEL,
) -> str:
    """Shorten a provider name to a display label.

    Examples:
        "RapidServer-Direct!Extra" -> "Rapid"
        "WebStreamr | Hindi"       -> default label
        None                       -> default label
    """
    if not name:
        return default_label
    head = _LABEL_SEPARATORS_RE.split(name, maxsplit=1)[0]
    label = _LABEL_FILLER_RE.sub("", head).strip()
    return label or default_label


def quality_token(quality: str | None) -> str:
    """``"<digits>p"`` from the first 3-4 digit run, else ``"HD"``.

    Collapses doubled values such as ``"2160p[2160p]"`` into ``"2160p"``.
    """
    match = _DIGITS_RE.search(quality or "")
    return f"{match.group(0)}p" if match else HD_TOKEN


def _quality_value(text: str) -> int:
    match = _DIGITS_RE.search(text)
    return int(match.group(0)) if match else 0


def _tier_icon(token: str) -> str:
    value = _quality_value(token)
    if value >= 2160:
        return "🔥"
    if value >= 1080:
        return "💎"
    return "⭐"


def format_stream_title(
    candidate: StreamCandidate,
    label: str,
    token: str,
) -> str:
    """Build the rich multi-part title shown under a stream.

    First line: ``"<icon> <label> | ✨ <q> | 🗣️ <lang> | 💾 <size> | 🔤"``
    (empty parts omitted).  A second ``🖥️ <server>`` line is added when
    the server name adds information beyond the label.
    """
    parts = [
        f"✨ {token}" if token else "",
        (
            f"🗣️ {candidate.language}"
            if candidate.language and candidate.language != UNKNOWN_LANGUAGE
            else ""
        ),
        f"💾 {candidate.size}" if candidate.size else "",
        "🔤" if candidate.subtitles else "",
    ]
    bar = _BAR_SEPARATOR.join(p for p in parts if p.strip())
    title = f"{_tier_icon(token)} {label} | {bar}"

    if candidate.server:
        server = _SERVER_FILLER_RE.sub("", candidate.server).strip()
        if server.lower() != label.lower() and len(server) > 2:
            title += f"\n🖥️ {server}"

    return title


def build_subtitles(candidate: StreamCandidate) -> list[SubtitleEntry]:
    """Map subtitle references to Stremio entries, dropping url-less ones.

    Ids use the reference's position in the original list, so they stay
    stable even when earlier references are dropped.
    """
    prefix = candidate.provider_value or DEFAULT_SUBTITLE_PREFIX
    entries: list[SubtitleEntry] = []
    for index, ref in enumerate(candidate.subtitles):
        url = ref.uri or ref.url or ref.link
        if not url:
            continue
        entries.append(
            SubtitleEntry(
                id=f"{prefix}-sub-{index}",
                url=url,
                lang=ref.language or ref.lang or DEFAULT_SUBTITLE_LANG,
            )
        )
    return entries


def to_playable(
    candidate: StreamCandidate,
    default_label: str = DEFAULT_PROVIDER_LABEL,
) -> PlayableStream:
    label = clean_provider_name(candidate.provider_name, default_label)
    token = quality_token(candidate.quality)
    return PlayableStream(
        name=f"{label}\n{token}",
        title=format_stream_title(candidate, label, token),
        url=candidate.link,
        proxy_headers=dict(candidate.headers) if candidate.headers else None,
        subtitles=build_subtitles(candidate),
    )


def aggregate_streams(
    candidates: Iterable[StreamCandidate | Mapping[str, Any]],
    default_label: str = DEFAULT_PROVIDER_LABEL,
) -> list[PlayableStream]:
    """Turn the candidates of one request into a ranked stream list.

    Candidates without a link are dropped, as are repeats of a link already
    seen (the first occurrence wins).  The rest are ordered by the
    quality number in their compact name, highest first; ``HD`` entries
    count as 0 and ties keep their arrival order.
    """
    streams: list[PlayableStream] = []
    seen: set[str] = set()
    for item in candidates:
        candidate = (
            item if isinstance(item, StreamCandidate) else StreamCandidate.from_mapping(item)
        )
        if not candidate.is_usable or candidate.link in seen:
            continue
        seen.add(candidate.link)
        streams.append(to_playable(candidate, default_label))

    # Rank on the quality line of the name; a label like "1337x" must not count.
    streams.sort(key=lambda s: _quality_value(s.name.rpartition("\n")[2]), reverse=True)
    return streams


def stream_to_stremio(stream: PlayableStream) -> dict[str, Any]:
    """Convert a PlayableStream to Stremio's stream JSON shape."""
    behavior_hints: dict[str, Any] = {"notWebReady": True}
    if stream.proxy_headers:
        behavior_hints["proxyHeaders"] = {"request": stream.proxy_headers}
    return {
        "name": stream.name,
        "title": stream.title,
        "url": stream.url,
        "behaviorHints": behavior_hints,
        "subtitles": [
            {"id": s.id, "url": s.url, "lang": s.lang} for s in stream.subtitles
        ],
    }
