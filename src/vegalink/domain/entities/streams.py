"""Domain entities for link resolution and stream presentation.

Pure value objects without I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

StremioContentType = Literal["movie", "series"]
StreamFileType = Literal["mp4", "mkv", ""]

# Language sentinel meaning "nothing detected".
UNKNOWN_LANGUAGE = "Multi"


@dataclass(frozen=True)
class MetaGuess:
    """Best-effort metadata scraped from free text.

    Empty fields mean "unknown", never zero or false.
    """

    size: str = ""
    quality: str = ""  # bare pixel height, e.g. "1080"
    language: str = UNKNOWN_LANGUAGE


@dataclass(frozen=True)
class SubtitleRef:
    """Raw subtitle reference as handed over by a provider.

    Providers disagree on field names, so every known spelling is kept.
    """

    url: str = ""
    uri: str = ""
    link: str = ""
    language: str = ""
    lang: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SubtitleRef:
        return cls(
            url=str(data.get("url") or ""),
            uri=str(data.get("uri") or ""),
            link=str(data.get("link") or ""),
            language=str(data.get("language") or ""),
            lang=str(data.get("lang") or ""),
        )


@dataclass(frozen=True)
class StreamCandidate:
    """An unvalidated stream descriptor produced by one host resolver."""

    server: str = ""
    link: str = ""
    size: str = ""
    quality: str = ""
    language: str = ""
    type: StreamFileType = ""
    file_name: str | None = None
    provider_name: str | None = None
    provider_value: str | None = None
    headers: dict[str, str] | None = None
    subtitles: tuple[SubtitleRef, ...] = ()

    @property
    def is_usable(self) -> bool:
        return bool(self.link)

    @classmethod
    def placeholder(cls) -> StreamCandidate:
        """Empty candidate returned when a resolver must not block aggregation."""
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> StreamCandidate:
        """Build a candidate from a loosely-typed provider mapping.

        Accepts both snake_case and the camelCase keys emitted by
        JavaScript-era providers (``fileName``, ``providerName``, ...).
        """
        raw_type = str(data.get("type") or "").lower()
        file_type: StreamFileType = raw_type if raw_type in ("mp4", "mkv") else ""  # type: ignore[assignment]
        headers = data.get("headers")
        subtitles = data.get("subtitles")
        if not isinstance(subtitles, (list, tuple)):
            subtitles = ()
        return cls(
            server=str(data.get("server") or ""),
            link=str(data.get("link") or ""),
            size=str(data.get("size") or ""),
            quality=str(data.get("quality") or ""),
            language=str(data.get("language") or ""),
            type=file_type,
            file_name=data.get("file_name") or data.get("fileName"),
            provider_name=data.get("provider_name") or data.get("providerName"),
            provider_value=data.get("provider_value") or data.get("providerValue"),
            headers=dict(headers) if isinstance(headers, Mapping) else None,
            subtitles=tuple(
                s if isinstance(s, SubtitleRef) else SubtitleRef.from_mapping(s)
                for s in subtitles
                if isinstance(s, (SubtitleRef, Mapping))
            ),
        )


@dataclass(frozen=True)
class SubtitleEntry:
    """Stremio subtitle object attached to a stream."""

    id: str
    url: str
    lang: str


@dataclass(frozen=True)
class PlayableStream:
    """Final, ranked stream record handed to the boundary adapter."""

    name: str  # compact "<provider>\n<quality>" for the left column
    title: str  # full multi-part description
    url: str
    proxy_headers: dict[str, str] | None = None
    subtitles: list[SubtitleEntry] = field(default_factory=list)


@dataclass(frozen=True)
class StreamQuery:
    """Provider-facing request: catalog ids plus optional episode coordinates."""

    imdb_id: str
    content_type: StremioContentType
    tmdb_id: str = ""
    season: int | None = None
    episode: int | None = None


@dataclass(frozen=True)
class StremioStreamRequest:
    """Parsed Stremio stream request.

    Created from URL path: ``tt1234567`` (movie) or
    ``tt1234567:1:5`` (series, season 1, episode 5).
    """

    imdb_id: str
    content_type: StremioContentType
    season: int | None = None
    episode: int | None = None
