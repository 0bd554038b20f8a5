"""YAML-defined provider: a fixed mapping of catalog ids to hosting URLs.

Example ``providers/archive.yaml``::

    name: Archive
    value: archive
    links:
      tt0111161:
        - https://hubcloud.ink/drive/abc123
      "tt0944947:1:1":
        - https://gofile.io/d/Xyz789
      "tmdb:1399:1:1":
        - https://new4.gdflix.dad/file/qwe

Keys are tried most specific first: the episode key, then the bare id,
for both the IMDb and the ``tmdb:`` spelling.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field, field_validator

from vegalink.domain.entities.streams import StreamQuery
from vegalink.infrastructure.providers.base import ResolverProvider


class LinkListDefinition(BaseModel):
    """Validated shape of a YAML link-list provider file."""

    name: str = Field(min_length=1)
    value: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_.-]+$")
    links: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("links")
    @classmethod
    def _validate_links(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        for key, urls in v.items():
            for url in urls:
                if not url.startswith(("http://", "https://")):
                    raise ValueError(f"links[{key}]: not an http(s) URL: {url!r}")
        return v


def lookup_keys(query: StreamQuery) -> list[str]:
    """Candidate mapping keys for *query*, most specific first."""
    ids = [query.imdb_id]
    if query.tmdb_id:
        ids.append(f"tmdb:{query.tmdb_id}")

    keys: list[str] = []
    if query.season is not None and query.episode is not None:
        keys.extend(f"{i}:{query.season}:{query.episode}" for i in ids)
    keys.extend(ids)
    return keys


class LinkListProvider(ResolverProvider):
    """Provider backed by a static id -> URLs mapping."""

    def __init__(
        self,
        name: str,
        value: str,
        links: Mapping[str, Sequence[str]],
    ) -> None:
        self.name = name
        self.value = value
        self._links = {key: list(urls) for key, urls in links.items()}
        super().__init__()

    @classmethod
    def from_definition(cls, definition: LinkListDefinition) -> LinkListProvider:
        return cls(definition.name, definition.value, definition.links)

    async def source_urls(
        self,
        query: StreamQuery,
        signal: asyncio.Event | None = None,
    ) -> list[str]:
        for key in lookup_keys(query):
            urls = self._links.get(key)
            if urls:
                return urls
        return []
