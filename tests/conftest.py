"""Shared test fixtures for vegalink test suite."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest

from vegalink.domain.entities.streams import StreamCandidate, SubtitleRef
from vegalink.infrastructure.cache import DiskcacheAdapter
from vegalink.infrastructure.common import HttpFetcher
from vegalink.infrastructure.config import HttpSettings

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def candidate() -> StreamCandidate:
    """Fully populated candidate as a provider would hand it over."""
    return StreamCandidate(
        server="Pixeldrain",
        link="https://pixeldrain.com/api/file/abc",
        size="2.1 GB",
        quality="1080",
        language="Hindi-English",
        type="mkv",
        provider_name="VegaMovies",
        provider_value="vega",
        subtitles=(SubtitleRef(url="https://subs.example/en.srt", lang="eng"),),
    )


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture()
def fetcher(http_client: httpx.AsyncClient) -> HttpFetcher:
    """Fetcher over a real client; tests mock the transport with respx."""
    return HttpFetcher(http_client, HttpSettings(timeout_seconds=5.0))


@pytest.fixture()
async def disk_cache(tmp_path: Path) -> AsyncIterator[DiskcacheAdapter]:
    async with DiskcacheAdapter(directory=tmp_path / "cache", ttl_seconds=60) as cache:
        yield cache
