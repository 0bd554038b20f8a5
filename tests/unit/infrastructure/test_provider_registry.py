"""Tests for provider discovery, enablement and dispatch."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from vegalink.domain.entities.streams import StreamCandidate, StreamQuery
from vegalink.domain.exceptions import (
    DuplicateProviderError,
    ProviderLoadError,
    ProviderNotFoundError,
    ProviderValidationError,
)
from vegalink.infrastructure.host_resolvers import HostResolverRegistry
from vegalink.infrastructure.providers import (
    LinkListProvider,
    ProviderRegistry,
    load_python_provider,
    load_yaml_provider,
)
from vegalink.infrastructure.providers import loader as loader_module
from vegalink.infrastructure.providers.link_list import lookup_keys

_MOVIE = StreamQuery(imdb_id="tt0111161", content_type="movie")
_EPISODE = StreamQuery(
    imdb_id="tt0944947", content_type="series", tmdb_id="1399", season=1, episode=2
)

_YAML = """\
name: My Links
value: mylinks
links:
  tt0111161:
    - https://hubcloud.ink/drive/abc
"""

_PY = """\
from vegalink.infrastructure.providers import LinkListProvider

provider = LinkListProvider("Py Links", "pylinks", {"tt1": ["https://gofile.io/d/x"]})
"""


class _StaticProvider:
    def __init__(
        self,
        value: str,
        items: list[Any] | None = None,
        *,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.name = value.title()
        self.value = value
        self._items = items or []
        self._delay = delay
        self._error = error

    async def get_streams(
        self, query: StreamQuery, signal: asyncio.Event | None = None
    ) -> list[Any]:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._items


class _EchoResolver:
    name = "hubcloud"
    supported_domains = frozenset({"hubcloud"})

    async def resolve(
        self, url: str, signal: asyncio.Event | None = None
    ) -> list[StreamCandidate]:
        return [StreamCandidate(server="Hubcloud", link=f"{url}/file.mkv")]


class TestLookupKeys:
    def test_movie(self) -> None:
        assert lookup_keys(_MOVIE) == ["tt0111161"]

    def test_episode_keys_first(self) -> None:
        assert lookup_keys(_EPISODE) == [
            "tt0944947:1:2",
            "tmdb:1399:1:2",
            "tt0944947",
            "tmdb:1399",
        ]


class TestLinkListProvider:
    @pytest.mark.asyncio()
    async def test_most_specific_key_wins(self) -> None:
        provider = LinkListProvider(
            "L",
            "l",
            {
                "tt0944947": ["https://hubcloud.ink/show"],
                "tmdb:1399:1:2": ["https://hubcloud.ink/ep"],
            },
        )

        assert await provider.source_urls(_EPISODE) == ["https://hubcloud.ink/ep"]

    @pytest.mark.asyncio()
    async def test_unbound_provider_raises(self) -> None:
        provider = LinkListProvider("L", "l", {"tt0111161": ["https://hubcloud.ink/a"]})

        with pytest.raises(RuntimeError):
            await provider.get_streams(_MOVIE)

    @pytest.mark.asyncio()
    async def test_streams_come_from_bound_resolvers(self) -> None:
        provider = LinkListProvider("L", "l", {"tt0111161": ["https://hubcloud.ink/a"]})
        provider.bind(HostResolverRegistry([_EchoResolver()]))

        result = await provider.get_streams(_MOVIE)

        assert [c.link for c in result] == ["https://hubcloud.ink/a/file.mkv"]

    @pytest.mark.asyncio()
    async def test_unknown_title_gives_empty(self) -> None:
        provider = LinkListProvider("L", "l", {})
        provider.bind(HostResolverRegistry())

        assert await provider.get_streams(_MOVIE) == []


class TestLoaders:
    def test_yaml_provider(self, tmp_path: Path) -> None:
        path = tmp_path / "links.yaml"
        path.write_text(_YAML, encoding="utf-8")

        provider = load_yaml_provider(path)

        assert (provider.name, provider.value) == ("My Links", "mylinks")

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "- just\n- a list\n",
            "name: X\nvalue: has space\n",
            "name: X\nvalue: x\nlinks:\n  tt1:\n    - ftp://nope\n",
            "name: [unclosed\n",
        ],
    )
    def test_invalid_yaml_provider(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ProviderValidationError):
            load_yaml_provider(path)

    @pytest.mark.parametrize("content", ["", "- just\n- a list\n"])
    def test_empty_or_non_mapping_yaml_is_logged(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, content: str
    ) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(content, encoding="utf-8")
        fake_log = MagicMock()
        monkeypatch.setattr(loader_module, "log", fake_log)

        with pytest.raises(ProviderValidationError):
            load_yaml_provider(path)

        fake_log.error.assert_called_once()
        assert fake_log.error.call_args.args == ("provider_validation_failed",)
        assert fake_log.error.call_args.kwargs["provider_file"] == str(path)

    def test_missing_yaml_file(self, tmp_path: Path) -> None:
        with pytest.raises(ProviderLoadError):
            load_yaml_provider(tmp_path / "absent.yaml")

    def test_python_provider(self, tmp_path: Path) -> None:
        path = tmp_path / "py_links.py"
        path.write_text(_PY, encoding="utf-8")

        provider = load_python_provider(path)

        assert provider.value == "pylinks"

    @pytest.mark.parametrize(
        "content",
        [
            "x = 1\n",
            "provider = object()\n",
            "def broken(:\n",
            "raise RuntimeError('import time')\n",
        ],
    )
    def test_invalid_python_provider(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "bad_provider.py"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ProviderLoadError):
            load_python_provider(path)


class TestProviderRegistry:
    def test_register_get_and_duplicates(self) -> None:
        registry = ProviderRegistry(HostResolverRegistry())
        provider = _StaticProvider("alpha")
        registry.register(provider)

        assert registry.get("alpha") is provider
        assert len(registry) == 1
        with pytest.raises(DuplicateProviderError):
            registry.register(_StaticProvider("alpha"))
        with pytest.raises(ProviderNotFoundError):
            registry.get("missing")

    def test_register_binds_resolvers(self) -> None:
        resolvers = HostResolverRegistry()
        registry = ProviderRegistry(resolvers)
        provider = LinkListProvider("L", "l", {})

        registry.register(provider)

        assert provider.resolvers is resolvers

    def test_discover_directory(self, tmp_path: Path) -> None:
        (tmp_path / "links.yaml").write_text(_YAML, encoding="utf-8")
        (tmp_path / "py_links.py").write_text(_PY, encoding="utf-8")
        (tmp_path / "_disabled.yaml").write_text(_YAML, encoding="utf-8")
        (tmp_path / "broken.yml").write_text("name: X\n", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

        registry = ProviderRegistry(HostResolverRegistry())

        assert registry.discover(tmp_path) == 2
        assert sorted(p.value for p in registry.all()) == ["mylinks", "pylinks"]

    def test_discover_missing_directory(self, tmp_path: Path) -> None:
        registry = ProviderRegistry(HostResolverRegistry())

        assert registry.discover(tmp_path / "nope") == 0

    def test_enabled_semantics(self) -> None:
        registry = ProviderRegistry(HostResolverRegistry())
        for value in ("a", "b", "c", "d"):
            registry.register(_StaticProvider(value))

        enabled = registry.enabled({"a": "true", "b": "false", "c": "on"})

        assert [p.value for p in enabled] == ["a", "c", "d"]
        assert len(registry.enabled(None)) == 4
        assert len(registry.enabled({})) == 4

    def test_default_enabled_subset(self) -> None:
        registry = ProviderRegistry(HostResolverRegistry(), default_enabled=["b"])
        registry.register(_StaticProvider("a"))
        registry.register(_StaticProvider("b"))

        assert [p.value for p in registry.enabled()] == ["b"]

    @pytest.mark.asyncio()
    async def test_dispatch_tags_and_contains_failures(self) -> None:
        registry = ProviderRegistry(HostResolverRegistry(), provider_timeout=0.05)
        ok = _StaticProvider(
            "ok",
            [
                StreamCandidate(link="https://x/1"),
                {"link": "https://x/2", "providerName": "Custom"},
                "junk",
            ],
        )
        slow = _StaticProvider("slow", [StreamCandidate(link="https://x/slow")], delay=1.0)
        broken = _StaticProvider("broken", error=RuntimeError("boom"))

        result = await registry.dispatch(_MOVIE, [ok, slow, broken])

        assert [c.link for c in result] == ["https://x/1", "https://x/2"]
        assert [c.provider_name for c in result] == ["Ok", "Custom"]
        assert {c.provider_value for c in result} == {"ok"}

    @pytest.mark.asyncio()
    async def test_dispatch_survives_malformed_provider_output(self) -> None:
        registry = ProviderRegistry(HostResolverRegistry())
        good = _StaticProvider("good", [{"link": "https://x/good"}])
        bad_subtitles = _StaticProvider(
            "badsubs", [{"link": "https://x/subs", "subtitles": 5, "headers": "nope"}]
        )
        not_iterable = _StaticProvider("scalar", 5)  # type: ignore[arg-type]

        result = await registry.dispatch(_MOVIE, [good, bad_subtitles, not_iterable])

        assert [c.link for c in result] == ["https://x/good", "https://x/subs"]
        assert result[1].subtitles == ()
        assert result[1].headers is None
