"""Provider registry: discovery, per-user enablement and concurrent dispatch."""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog

from vegalink.domain.entities.streams import StreamCandidate, StreamQuery
from vegalink.domain.exceptions import (
    DuplicateProviderError,
    ProviderLoadError,
    ProviderNotFoundError,
)
from vegalink.domain.ports.provider import StreamProviderPort
from vegalink.infrastructure.host_resolvers.registry import HostResolverRegistry

from .loader import load_python_provider, load_yaml_provider

log = structlog.get_logger(__name__)

# User-config values that keep a provider switched on (absent counts too).
_ENABLED_VALUES: tuple[Any, ...] = ("true", "on", True)


def _normalize_candidates(
    provider: StreamProviderPort,
    raw: Iterable[Any],
) -> list[StreamCandidate]:
    """Coerce provider output into candidates tagged with the provider."""
    out: list[StreamCandidate] = []
    for item in raw:
        if isinstance(item, StreamCandidate):
            candidate = item
        elif isinstance(item, Mapping):
            try:
                candidate = StreamCandidate.from_mapping(item)
            except (TypeError, ValueError):
                log.debug(
                    "provider_item_malformed",
                    provider=provider.value,
                    exc_info=True,
                )
                continue
        else:
            log.debug(
                "provider_item_skipped",
                provider=provider.value,
                item_type=type(item).__name__,
            )
            continue
        out.append(
            dataclasses.replace(
                candidate,
                provider_name=candidate.provider_name or provider.name,
                provider_value=candidate.provider_value or provider.value,
            )
        )
    return out


class ProviderRegistry:
    """Keeps providers keyed by ``value`` and fans requests out to them."""

    def __init__(
        self,
        resolvers: HostResolverRegistry,
        *,
        max_concurrent: int = 8,
        provider_timeout: float = 30.0,
        default_enabled: Iterable[str] = (),
    ) -> None:
        self._resolvers = resolvers
        self._providers: dict[str, StreamProviderPort] = {}
        self._max_concurrent = max_concurrent
        self._provider_timeout = provider_timeout
        self._default_enabled = frozenset(default_enabled)

    def __len__(self) -> int:
        return len(self._providers)

    def register(self, provider: StreamProviderPort) -> None:
        if provider.value in self._providers:
            raise DuplicateProviderError(
                f"Provider value '{provider.value}' already exists"
            )
        bind = getattr(provider, "bind", None)
        if callable(bind):
            bind(self._resolvers)
        self._providers[provider.value] = provider
        log.debug("provider_registered", provider=provider.value, name=provider.name)

    def discover(self, directory: Path) -> int:
        """Load every ``*.yaml``/``*.yml``/``*.py`` provider in *directory*.

        Broken files are logged and skipped; duplicates raise.
        Returns the number of providers registered from *directory*.
        """
        if not directory.is_dir():
            log.warning("provider_directory_not_found", directory=str(directory))
            return 0

        loaded = 0
        for path in sorted(directory.iterdir(), key=lambda p: p.name):
            if path.is_dir() or path.name.startswith("_"):
                continue
            suffix = path.suffix.lower()
            try:
                if suffix in {".yaml", ".yml"}:
                    provider: StreamProviderPort = load_yaml_provider(path)
                elif suffix == ".py":
                    provider = load_python_provider(path)
                else:
                    continue
            except ProviderLoadError:
                continue
            self.register(provider)
            loaded += 1

        log.info("providers_discovered", count=loaded, directory=str(directory))
        return loaded

    def get(self, value: str) -> StreamProviderPort:
        try:
            return self._providers[value]
        except KeyError:
            raise ProviderNotFoundError(f"Provider '{value}' not found") from None

    def all(self) -> list[StreamProviderPort]:
        return list(self._providers.values())

    def enabled(self, user_config: Mapping[str, Any] | None = None) -> list[StreamProviderPort]:
        """Providers active for one request.

        Starts from the configured defaults (all providers when none are
        configured) and drops every provider the user switched off.  A
        provider missing from *user_config* stays on.
        """
        base = [
            p
            for p in self._providers.values()
            if not self._default_enabled or p.value in self._default_enabled
        ]
        if not user_config:
            return base
        return [p for p in base if user_config.get(p.value, True) in _ENABLED_VALUES]

    async def dispatch(
        self,
        query: StreamQuery,
        providers: Iterable[StreamProviderPort],
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]:
        """Run *providers* concurrently and flatten their candidates.

        Each provider is bounded by the provider timeout; a failing or
        slow provider contributes nothing and never affects the others.
        """
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _run(provider: StreamProviderPort) -> list[StreamCandidate]:
            async with semaphore:
                try:
                    raw = await asyncio.wait_for(
                        provider.get_streams(query, signal),
                        timeout=self._provider_timeout,
                    )
                except TimeoutError:
                    log.warning(
                        "provider_timeout",
                        provider=provider.value,
                        timeout=self._provider_timeout,
                    )
                    return []
                except Exception:
                    log.warning(
                        "provider_failed",
                        provider=provider.value,
                        imdb_id=query.imdb_id,
                        exc_info=True,
                    )
                    return []
                try:
                    candidates = _normalize_candidates(provider, raw or [])
                except TypeError:
                    log.warning(
                        "provider_output_malformed",
                        provider=provider.value,
                        output_type=type(raw).__name__,
                    )
                    return []
            log.info("provider_done", provider=provider.value, count=len(candidates))
            return candidates

        results = await asyncio.gather(*(_run(p) for p in providers))
        return [candidate for batch in results for candidate in batch]
