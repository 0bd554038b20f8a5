"""Registry that dispatches hosting-page URLs to per-host resolvers."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from urllib.parse import urlparse

import structlog

from vegalink.domain.entities.streams import StreamCandidate
from vegalink.domain.ports.host_resolver import HostResolverPort

log = structlog.get_logger(__name__)


def extract_domain(url: str) -> str:
    """Extract the second-level domain from a URL.

    Returns the second-to-last segment of the hostname (e.g.
    ``"hubcloud"`` from ``"https://hubcloud.ink/drive/abc"``).  Handles
    ``www.`` and mirror prefixes automatically since ``parts[-2]`` skips
    them.

    Returns ``""`` when the URL cannot be parsed or has fewer than
    two hostname segments.
    """
    try:
        hostname = urlparse(url).hostname or ""
        parts = hostname.split(".")
        return parts[-2] if len(parts) >= 2 else ""
    except Exception:  # noqa: BLE001
        return ""


class HostResolverRegistry:
    """Dispatches URL resolution to the resolver owning the URL's domain.

    Every resolver run is bounded by *resolve_timeout* and fully
    contained: a timeout, an abort or an unexpected exception yields an
    empty contribution for that URL and never reaches sibling resolvers.
    """

    def __init__(
        self,
        resolvers: Iterable[HostResolverPort] | None = None,
        *,
        resolve_timeout: float = 20.0,
        max_concurrent: int = 10,
    ) -> None:
        self._resolvers: dict[str, HostResolverPort] = {}
        self._domain_map: dict[str, HostResolverPort] = {}
        self._resolve_timeout = resolve_timeout
        self._max_concurrent = max_concurrent
        for resolver in resolvers or []:
            self.register(resolver)

    def register(self, resolver: HostResolverPort) -> None:
        """Register a resolver under its name and every supported domain."""
        self._resolvers[resolver.name] = resolver
        for domain in resolver.supported_domains:
            self._domain_map[domain] = resolver
        log.debug("host_resolver_registered", host=resolver.name)

    @property
    def supported_hosts(self) -> list[str]:
        """Return names of the registered resolvers."""
        return list(self._resolvers.keys())

    def resolver_for(self, url: str) -> HostResolverPort | None:
        """Find the resolver for *url*.

        The second-level domain is authoritative; rotating mirror hosts
        (``new4.gdflix.dad``, ``hubcloud.foo``) fall back to a substring
        match against the full hostname.
        """
        domain = extract_domain(url)
        resolver = self._domain_map.get(domain) or self._resolvers.get(domain)
        if resolver is not None:
            return resolver
        hostname = (urlparse(url).hostname or "").lower()
        for known, candidate in self._domain_map.items():
            if known in hostname:
                return candidate
        return None

    async def resolve(
        self,
        url: str,
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]:
        """Resolve one URL; unknown hosts and failures give ``[]``."""
        resolver = self.resolver_for(url)
        if resolver is None:
            log.debug("host_resolver_missing", url=url)
            return []

        try:
            candidates = await asyncio.wait_for(
                resolver.resolve(url, signal),
                timeout=self._resolve_timeout,
            )
        except TimeoutError:
            log.warning(
                "host_resolve_timeout",
                host=resolver.name,
                url=url,
                timeout=self._resolve_timeout,
            )
            return []
        except Exception:
            log.exception("host_resolve_error", host=resolver.name, url=url)
            return []

        log.info("host_resolve_success", host=resolver.name, count=len(candidates))
        return candidates

    async def resolve_many(
        self,
        urls: Iterable[str],
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]:
        """Resolve many URLs concurrently and flatten the results.

        Order follows *urls*; duplicate source URLs are resolved once.
        """
        unique = list(dict.fromkeys(u for u in urls if u))
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _bounded(url: str) -> list[StreamCandidate]:
            async with semaphore:
                return await self.resolve(url, signal)

        results = await asyncio.gather(*(_bounded(u) for u in unique))
        return [candidate for batch in results for candidate in batch]
