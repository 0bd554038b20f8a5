"""Port for resolving hosting pages into stream candidates."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from vegalink.domain.entities.streams import StreamCandidate


@runtime_checkable
class HostResolverPort(Protocol):
    """Turns one hosting-page URL into zero or more stream candidates.

    Implementations keep all host-specific quirks (redirect tokens,
    guest sessions, button layouts) to themselves and never raise:
    failures degrade to an empty list or a placeholder candidate.
    """

    @property
    def name(self) -> str:
        """Host family this resolver handles (e.g. 'hubcloud', 'gofile')."""
        ...

    @property
    def supported_domains(self) -> frozenset[str]:
        """Second-level domains dispatched to this resolver."""
        ...

    async def resolve(
        self,
        url: str,
        signal: asyncio.Event | None = None,
    ) -> list[StreamCandidate]:
        """Resolve *url*; setting *signal* aborts in-flight fetches."""
        ...
