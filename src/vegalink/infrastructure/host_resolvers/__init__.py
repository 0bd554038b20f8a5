"""Host resolvers that turn hosting-page URLs into stream candidates."""

from __future__ import annotations

from .gdflix import GDFlixResolver
from .gofile import GoFileResolver
from .hubcloud import HubCloudResolver
from .oxxfile import OxxFileResolver
from .registry import HostResolverRegistry, extract_domain

__all__ = [
    "GDFlixResolver",
    "GoFileResolver",
    "HostResolverRegistry",
    "HubCloudResolver",
    "OxxFileResolver",
    "extract_domain",
]
