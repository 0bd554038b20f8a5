from .cache import CachePort
from .host_resolver import HostResolverPort
from .provider import CatalogIdResolverPort, StreamProviderPort, SubtitleLookupPort

__all__ = [
    "CachePort",
    "CatalogIdResolverPort",
    "HostResolverPort",
    "StreamProviderPort",
    "SubtitleLookupPort",
]
