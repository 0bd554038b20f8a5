from .base import ResolverProvider
from .link_list import LinkListDefinition, LinkListProvider
from .loader import load_python_provider, load_yaml_provider
from .registry import ProviderRegistry

__all__ = [
    "LinkListDefinition",
    "LinkListProvider",
    "ProviderRegistry",
    "ResolverProvider",
    "load_python_provider",
    "load_yaml_provider",
]
