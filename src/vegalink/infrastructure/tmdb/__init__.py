from .client import HttpxTmdbClient

__all__ = ["HttpxTmdbClient"]
