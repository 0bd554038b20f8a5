from .client import StremioSubtitlesClient

__all__ = ["StremioSubtitlesClient"]
