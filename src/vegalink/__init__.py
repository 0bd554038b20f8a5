"""vegalink: resolve hosting pages into ranked, playable Stremio streams."""

__version__ = "0.1.0"
