from .aggregator import (
    aggregate_streams,
    build_subtitles,
    clean_provider_name,
    format_stream_title,
    quality_token,
    stream_to_stremio,
    to_playable,
)

__all__ = [
    "aggregate_streams",
    "build_subtitles",
    "clean_provider_name",
    "format_stream_title",
    "quality_token",
    "stream_to_stremio",
    "to_playable",
]
