from .streams import (
    UNKNOWN_LANGUAGE,
    MetaGuess,
    PlayableStream,
    StreamCandidate,
    StreamQuery,
    StremioContentType,
    StremioStreamRequest,
    SubtitleEntry,
    SubtitleRef,
)

__all__ = [
    "UNKNOWN_LANGUAGE",
    "MetaGuess",
    "PlayableStream",
    "StreamCandidate",
    "StreamQuery",
    "StremioContentType",
    "StremioStreamRequest",
    "SubtitleEntry",
    "SubtitleRef",
]
