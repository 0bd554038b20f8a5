from .stream_listing import StreamListingUseCase
from .subtitle_listing import SubtitleListingUseCase

__all__ = ["StreamListingUseCase", "SubtitleListingUseCase"]
