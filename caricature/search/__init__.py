"""
Portrait search subpackage.
Provider adapters, image normalization and the reference image cache.
"""
from .aggregator import PortraitSearchAggregator
from .cache import TempFileCache
from .models import SearchCandidate, SearchResult
from .normalizer import ImageNormalizer
from .providers import (
    BaseImageProvider,
    GoogleImageProvider,
    PexelsImageProvider,
    UnsplashImageProvider,
)

__all__ = [
    "PortraitSearchAggregator",
    "TempFileCache",
    "SearchCandidate",
    "SearchResult",
    "ImageNormalizer",
    "BaseImageProvider",
    "GoogleImageProvider",
    "UnsplashImageProvider",
    "PexelsImageProvider",
]
