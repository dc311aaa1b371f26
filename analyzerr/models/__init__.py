"""
Data models for Analyzerr
"""

from .media_file import UNKNOWN, EnhancedMediaFile, MediaFile, MediaType, QualityTier
from .filters import EpisodeFilters, MovieFilters, QueueFilters
from .queue_item import QueueItem, QueueTotals
from .technical import AudioDetails, ContainerDetails, TechnicalDetails, VideoDetails

__all__ = [
    "UNKNOWN",
    "AudioDetails",
    "ContainerDetails",
    "EnhancedMediaFile",
    "EpisodeFilters",
    "MediaFile",
    "MediaType",
    "MovieFilters",
    "QualityTier",
    "QueueFilters",
    "QueueItem",
    "QueueTotals",
    "TechnicalDetails",
    "VideoDetails",
]
