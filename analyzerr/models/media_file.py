"""
Normalized media file data models for Analyzerr
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

UNKNOWN = "Unknown"


class MediaType(Enum):
    """Media type enumeration"""
    MOVIE = "movie"
    EPISODE = "episode"
    SHOW = "show"


class QualityTier(Enum):
    """Quality buckets derived from the total quality score"""
    EXCELLENT = "Excellent"  # 85-100
    GOOD = "Good"            # 70-84
    FAIR = "Fair"            # 50-69
    POOR = "Poor"            # 0-49


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass(frozen=True)
class MediaFile:
    """A single file (or an aggregated show) as seen by the analysis layer"""
    id: str
    title: str
    file_path: str = UNKNOWN
    file_size: int = 0
    resolution: str = UNKNOWN
    codec: str = UNKNOWN
    year: int | None = None
    type: MediaType = MediaType.MOVIE
    # Aggregated TV entries
    show_name: str | None = None
    episode_count: int | None = None
    # Item-level metadata carried along for content analysis
    genres: tuple[str, ...] = ()
    duration_ms: int | None = None

    def __post_init__(self):
        """Validate media file after initialization"""
        if self.file_size < 0:
            raise ValueError(f"file_size must be >= 0, got {self.file_size}")

    @property
    def identity(self) -> str:
        """Stable key for per-file caches"""
        if self.type == MediaType.SHOW:
            # Aggregated show ids are lossy slugs of the show name
            return f"{self.type.value}:{self.id}:{self.show_name or self.title}:{self.file_path}"
        return f"{self.type.value}:{self.id}:{self.file_path}"

    @property
    def inference_text(self) -> str:
        """Text the technical inferencer should parse for this file"""
        if self.type == MediaType.SHOW or not self.file_path or self.file_path == UNKNOWN:
            return self.title
        return self.file_path

    def to_dict(self) -> dict[str, Any]:
        return {f.name: _serialize(getattr(self, f.name)) for f in fields(self)}

    def __str__(self) -> str:
        year_str = f" ({self.year})" if self.year else ""
        if self.type == MediaType.SHOW:
            return f"{self.title} ({self.episode_count or 0} episodes)"
        return f"{self.title}{year_str}"


@dataclass(frozen=True)
class EnhancedMediaFile(MediaFile):
    """MediaFile enriched with inferred technical details and a quality score"""
    # Technical details
    video_codec: str = UNKNOWN
    video_profile: str = UNKNOWN
    video_level: str = UNKNOWN
    bit_depth: int = 8
    color_space: str = UNKNOWN
    color_range: str = UNKNOWN
    chroma_subsampling: str = UNKNOWN
    frame_rate: float = 0.0
    hdr_format: str | None = None
    scan_type: str = UNKNOWN
    resolution_source: str = "default"

    # Bitrates (kbps) and efficiency (MB per hour)
    video_bitrate: float = 0.0
    audio_bitrate: float = 0.0
    overall_bitrate: float = 0.0
    bitrate_efficiency: float = 0.0
    audio_codec: str = UNKNOWN
    audio_channels: int = 0
    container_format: str = UNKNOWN

    # Source info
    source_type: str = UNKNOWN
    release_group: str | None = None
    encoding_tool: str = UNKNOWN

    # Quality scoring
    quality_score: float = 0.0
    quality_tier: QualityTier = QualityTier.POOR
    upgrade_candidate: bool = False
    upgrade_reasons: tuple[str, ...] = ()
    quality_components: dict[str, float] = field(default_factory=dict, hash=False, compare=False)

    @property
    def low_confidence(self) -> bool:
        """True when resolution was assumed rather than read from metadata or the name"""
        return self.resolution_source == "default"
