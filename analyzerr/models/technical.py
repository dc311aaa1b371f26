"""
Technical detail records produced by the filename inferencer
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class VideoDetails:
    """Video stream characteristics"""
    codec: str
    profile: str
    level: str
    bit_depth: int
    color_space: str
    color_range: str
    chroma_subsampling: str
    frame_rate: float
    hdr_format: str | None
    scan_type: str
    bitrate: float  # kbps
    width: int
    height: int
    resolution_source: str = "default"  # metadata, filename or default


@dataclass(frozen=True)
class AudioDetails:
    """Primary audio stream characteristics"""
    codec: str
    channels: int
    channel_layout: str
    sample_rate: int
    bit_depth: int
    bitrate: float  # kbps


@dataclass(frozen=True)
class ContainerDetails:
    """Container-level characteristics"""
    format: str
    size: int
    duration: float  # seconds
    overall_bitrate: float  # kbps


@dataclass(frozen=True)
class TechnicalDetails:
    """Everything the inferencer knows about one file"""
    video: VideoDetails
    audio: AudioDetails
    container: ContainerDetails
    source_type: str
    release_group: str | None
    encoding_tool: str
