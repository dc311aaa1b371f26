"""
Enhanced analysis: per-file technical inference and quality scoring on top
of a library's size analysis
"""

import logging
from typing import Any

from analyzerr.models.media_file import UNKNOWN, EnhancedMediaFile, MediaFile, MediaType, QualityTier
from analyzerr.utils.cache import CacheBackend
from analyzerr.utils.formatters import format_bitrate
from analyzerr.utils.pagination import LIMIT_ALL, validate_pagination_params
from analyzerr.utils.parsers import MediaParser

from .base_analyzer import LibraryAnalyzer, percentage
from .quality_scorer import QualityScorer

MOVIE_SECONDS = 7200
EPISODE_SECONDS = 2700
MAX_RECOMMENDATIONS = 20
H265_SAVINGS = 0.3


def estimate_duration(media_file: MediaFile) -> float:
    """Runtime in seconds, from metadata when present, otherwise a per-type guess"""
    if media_file.duration_ms:
        return media_file.duration_ms / 1000
    if media_file.type == MediaType.EPISODE:
        return EPISODE_SECONDS
    if media_file.type == MediaType.SHOW:
        return (media_file.episode_count or 1) * EPISODE_SECONDS
    return MOVIE_SECONDS


def _from_dict(data: dict[str, Any]) -> MediaFile:
    return MediaFile(
        id=data["id"],
        title=data["title"],
        file_path=data.get("file_path", UNKNOWN),
        file_size=data.get("file_size", 0),
        resolution=data.get("resolution", UNKNOWN),
        codec=data.get("codec", UNKNOWN),
        year=data.get("year"),
        type=MediaType(data.get("type", "movie")),
        show_name=data.get("show_name"),
        episode_count=data.get("episode_count"),
        genres=tuple(data.get("genres") or ()),
        duration_ms=data.get("duration_ms"),
    )


class EnhancedAnalyzer:
    """Enriches size-analysis files and derives library-wide quality breakdowns."""

    cache_prefix = "enhanced_analysis"

    def __init__(
        self,
        analyzer: LibraryAnalyzer,
        cache: CacheBackend,
        scorer: QualityScorer | None = None,
        enrichment_ttl: float = 86400,
    ):
        self.analyzer = analyzer
        self.cache = cache
        self.scorer = scorer or QualityScorer()
        self.enrichment_ttl = enrichment_ttl
        self.logger = logging.getLogger(self.__class__.__name__)

    def enrich(self, media_file: MediaFile) -> EnhancedMediaFile:
        """Attach technical details and a quality score, cached per file identity"""
        key = f"{self.cache_prefix}:{media_file.identity}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            enhanced = self._enrich(media_file)
        except Exception as e:
            self.logger.error(f"Failed to enrich file {media_file.id}: {e}")
            return self.fallback(media_file)

        self.cache.set(key, enhanced, self.enrichment_ttl)
        return enhanced

    def _enrich(self, media_file: MediaFile) -> EnhancedMediaFile:
        name = media_file.inference_text
        duration = estimate_duration(media_file)
        details = MediaParser.infer_technical_details(
            name,
            file_size=media_file.file_size,
            duration_seconds=duration,
            codec_hint=media_file.codec,
            resolution_hint=media_file.resolution,
        )
        video = details.video
        result = self.scorer.score(
            video,
            media_file.file_size,
            details.source_type,
            audio=details.audio,
            encoding_tool=details.encoding_tool,
            file_path=name,
        )

        return EnhancedMediaFile(
            **self._base_fields(media_file),
            video_codec=video.codec,
            video_profile=video.profile,
            video_level=video.level,
            bit_depth=video.bit_depth,
            color_space=video.color_space,
            color_range=video.color_range,
            chroma_subsampling=video.chroma_subsampling,
            frame_rate=video.frame_rate,
            hdr_format=video.hdr_format,
            scan_type=video.scan_type,
            resolution_source=video.resolution_source,
            video_bitrate=video.bitrate,
            audio_bitrate=details.audio.bitrate,
            overall_bitrate=details.container.overall_bitrate,
            bitrate_efficiency=self.bitrate_efficiency(media_file.file_size, duration),
            audio_codec=details.audio.codec,
            audio_channels=details.audio.channels,
            container_format=details.container.format,
            source_type=details.source_type,
            release_group=details.release_group,
            encoding_tool=details.encoding_tool,
            quality_score=result.total_score,
            quality_tier=result.tier,
            upgrade_candidate=result.tier == QualityTier.POOR or len(result.upgrade_reasons) > 2,
            upgrade_reasons=tuple(result.upgrade_reasons),
            quality_components=dict(result.components),
        )

    @staticmethod
    def _base_fields(media_file: MediaFile) -> dict[str, Any]:
        return {
            "id": media_file.id,
            "title": media_file.title,
            "file_path": media_file.file_path,
            "file_size": media_file.file_size,
            "resolution": media_file.resolution,
            "codec": media_file.codec,
            "year": media_file.year,
            "type": media_file.type,
            "show_name": media_file.show_name,
            "episode_count": media_file.episode_count,
            "genres": media_file.genres,
            "duration_ms": media_file.duration_ms,
        }

    def fallback(self, media_file: MediaFile) -> EnhancedMediaFile:
        """Minimal record used when enrichment fails"""
        return EnhancedMediaFile(
            **self._base_fields(media_file),
            quality_score=0.0,
            quality_tier=QualityTier.POOR,
            upgrade_candidate=False,
            upgrade_reasons=("Technical analysis failed",),
        )

    @staticmethod
    def bitrate_efficiency(file_size: int, duration_seconds: float) -> float:
        """MB per hour of runtime"""
        if not duration_seconds:
            return 0.0
        return round((file_size / (1024 * 1024)) / (duration_seconds / 3600), 2)

    def get_enhanced_size_analysis(
        self, library_id: str, limit: int | None = LIMIT_ALL, offset: int | None = 0
    ) -> dict[str, Any]:
        limit, offset = validate_pagination_params(limit, offset, "size")
        key = self.analyzer.cache_key(library_id, "enhanced", limit, offset)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        basic = self.analyzer.get_size_analysis(library_id, limit, offset)
        data = basic["data"]
        self.logger.info(f"Enhancing {len(data['largest_files'])} files for library {library_id}")

        enhanced_files = [self.enrich(_from_dict(f)) for f in data["largest_files"]]
        result = dict(data)
        result["largest_files"] = [f.to_dict() for f in enhanced_files]
        if data.get("has_episodes") and "episode_breakdown" in data:
            result["episode_breakdown"] = [self.enrich(_from_dict(f)).to_dict() for f in data["episode_breakdown"]]

        result.update(
            {
                "quality_distribution": self.quality_distribution(enhanced_files),
                "codec_distribution": self.codec_distribution(enhanced_files),
                "technical_breakdown": self.technical_breakdown(enhanced_files),
                "upgrade_recommendations": self.upgrade_recommendations(enhanced_files),
                "library_quality": self.scorer.library_quality_stats(enhanced_files),
            }
        )

        response = {"data": result, "pagination": basic["pagination"]}
        self.cache.set(key, response, self.analyzer.cache_ttl)
        return response

    @staticmethod
    def quality_distribution(files: list[EnhancedMediaFile]) -> dict[str, int]:
        distribution = {tier.value.lower(): 0 for tier in QualityTier}
        for media_file in files:
            distribution[media_file.quality_tier.value.lower()] += 1
        return distribution

    @staticmethod
    def codec_distribution(files: list[EnhancedMediaFile]) -> dict[str, dict[str, Any]]:
        grouped: dict[str, list[EnhancedMediaFile]] = {}
        for media_file in files:
            grouped.setdefault(media_file.video_codec, []).append(media_file)

        return {
            codec: {
                "count": len(members),
                "total_size": sum(f.file_size for f in members),
                "average_quality": round(sum(f.quality_score for f in members) / len(members), 2),
                "percentage": percentage(len(members), len(files)),
            }
            for codec, members in grouped.items()
        }

    @staticmethod
    def technical_breakdown(files: list[EnhancedMediaFile]) -> dict[str, Any]:
        hdr_formats: dict[str, int] = {}
        bit_depths: dict[str, int] = {}
        color_spaces: dict[str, int] = {}
        for media_file in files:
            if media_file.hdr_format:
                hdr_formats[media_file.hdr_format] = hdr_formats.get(media_file.hdr_format, 0) + 1
            depth = f"{media_file.bit_depth}-bit"
            bit_depths[depth] = bit_depths.get(depth, 0) + 1
            color_spaces[media_file.color_space] = color_spaces.get(media_file.color_space, 0) + 1

        hdr_count = sum(hdr_formats.values())
        return {
            "hdr_content": {
                "count": hdr_count,
                "percentage": percentage(hdr_count, len(files)),
                "formats": hdr_formats,
            },
            "bit_depth_distribution": bit_depths,
            "color_space_distribution": color_spaces,
        }

    @staticmethod
    def recommended_upgrade(media_file: EnhancedMediaFile) -> str:
        improvements = []
        if media_file.quality_score < 50:
            improvements.append("Higher quality source")
        if media_file.video_codec == "H.264":
            improvements.append("H.265 encoding")
        is_uhd = media_file.resolution in ("4K", "2160p")
        if not media_file.hdr_format and is_uhd:
            improvements.append("HDR version")
        if media_file.bit_depth < 10 and is_uhd:
            improvements.append("10-bit color depth")
        return ", ".join(improvements) or "Better source quality"

    def upgrade_recommendations(self, files: list[EnhancedMediaFile]) -> list[dict[str, Any]]:
        """Upgrade candidates, worst quality first"""
        candidates = sorted((f for f in files if f.upgrade_candidate), key=lambda f: f.quality_score)
        recommendations = []
        for media_file in candidates[:MAX_RECOMMENDATIONS]:
            savings = media_file.file_size * H265_SAVINGS if media_file.video_codec == "H.264" else None
            recommendations.append(
                {
                    "file_id": media_file.id,
                    "title": media_file.title,
                    "current_quality": media_file.quality_tier.value,
                    "quality_score": media_file.quality_score,
                    "current_bitrate": format_bitrate(media_file.video_bitrate),
                    "recommended_upgrade": self.recommended_upgrade(media_file),
                    "reasons": list(media_file.upgrade_reasons),
                    "potential_savings": savings,
                }
            )
        return recommendations
