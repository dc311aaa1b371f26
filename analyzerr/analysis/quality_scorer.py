"""
Weighted 0-100 quality scoring for a single media file.

Five independently bounded components are summed:

    resolution  0-25
    codec       0-20
    bitrate     0-20
    source      0-20
    technical   0-15
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from analyzerr.models.media_file import QualityTier
from analyzerr.models.technical import AudioDetails, VideoDetails
from analyzerr.utils.parsers import codec_efficiency

logger = logging.getLogger(__name__)

MAX_RESOLUTION = 25
MAX_CODEC = 20
MAX_BITRATE = 20
MAX_SOURCE = 20
MAX_TECHNICAL = 15

# (optimal, minimum, maximum) H.264 video bitrate in kbps
BITRATE_BANDS = {
    "4k": (15000, 8000, 25000),
    "1080p": (8000, 4000, 15000),
    "720p": (4000, 2000, 8000),
    "sd": (2000, 1000, 4000),
}
OVER_PROVISIONED_SCORE = 17

PREMIUM_WEB_SOURCES = {
    "apple": 15,
    "disney+": 14,
    "amazon": 14,
    "netflix": 13,
}

AUDIO_BONUS = [
    (("atmos", "dts:x"), 2.0),
    (("truehd", "dts-hd"), 1.5),
    (("dts", "e-ac3"), 1.0),
    (("ac3",), 0.5),
]

PRESET_BONUS = [
    (re.compile(r"(?<![a-z])(?:veryslow|placebo)(?![a-z])", re.IGNORECASE), 1.5),
    (re.compile(r"(?<![a-z])slower(?![a-z])", re.IGNORECASE), 1.0),
    (re.compile(r"(?<![a-z])slow(?![a-z])", re.IGNORECASE), 0.5),
]
CRF = re.compile(r"crf[ =._-]?(\d{1,2}(?:\.\d+)?)", re.IGNORECASE)
MAX_TUNING_BONUS = 2.0


@dataclass(frozen=True)
class QualityScore:
    components: dict[str, float]
    total_score: float
    tier: QualityTier
    upgrade_reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "components": dict(self.components),
            "total_score": self.total_score,
            "tier": self.tier.value,
            "upgrade_reasons": list(self.upgrade_reasons),
        }


def determine_tier(score: float) -> QualityTier:
    if score >= 85:
        return QualityTier.EXCELLENT
    if score >= 70:
        return QualityTier.GOOD
    if score >= 50:
        return QualityTier.FAIR
    return QualityTier.POOR


class QualityScorer:
    """Pure scoring functions; holds no state between calls."""

    def score(
        self,
        video: VideoDetails,
        file_size: int,
        source_type: str | None,
        audio: AudioDetails | None = None,
        encoding_tool: str | None = None,
        file_path: str | None = None,
        has_multi_audio: bool = False,
        has_subtitles: bool = False,
    ) -> QualityScore:
        components = {
            "resolution": self.resolution_score(video.width, video.height),
            "codec": self.codec_score(video.codec, video.profile, encoding_tool, file_path),
            "bitrate": self.bitrate_score(video.bitrate, video.width, video.height, video.codec),
            "source": self.source_score(source_type),
            "technical": self.technical_score(video, audio, has_multi_audio, has_subtitles),
        }
        components = {name: round(value, 2) for name, value in components.items()}
        total = round(sum(components.values()), 2)

        return QualityScore(
            components=components,
            total_score=total,
            tier=determine_tier(total),
            upgrade_reasons=self.upgrade_reasons(components, video),
        )

    @staticmethod
    def resolution_score(width: int, height: int) -> float:
        pixels = width * height
        if pixels >= 3840 * 2160:
            return 25
        if pixels >= 1920 * 1080:
            return 20
        if pixels >= 1280 * 720:
            return 15
        if pixels >= 720 * 576:
            return 10
        if pixels >= 720 * 480:
            return 5
        return 0

    @staticmethod
    def tuning_bonus(encoding_tool: str | None, file_path: str | None) -> float:
        """Up to +2 for slow presets or a low CRF mentioned in the name or encoder settings"""
        text = " ".join(part for part in (encoding_tool, file_path) if part)
        if not text:
            return 0.0

        bonus = 0.0
        for pattern, value in PRESET_BONUS:
            if pattern.search(text):
                bonus += value
                break

        crf = CRF.search(text)
        if crf:
            crf_value = float(crf.group(1))
            if crf_value <= 18:
                bonus += 1.0
            elif crf_value <= 20:
                bonus += 0.5

        return min(bonus, MAX_TUNING_BONUS)

    def codec_score(
        self, codec: str, profile: str = "", encoding_tool: str | None = None, file_path: str | None = None
    ) -> float:
        codec_lower = (codec or "").lower()
        profile_lower = (profile or "").lower()

        if "av1" in codec_lower:
            base = 20
        elif "h.265" in codec_lower or "hevc" in codec_lower:
            base = 19 if "main 10" in profile_lower else 18
        elif "vp9" in codec_lower:
            base = 16
        elif "h.264" in codec_lower or "avc" in codec_lower:
            base = 14
        elif any(name in codec_lower for name in ("mpeg-4", "xvid", "divx", "vp8")):
            base = 8
        elif "mpeg-2" in codec_lower:
            base = 4
        else:
            return 0

        return min(base + self.tuning_bonus(encoding_tool, file_path), MAX_CODEC)

    @staticmethod
    def bitrate_bands(width: int, height: int, codec: str) -> tuple[float, float, float]:
        """Codec-adjusted (optimal, minimum, maximum) kbps for a resolution"""
        pixels = width * height
        if pixels >= 3840 * 2160:
            band = BITRATE_BANDS["4k"]
        elif pixels >= 1920 * 1080:
            band = BITRATE_BANDS["1080p"]
        elif pixels >= 1280 * 720:
            band = BITRATE_BANDS["720p"]
        else:
            band = BITRATE_BANDS["sd"]
        efficiency = codec_efficiency(codec)
        return band[0] / efficiency, band[1] / efficiency, band[2] / efficiency

    def bitrate_score(self, bitrate_kbps: float, width: int, height: int, codec: str) -> float:
        if bitrate_kbps <= 0:
            return 0.0

        optimal, minimum, maximum = self.bitrate_bands(width, height, codec)
        low_optimal = optimal * 0.8
        high_optimal = optimal * 1.2

        if low_optimal <= bitrate_kbps <= high_optimal:
            return 20.0
        if bitrate_kbps < minimum:
            return 10.0 * bitrate_kbps / minimum
        if bitrate_kbps < low_optimal:
            return 10.0 + 10.0 * (bitrate_kbps - minimum) / (low_optimal - minimum)
        if bitrate_kbps <= maximum:
            return 20.0 - (20.0 - OVER_PROVISIONED_SCORE) * (bitrate_kbps - high_optimal) / (maximum - high_optimal)
        # Over-provisioned files are never penalized below this
        return float(OVER_PROVISIONED_SCORE)

    @staticmethod
    def source_score(source_type: str | None) -> float:
        if not source_type or source_type.lower() == "unknown":
            return 0
        source = source_type.lower()

        if "remux" in source:
            return 20
        if "blu-ray" in source or "bluray" in source:
            return 17
        if "web-dl" in source or "webdl" in source:
            for provider, value in PREMIUM_WEB_SOURCES.items():
                if provider in source:
                    return value
            return 12
        if "webrip" in source or "web-rip" in source:
            return 10
        if "hdtv" in source:
            return 8
        if "dvd" in source:
            return 5
        if "cam" in source or "screener" in source or "telesync" in source:
            return 2
        return 6

    @staticmethod
    def technical_score(
        video: VideoDetails,
        audio: AudioDetails | None = None,
        has_multi_audio: bool = False,
        has_subtitles: bool = False,
    ) -> float:
        score = 0.0

        hdr = video.hdr_format or ""
        if "Dolby Vision" in hdr:
            score += 6
        elif "HDR10+" in hdr:
            score += 5
        elif "HDR10" in hdr:
            score += 4
        elif "HLG" in hdr:
            score += 3

        # H.265 Main 10 already credits the bit depth in the codec score
        codec_lower = (video.codec or "").lower()
        main10_hevc = ("h.265" in codec_lower or "hevc" in codec_lower) and "main 10" in (video.profile or "").lower()
        if video.bit_depth >= 10 and not main10_hevc:
            score += 2

        if "2020" in video.color_space:
            score += 2
        elif "P3" in video.color_space:
            score += 1.5
        elif "709" in video.color_space:
            score += 1

        if audio is not None:
            audio_codec = audio.codec.lower()
            for names, bonus in AUDIO_BONUS:
                if any(name in audio_codec for name in names):
                    score += bonus
                    break

        if has_multi_audio:
            score += 0.5
        if has_subtitles:
            score += 0.5
        if video.scan_type == "Progressive":
            score += 1
        if 23.9 <= video.frame_rate <= 60:
            score += 1

        return min(score, MAX_TECHNICAL)

    @staticmethod
    def upgrade_reasons(components: dict[str, float], video: VideoDetails) -> list[str]:
        reasons = []
        if components["resolution"] < 15:
            reasons.append("Low resolution - consider upgrading to 1080p or 4K")
        if components["codec"] < 15:
            reasons.append("Outdated codec - modern H.265 or AV1 would provide better quality/size ratio")
        if components["bitrate"] < 12:
            reasons.append("Suboptimal bitrate - quality may be compromised")
        if components["source"] < 10:
            reasons.append("Poor source quality - look for Blu-ray or WEB-DL versions")
        if components["technical"] < 10:
            if not video.hdr_format and video.width >= 1920:
                reasons.append("Missing HDR - HDR10 version would provide better visual quality")
            if video.bit_depth < 10 and video.width >= 1920:
                reasons.append("8-bit color depth - 10-bit version would have better color accuracy")
        return reasons

    @staticmethod
    def library_quality_stats(files: list[Any]) -> dict[str, Any]:
        """Average score, tier distribution and upgrade opportunities (Poor + Fair)"""
        distribution = {tier.value: 0 for tier in QualityTier}
        if not files:
            return {"average_score": 0, "distribution": distribution, "upgrade_opportunities": 0}

        for media_file in files:
            distribution[media_file.quality_tier.value] += 1

        average = sum(f.quality_score for f in files) / len(files)
        return {
            "average_score": round(average, 1),
            "distribution": distribution,
            "upgrade_opportunities": distribution[QualityTier.POOR.value] + distribution[QualityTier.FAIR.value],
        }
