"""
Technical detail inference from file names and release titles.

Nothing here touches the filesystem: every value is derived from the name
(plus optional codec/resolution hints from upstream metadata) using ordered,
case-insensitive pattern rules where the first match wins.
"""

import logging
import re

from analyzerr.models.technical import AudioDetails, ContainerDetails, TechnicalDetails, VideoDetails

logger = logging.getLogger(__name__)


def _token(pattern: str, tail: str = r"(?![a-z0-9])") -> re.Pattern:
    """Compile a pattern that must not be glued to surrounding letters or digits"""
    return re.compile(rf"(?<![a-z0-9])(?:{pattern}){tail}", re.IGNORECASE)


# Audio tokens are often followed directly by a channel count (DDP5.1, AAC2.0)
_AUDIO_TAIL = r"(?![a-z])"

CODEC_PATTERNS: list[tuple[re.Pattern, str]] = [
    (_token(r"x265|hevc|h[.\s]?265"), "H.265"),
    (_token(r"x264|avc|h[.\s]?264"), "H.264"),
    (_token(r"av1|av01"), "AV1"),
    (_token(r"vp9"), "VP9"),
    (_token(r"vp8"), "VP8"),
    (_token(r"xvid"), "XviD"),
    (_token(r"divx"), "DivX"),
    (_token(r"mpeg-?2"), "MPEG-2"),
    (_token(r"mpeg-?4"), "MPEG-4"),
]

CODEC_ALIASES = {
    "h264": "H.264", "h.264": "H.264", "avc": "H.264", "avc1": "H.264", "x264": "H.264",
    "h265": "H.265", "h.265": "H.265", "hevc": "H.265", "hev1": "H.265", "hvc1": "H.265", "x265": "H.265",
    "av1": "AV1", "av01": "AV1",
    "vp9": "VP9", "vp8": "VP8",
    "xvid": "XviD", "divx": "DivX",
    "mpeg4": "MPEG-4", "mpeg-4": "MPEG-4",
    "mpeg2": "MPEG-2", "mpeg2video": "MPEG-2", "mpeg-2": "MPEG-2",
}

# (pattern, width, height), highest resolution first
RESOLUTION_PATTERNS: list[tuple[re.Pattern, int, int]] = [
    (_token(r"2160p|4k|uhd"), 3840, 2160),
    (_token(r"1080[pi]|fhd"), 1920, 1080),
    (_token(r"720p"), 1280, 720),
    (_token(r"576[pi]"), 720, 576),
    (_token(r"480[pi]"), 720, 480),
]
DEFAULT_RESOLUTION = (1920, 1080)

HDR_PATTERNS: list[tuple[re.Pattern, str]] = [
    (_token(r"dolby[ .-]?vision|dovi|dv"), "Dolby Vision"),
    (_token(r"hdr10(?:\+|plus)", tail=r"(?![a-z0-9+])"), "HDR10+"),
    (_token(r"hdr10|hdr"), "HDR10"),
    (_token(r"hlg"), "HLG"),
]

BIT_DEPTH_12 = _token(r"12[ .-]?bits?")
BIT_DEPTH_10 = _token(r"10[ .-]?bits?|main[ .]?10|hi10p?")

HIGH_PROFILE = _token(r"high(?:[ .]?profile)?")
COLOR_P3 = _token(r"p3|dci[ .-]?p3")
INTERLACED = _token(r"1080i|576i|480i|interlaced")
FPS = re.compile(r"(?<![0-9])(\d{2}(?:\.\d{1,3})?)[ .]?fps(?![a-z])", re.IGNORECASE)
NTSC_RATES = _token(r"23\.976|29\.97|59\.94")
DEFAULT_FRAME_RATE = 23.976

AUDIO_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"truehd.*atmos|atmos.*truehd", re.IGNORECASE), "TrueHD Atmos"),
    (re.compile(r"(?:ddp|dd\+|e-?ac-?3).*atmos|atmos.*(?:ddp|dd\+|e-?ac-?3)", re.IGNORECASE), "E-AC3 Atmos"),
    (_token(r"atmos", _AUDIO_TAIL), "TrueHD Atmos"),
    (_token(r"dts[-.: ]?x"), "DTS:X"),
    (_token(r"truehd", _AUDIO_TAIL), "TrueHD"),
    (_token(r"dts[-. ]?hd(?:[-. ]?ma)?", _AUDIO_TAIL), "DTS-HD MA"),
    (_token(r"dts", _AUDIO_TAIL), "DTS"),
    (_token(r"ddp|dd\+|e-?ac-?3", _AUDIO_TAIL), "E-AC3"),
    (_token(r"ac-?3|dd(?=[257]\.[01])", _AUDIO_TAIL), "AC3"),
    (_token(r"flac", _AUDIO_TAIL), "FLAC"),
    (_token(r"aac", _AUDIO_TAIL), "AAC"),
    (_token(r"mp3", _AUDIO_TAIL), "MP3"),
]
DEFAULT_AUDIO_CODEC = "AAC"

AUDIO_BITRATES = {
    "TrueHD Atmos": 3000,
    "TrueHD": 3000,
    "DTS:X": 1500,
    "DTS-HD MA": 1500,
    "DTS": 1509,
    "E-AC3 Atmos": 768,
    "E-AC3": 640,
    "AC3": 448,
    "FLAC": 900,
    "AAC": 128,
    "MP3": 320,
}

CHANNEL_PATTERNS: list[tuple[re.Pattern, int]] = [
    (re.compile(r"(?<![0-9])7\.1(?![0-9])"), 8),
    (re.compile(r"(?<![0-9])5\.1(?![0-9])"), 6),
    (re.compile(r"(?<![0-9])2\.0(?![0-9])|stereo", re.IGNORECASE), 2),
    (re.compile(r"(?<![0-9])1\.0(?![0-9])|mono", re.IGNORECASE), 1),
]
CHANNEL_LAYOUTS = {1: "Mono", 2: "Stereo", 6: "5.1", 8: "7.1"}

CONTAINER_FORMATS = {
    "mkv": "Matroska",
    "mp4": "MP4",
    "m4v": "MP4",
    "avi": "AVI",
    "mov": "QuickTime",
    "ts": "MPEG-TS",
    "m2ts": "MPEG-TS",
    "wmv": "WMV",
    "webm": "WebM",
}
EXTENSION = re.compile(r"\.([a-z0-9]{2,4})$", re.IGNORECASE)

STREAMING_PROVIDERS: list[tuple[re.Pattern, str]] = [
    (_token(r"atvp|aptv|apple[ .]?tv\+?"), "Apple"),
    (_token(r"dsnp|dsny|disney\+?|disney[ .]?plus"), "Disney+"),
    (_token(r"amzn|amazon"), "Amazon"),
    (_token(r"nf|netflix"), "Netflix"),
]

SOURCE_PATTERNS: list[tuple[re.Pattern, str]] = [
    (_token(r"remux|bdremux"), "Blu-ray Remux"),
    (_token(r"blu[-. ]?ray|bdrip|brrip|bd25|bd50"), "Blu-ray"),
    (_token(r"web[-. ]?dl"), "WEB-DL"),
    (_token(r"web[-. ]?rip"), "WEBRip"),
    (_token(r"hdtv|pdtv|dsr"), "HDTV"),
    (_token(r"camrip|hd[-. ]?cam|cam|telesync|hdts"), "CAM"),
    (_token(r"dvdscr|screener|scr"), "Screener"),
    (_token(r"dvd(?:rip|r|5|9)?"), "DVD"),
    (_token(r"web"), "WEB-DL"),
]

RELEASE_GROUP_DASH = re.compile(r"-([A-Za-z0-9]{2,10})$")
RELEASE_GROUP_BRACKET = re.compile(r"\[([A-Za-z0-9]{2,10})\]$")
# Trailing tokens that look like groups but are part of a release tag
NOT_RELEASE_GROUPS = {"dl", "rip", "hd", "ma", "x264", "x265", "h264", "h265", "hevc", "avc"}

ENCODER_PATTERNS: list[tuple[re.Pattern, str]] = [
    (_token(r"x265"), "x265"),
    (_token(r"x264"), "x264"),
    (_token(r"svt[-.]?av1|aomenc|av1"), "AV1"),
    (_token(r"vp9|libvpx"), "VP9"),
    (_token(r"xvid"), "XviD"),
]

# Relative compression efficiency versus H.264
CODEC_EFFICIENCY = {
    "AV1": 2.0,
    "H.265": 1.5,
    "VP9": 1.4,
    "H.264": 1.0,
}
LEGACY_CODEC_EFFICIENCY = 0.8


def codec_efficiency(codec: str) -> float:
    """Efficiency multiplier used to scale H.264 bitrate expectations"""
    return CODEC_EFFICIENCY.get(MediaParser.normalize_codec(codec) or codec, LEGACY_CODEC_EFFICIENCY)


def _first_match(text: str, patterns: list[tuple[re.Pattern, str]]) -> str | None:
    for pattern, value in patterns:
        if pattern.search(text):
            return value
    return None


class MediaParser:
    """Utility class for inferring technical media details from names"""

    @staticmethod
    def normalize_codec(codec: str | None) -> str | None:
        """Map an upstream codec label (hevc, avc1, H264...) to a canonical name"""
        if not codec:
            return None
        key = codec.strip().lower()
        if key in ("", "unknown"):
            return None
        return CODEC_ALIASES.get(key) or (codec if codec in CODEC_EFFICIENCY else None)

    @staticmethod
    def parse_codec(name: str, hint: str | None = None) -> str:
        """Codec from metadata hint first, then the name, defaulting to H.264"""
        return MediaParser.normalize_codec(hint) or _first_match(name, CODEC_PATTERNS) or "H.264"

    @staticmethod
    def resolution_from_label(label: str | None) -> tuple[int, int] | None:
        """Dimensions for a normalized resolution label such as '1080p', '4K' or 'SD'"""
        if not label:
            return None
        key = label.strip().lower()
        if key in ("4k", "uhd"):
            return 3840, 2160
        if key == "sd":
            return 720, 480
        match = re.fullmatch(r"(\d{3,4})[pi]?", key)
        if not match:
            return None
        lines = int(match.group(1))
        if lines >= 2160:
            return 3840, 2160
        if lines >= 1080:
            return 1920, 1080
        if lines >= 720:
            return 1280, 720
        if lines >= 576:
            return 720, 576
        return 720, lines

    @staticmethod
    def parse_resolution(name: str, hint: str | None = None) -> tuple[int, int, str]:
        """Return (width, height, source) where source is metadata, filename or default"""
        from_hint = MediaParser.resolution_from_label(hint)
        if from_hint:
            return from_hint[0], from_hint[1], "metadata"

        for pattern, width, height in RESOLUTION_PATTERNS:
            if pattern.search(name):
                return width, height, "filename"

        return DEFAULT_RESOLUTION[0], DEFAULT_RESOLUTION[1], "default"

    @staticmethod
    def parse_hdr(name: str) -> str | None:
        return _first_match(name, HDR_PATTERNS)

    @staticmethod
    def parse_bit_depth(name: str, hdr_format: str | None = None) -> int:
        if BIT_DEPTH_12.search(name):
            return 12
        if BIT_DEPTH_10.search(name):
            return 10
        # HDR formats are only mastered at 10 bits or more
        return 10 if hdr_format else 8

    @staticmethod
    def profile_for(codec: str, bit_depth: int, name: str = "") -> str:
        if codec == "H.264":
            if bit_depth >= 10:
                return "High 10"
            return "High" if HIGH_PROFILE.search(name) else "Main"
        if codec in ("H.265", "AV1"):
            return "Main 10" if bit_depth >= 10 else "Main"
        return "Unknown"

    @staticmethod
    def level_for(codec: str, width: int, height: int) -> str:
        if codec not in ("H.264", "H.265"):
            return "Unknown"
        pixels = width * height
        if pixels >= 3840 * 2160:
            return "5.1"
        if pixels >= 1920 * 1080:
            return "4.0"
        if pixels >= 1280 * 720:
            return "3.1"
        return "3.0"

    @staticmethod
    def parse_color_space(name: str, hdr_format: str | None) -> str:
        if hdr_format:
            return "Rec. 2020"
        if COLOR_P3.search(name):
            return "DCI-P3"
        return "Rec. 709"

    @staticmethod
    def parse_frame_rate(name: str) -> float:
        match = FPS.search(name)
        if match:
            return float(match.group(1))
        match = NTSC_RATES.search(name)
        if match:
            return float(match.group(0))
        return DEFAULT_FRAME_RATE

    @staticmethod
    def parse_audio_codec(name: str) -> str:
        return _first_match(name, AUDIO_PATTERNS) or DEFAULT_AUDIO_CODEC

    @staticmethod
    def parse_channels(name: str, audio_codec: str) -> int:
        for pattern, channels in CHANNEL_PATTERNS:
            if pattern.search(name):
                return channels
        return 8 if "Atmos" in audio_codec else 2

    @staticmethod
    def parse_container(name: str) -> str:
        match = EXTENSION.search(name)
        if not match:
            return "Unknown"
        return CONTAINER_FORMATS.get(match.group(1).lower(), "Unknown")

    @staticmethod
    def parse_source_type(name: str) -> str:
        source = _first_match(name, SOURCE_PATTERNS)
        if source is None:
            return "Unknown"
        if source == "WEB-DL":
            provider = _first_match(name, STREAMING_PROVIDERS)
            if provider:
                return f"{provider} WEB-DL"
        return source

    @staticmethod
    def parse_release_group(name: str) -> str | None:
        """Group tag at the very end of the name: '-GROUP' or '[GROUP]'"""
        stem = re.split(r"[\\/]", name)[-1]
        extension = EXTENSION.search(stem)
        if extension and extension.group(1).lower() in CONTAINER_FORMATS:
            stem = stem[: extension.start()]
        stem = stem.strip()

        match = RELEASE_GROUP_BRACKET.search(stem)
        if match and not MediaParser._is_release_tag(match.group(1)):
            return match.group(1)

        # Plain titles like "Spider-Man" only count when the name carries release tags
        looks_like_release = _first_match(stem, CODEC_PATTERNS) or _first_match(stem, SOURCE_PATTERNS) or any(
            pattern.search(stem) for pattern, _, _ in RESOLUTION_PATTERNS
        )
        match = RELEASE_GROUP_DASH.search(stem)
        if looks_like_release and match and not MediaParser._is_release_tag(match.group(1)):
            return match.group(1)
        return None

    @staticmethod
    def _is_release_tag(token: str) -> bool:
        """True for quality tags such as 1080p, BluRay or x264 that are not group names"""
        if token.lower() in NOT_RELEASE_GROUPS:
            return True
        if any(pattern.fullmatch(token) for pattern, _, _ in RESOLUTION_PATTERNS):
            return True
        return any(pattern.fullmatch(token) for pattern, _ in CODEC_PATTERNS + SOURCE_PATTERNS)

    @staticmethod
    def parse_encoding_tool(name: str) -> str:
        return _first_match(name, ENCODER_PATTERNS) or "Unknown"

    @staticmethod
    def estimate_video_bitrate(width: int, height: int, codec: str) -> float:
        """Typical video bitrate (kbps) for a resolution, scaled by codec efficiency"""
        pixels = width * height
        if pixels >= 3840 * 2160:
            base = 15000
        elif pixels >= 1920 * 1080:
            base = 8000
        elif pixels >= 1280 * 720:
            base = 4000
        else:
            base = 2000
        return round(base / codec_efficiency(codec))

    @staticmethod
    def infer_technical_details(
        name: str,
        file_size: int = 0,
        duration_seconds: float | None = None,
        codec_hint: str | None = None,
        resolution_hint: str | None = None,
    ) -> TechnicalDetails:
        """Infer everything we can about a file from its name.

        Args:
            name: File path or display title
            file_size: Size in bytes, used to derive real bitrates when known
            duration_seconds: Runtime used together with file_size
            codec_hint: Codec reported by upstream metadata
            resolution_hint: Resolution label reported by upstream metadata

        Returns:
            TechnicalDetails; values that could not be found fall back to defaults
        """
        name = name or ""
        codec = MediaParser.parse_codec(name, codec_hint)
        width, height, resolution_source = MediaParser.parse_resolution(name, resolution_hint)
        hdr_format = MediaParser.parse_hdr(name)
        bit_depth = MediaParser.parse_bit_depth(name, hdr_format)

        audio_codec = MediaParser.parse_audio_codec(name)
        channels = MediaParser.parse_channels(name, audio_codec)
        audio_bitrate = AUDIO_BITRATES.get(audio_codec, 128)

        overall_bitrate = 0.0
        video_bitrate = 0.0
        if file_size > 0 and duration_seconds and duration_seconds > 0:
            overall_bitrate = round(file_size * 8 / 1000 / duration_seconds, 2)
            video_bitrate = round(overall_bitrate - audio_bitrate, 2)
        if video_bitrate <= 0:
            video_bitrate = MediaParser.estimate_video_bitrate(width, height, codec)

        if resolution_source == "default":
            logger.debug(f"No resolution marker in '{name}', assuming {width}x{height}")

        video = VideoDetails(
            codec=codec,
            profile=MediaParser.profile_for(codec, bit_depth, name),
            level=MediaParser.level_for(codec, width, height),
            bit_depth=bit_depth,
            color_space=MediaParser.parse_color_space(name, hdr_format),
            color_range="Limited",
            chroma_subsampling="4:2:0",
            frame_rate=MediaParser.parse_frame_rate(name),
            hdr_format=hdr_format,
            scan_type="Interlaced" if INTERLACED.search(name) else "Progressive",
            bitrate=video_bitrate,
            width=width,
            height=height,
            resolution_source=resolution_source,
        )
        audio = AudioDetails(
            codec=audio_codec,
            channels=channels,
            channel_layout=CHANNEL_LAYOUTS.get(channels, f"{channels} channels"),
            sample_rate=48000,
            bit_depth=24 if audio_codec.startswith(("DTS", "TrueHD", "FLAC")) else 16,
            bitrate=audio_bitrate,
        )
        container = ContainerDetails(
            format=MediaParser.parse_container(name),
            size=file_size,
            duration=duration_seconds or 0.0,
            overall_bitrate=overall_bitrate,
        )

        return TechnicalDetails(
            video=video,
            audio=audio,
            container=container,
            source_type=MediaParser.parse_source_type(name),
            release_group=MediaParser.parse_release_group(name),
            encoding_tool=MediaParser.parse_encoding_tool(name),
        )
