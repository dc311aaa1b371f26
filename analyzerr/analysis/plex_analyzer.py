"""
Library analysis fed by the Plex Media Server API
"""

from typing import Any

from analyzerr.models.media_file import UNKNOWN, MediaFile, MediaType
from analyzerr.services.plex_service import PlexService

from .base_analyzer import LibraryAnalyzer, normalize_codec_label, normalize_resolution, to_int


def _genres(item: dict[str, Any]) -> tuple[str, ...]:
    return tuple(genre.get("tag") or UNKNOWN for genre in item.get("Genre") or [])


def _media_resolution(media: dict[str, Any]) -> str:
    return normalize_resolution(media.get("videoResolution") or media.get("height"))


def files_from_item(item: dict[str, Any]) -> list[MediaFile]:
    """One MediaFile per Media/Part pair of a Plex metadata item"""
    media_type = MediaType.EPISODE if item.get("type") == "episode" else MediaType.MOVIE
    files = []
    for media in item.get("Media") or []:
        for part in media.get("Part") or []:
            files.append(
                MediaFile(
                    id=str(item.get("ratingKey")),
                    title=item.get("title") or UNKNOWN,
                    file_path=part.get("file") or UNKNOWN,
                    file_size=to_int(part.get("size")),
                    resolution=_media_resolution(media),
                    codec=normalize_codec_label(media.get("videoCodec")),
                    year=item.get("year") or None,
                    type=media_type,
                    genres=_genres(item),
                    duration_ms=item.get("duration") or media.get("duration"),
                )
            )
    return files


def title_from_item(item: dict[str, Any]) -> MediaFile:
    """Item-level record used for content analysis"""
    is_show = item.get("type") == "show"
    media = (item.get("Media") or [{}])[0]
    return MediaFile(
        id=str(item.get("ratingKey")),
        title=item.get("title") or UNKNOWN,
        file_path=(media.get("Part") or [{}])[0].get("file") or UNKNOWN,
        file_size=sum(to_int(part.get("size")) for m in item.get("Media") or [] for part in m.get("Part") or []),
        resolution=_media_resolution(media),
        codec=normalize_codec_label(media.get("videoCodec")),
        year=item.get("year") or None,
        type=MediaType.SHOW if is_show else MediaType.MOVIE,
        show_name=item.get("title") if is_show else None,
        episode_count=to_int(item.get("leafCount")) if is_show else None,
        genres=_genres(item),
        duration_ms=item.get("duration"),
    )


class PlexAnalyzer(LibraryAnalyzer):
    """Analyzer that reads nested library trees from Plex."""

    source_name = "plex"

    def __init__(self, service: PlexService, cache, cache_ttl: float = 1800, max_workers: int = 6):
        super().__init__(service, cache, cache_ttl, max_workers)

    def get_libraries(self) -> list[dict[str, Any]]:
        return self.service.get_libraries()

    def _load_files(self, library_id: str) -> list[MediaFile]:
        items = self.service.get_library_items_with_episodes(library_id)
        files = [media_file for item in items for media_file in files_from_item(item)]
        self.logger.info(f"Extracted {len(files)} media files from {len(items)} Plex items")
        return files

    def _load_titles(self, library_id: str) -> list[MediaFile]:
        return [title_from_item(item) for item in self.service.get_library_items(library_id)]
