"""
Library analysis fed by Tautulli's flat media info tables
"""

from typing import Any

from analyzerr.models.media_file import UNKNOWN, MediaFile, MediaType
from analyzerr.services.tautulli_service import TautulliService

from .base_analyzer import LibraryAnalyzer, normalize_codec_label, normalize_resolution, to_int

MEDIA_INFO_PAGE = 5000


def file_from_row(row: dict[str, Any]) -> MediaFile:
    """Normalize one get_library_media_info row"""
    media_type = row.get("media_type")
    title = row.get("title") or UNKNOWN
    if row.get("grandparent_title"):
        title = f"{row['grandparent_title']} - {title}"

    if media_type == "movie":
        kind = MediaType.MOVIE
    elif media_type == "show":
        kind = MediaType.SHOW
    else:
        kind = MediaType.EPISODE

    genres = tuple(g.strip() for g in (row.get("genres") or "").split(";") if g.strip())
    year = to_int(row.get("year")) or None
    return MediaFile(
        id=str(row.get("rating_key") or row.get("id")),
        title=title,
        file_path=row.get("file") or UNKNOWN,
        file_size=to_int(row.get("file_size")),
        resolution=normalize_resolution(row.get("video_resolution")),
        codec=normalize_codec_label(row.get("video_codec")),
        year=year,
        type=kind,
        show_name=title if kind == MediaType.SHOW else None,
        episode_count=to_int(row.get("child_count")) if kind == MediaType.SHOW else None,
        genres=genres,
        duration_ms=to_int(row.get("duration")) or None,
    )


class TautulliAnalyzer(LibraryAnalyzer):
    """Analyzer that reads pre-flattened library tables from Tautulli."""

    source_name = "tautulli"

    def __init__(self, service: TautulliService, cache, cache_ttl: float = 1800, max_workers: int = 6):
        super().__init__(service, cache, cache_ttl, max_workers)

    def get_libraries(self) -> list[dict[str, Any]]:
        return self.service.get_libraries()

    def _media_info(self, library_id: str) -> dict[str, Any]:
        return self._cached(
            self.cache_key(library_id, "media_info"),
            lambda: self.service.get_library_media_info(library_id, length=MEDIA_INFO_PAGE),
        )

    def _load_files(self, library_id: str) -> list[MediaFile]:
        rows = self._media_info(library_id).get("data") or []
        self.logger.info(f"Retrieved {len(rows)} rows for library {library_id}")
        return [file_from_row(row) for row in rows]

    def _load_titles(self, library_id: str) -> list[MediaFile]:
        return self._load_files(library_id)

    def _library_total_size(self, library_id: str, files: list[MediaFile]) -> int:
        reported = to_int(self._media_info(library_id).get("total_file_size"))
        return reported or sum(f.file_size for f in files)

    def _library_totals(self, library: dict[str, Any]) -> tuple[int, int]:
        info = self.service.get_library_media_info(str(library["id"]), length=1)
        return to_int(info.get("total_file_size")), to_int(info.get("recordsTotal"))
