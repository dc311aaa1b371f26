"""
Filter options for content-acquisition listings
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


def _int_or_none(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _sort_direction(value: Any) -> str:
    return "desc" if str(value or "").lower() == "desc" else "asc"


@dataclass(frozen=True)
class MovieFilters:
    year: int | None = None
    genres: tuple[str, ...] = ()
    quality_profile_id: int | None = None
    sort_by: str | None = None
    sort_direction: str = "asc"

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "MovieFilters":
        genres = args.get("genres") or ""
        return cls(
            year=_int_or_none(args.get("year")),
            genres=tuple(g.strip() for g in genres.split(",") if g.strip()),
            quality_profile_id=_int_or_none(args.get("quality_profile_id")),
            sort_by=args.get("sort_by") or None,
            sort_direction=_sort_direction(args.get("sort_direction")),
        )


@dataclass(frozen=True)
class EpisodeFilters:
    series_id: int | None = None
    season_number: int | None = None
    sort_by: str | None = None
    sort_direction: str = "asc"

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "EpisodeFilters":
        return cls(
            series_id=_int_or_none(args.get("series_id")),
            season_number=_int_or_none(args.get("season_number")),
            sort_by=args.get("sort_by") or None,
            sort_direction=_sort_direction(args.get("sort_direction")),
        )


@dataclass(frozen=True)
class QueueFilters:
    status: str | None = None
    protocol: str | None = None
    download_client: str | None = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "QueueFilters":
        return cls(
            status=(args.get("status") or None),
            protocol=(args.get("protocol") or None),
            download_client=(args.get("download_client") or None),
        )

    def matches(self, item) -> bool:
        """Whether a QueueItem passes every set filter (case-insensitive)"""
        checks = (
            (self.status, item.status),
            (self.protocol, item.protocol),
            (self.download_client, item.download_client),
        )
        return all(wanted is None or (actual or "").lower() == wanted.lower() for wanted, actual in checks)
