"""
Sonarr API service implementation
"""

from datetime import datetime, timezone
from typing import Any

from analyzerr.models.filters import EpisodeFilters

from .base_service import ArrService

EPISODE_SORT_KEYS = {
    "air_date": lambda e: e.get("air_date_utc") or "",
    "title": lambda e: (e.get("title") or "").lower(),
    "series_title": lambda e: (e.get("series_title") or "").lower(),
    "episode": lambda e: (e.get("season_number") or 0, e.get("episode_number") or 0),
}


def _parse_air_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class SonarrService(ArrService):
    """Service for interacting with Sonarr API."""

    service_name = "Sonarr"
    wanted_page_size = 1000

    def get_wanted_episodes(self, filters: EpisodeFilters | None = None) -> list[dict[str, Any]]:
        """
        Get monitored episodes that have no file yet.

        Returns:
            List of wanted episode items
        """
        params: dict[str, Any] = {
            "page": 1,
            "pageSize": self.wanted_page_size,
            "includeSeries": "true",
            "monitored": "true",
        }
        response = self._make_request("GET", "wanted/missing", params=params)
        records = response.get("records", []) if isinstance(response, dict) else response or []

        wanted = [self._simplify(record) for record in records if not record.get("hasFile", False)]
        wanted = self._apply_filters(wanted, filters)
        self.logger.info(f"Found {len(wanted)} wanted episodes")
        return wanted

    def get_missing_episodes(
        self, filters: EpisodeFilters | None = None, now: datetime | None = None
    ) -> list[dict[str, Any]]:
        """
        Get wanted episodes that have already aired.

        Args:
            filters: Optional series/season filters and sort order
            now: Reference time, defaults to the current UTC time

        Returns:
            List of missing episode items
        """
        now = now or datetime.now(timezone.utc)
        missing = []
        for episode in self.get_wanted_episodes(filters):
            aired = _parse_air_date(episode["air_date_utc"])
            if aired is not None and aired <= now:
                missing.append(episode)

        self.logger.info(f"Found {len(missing)} missing episodes")
        return missing

    @staticmethod
    def _simplify(record: dict[str, Any]) -> dict[str, Any]:
        series = record.get("series") or {}
        return {
            "id": record["id"],
            "series_id": record.get("seriesId"),
            "series_title": series.get("title"),
            "title": record.get("title", "Unknown"),
            "season_number": record.get("seasonNumber"),
            "episode_number": record.get("episodeNumber"),
            "air_date_utc": record.get("airDateUtc"),
            "monitored": record.get("monitored", False),
            "has_file": record.get("hasFile", False),
        }

    @staticmethod
    def _apply_filters(episodes: list[dict[str, Any]], filters: EpisodeFilters | None) -> list[dict[str, Any]]:
        if not filters:
            return episodes

        if filters.series_id is not None:
            episodes = [e for e in episodes if e["series_id"] == filters.series_id]
        if filters.season_number is not None:
            episodes = [e for e in episodes if e["season_number"] == filters.season_number]
        if filters.sort_by in EPISODE_SORT_KEYS:
            episodes = sorted(
                episodes, key=EPISODE_SORT_KEYS[filters.sort_by], reverse=filters.sort_direction == "desc"
            )
        return episodes
