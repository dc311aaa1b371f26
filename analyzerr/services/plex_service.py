"""
Plex Media Server API service implementation
"""

from typing import Any

from analyzerr.exceptions import AnalyzerrError

from .base_service import BaseService

SECTION_ITEM_PARAMS = {"includeChildren": 1, "includeMedia": 1, "includeFile": 1}
EPISODE_PARAMS = {"includeMedia": 1, "includeFile": 1}


class PlexService(BaseService):
    """Service for reading library sections and items from Plex."""

    service_name = "Plex"
    health_endpoint = "identity"

    def _default_headers(self) -> dict[str, str]:
        return {"X-Plex-Token": self.api_key or "", "Accept": "application/json"}

    def _metadata(self, endpoint: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        response = self._make_request("GET", endpoint, params=params) or {}
        return response.get("MediaContainer", {}).get("Metadata", []) or []

    def get_libraries(self) -> list[dict[str, Any]]:
        """
        Get all library sections.

        Returns:
            List of {id, title, type, item_count, total_size}; total_size is
            always 0 as Plex does not report it here. Per-library totals
            come from LibraryAnalyzer.get_library_total_size.
        """
        response = self._make_request("GET", "library/sections") or {}
        sections = response.get("MediaContainer", {}).get("Directory", []) or []

        libraries = []
        for section in sections:
            try:
                item_count = int(section.get("count", 0))
            except (TypeError, ValueError):
                item_count = 0
            libraries.append(
                {
                    "id": str(section.get("key")),
                    "title": section.get("title", "Unknown"),
                    "type": section.get("type", "unknown"),
                    "item_count": item_count,
                    "total_size": 0,
                }
            )
        return libraries

    def get_library(self, library_id: str) -> dict[str, Any] | None:
        return next((lib for lib in self.get_libraries() if lib["id"] == str(library_id)), None)

    def get_library_items(self, library_id: str) -> list[dict[str, Any]]:
        """Get top-level items of a section with media and part details"""
        items = self._metadata(f"library/sections/{library_id}/all", params=SECTION_ITEM_PARAMS)
        self.logger.info(f"Retrieved {len(items)} items from library {library_id}")
        return items

    def get_library_items_with_episodes(self, library_id: str) -> list[dict[str, Any]]:
        """
        Get section items, expanding TV shows into their episodes.

        Episode titles are rewritten to "<show> - <episode>" and inherit the
        show's genres. A show whose seasons cannot be fetched is skipped.
        """
        items = self.get_library_items(library_id)
        if not items or items[0].get("type") != "show":
            return items

        self.logger.info(f"Detected TV show library, expanding {len(items)} shows into episodes")
        episodes: list[dict[str, Any]] = []
        for show in items:
            try:
                episodes.extend(self._get_show_episodes(show))
            except AnalyzerrError as e:
                self.logger.warning(f"Failed to get episodes for show {show.get('title')}: {e.message}")

        self.logger.info(f"Retrieved {len(episodes)} episodes total")
        return episodes

    def _get_show_episodes(self, show: dict[str, Any]) -> list[dict[str, Any]]:
        show_title = show.get("title", "Unknown")
        episodes = []
        for season in self._metadata(f"library/metadata/{show['ratingKey']}/children"):
            for episode in self._metadata(f"library/metadata/{season['ratingKey']}/children", params=EPISODE_PARAMS):
                episodes.append(
                    {
                        **episode,
                        "title": f"{show_title} - {episode.get('title', 'Unknown')}",
                        "type": "episode",
                        "year": episode.get("year") or show.get("year"),
                        "Genre": show.get("Genre", []),
                    }
                )
        return episodes
