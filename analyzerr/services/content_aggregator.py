"""
Combined wanted/missing/queue view over Radarr and Sonarr
"""

import logging
from typing import Any

from analyzerr.exceptions import ServiceUnavailableError
from analyzerr.models.filters import EpisodeFilters, MovieFilters, QueueFilters
from analyzerr.models.queue_item import QueueItem, QueueTotals
from analyzerr.utils.concurrency import run_settled

from .radarr_service import RadarrService
from .sonarr_service import SonarrService


def _empty() -> list:
    return []


class ContentAggregator:
    """Merges results from two independently failing acquisition services."""

    def __init__(self, radarr: RadarrService, sonarr: SonarrService, max_workers: int = 6):
        self.radarr = radarr
        self.sonarr = sonarr
        self.max_workers = max_workers
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def _call_if_ready(service, method):
        """Unconfigured services contribute an empty result instead of failing"""
        return method if service.is_ready() else _empty

    def get_content_summary(self) -> dict[str, Any]:
        """
        Counts of wanted/missing items and queue totals across both services.

        A failing upstream call contributes zero to its part of the summary and
        is listed under ``errors``; the summary itself always succeeds.
        """
        results = run_settled(
            {
                "radarr_wanted": self._call_if_ready(self.radarr, self.radarr.get_wanted_movies),
                "radarr_missing": self._call_if_ready(self.radarr, self.radarr.get_missing_movies),
                "radarr_queue": self._call_if_ready(self.radarr, self.radarr.get_queue),
                "sonarr_wanted": self._call_if_ready(self.sonarr, self.sonarr.get_wanted_episodes),
                "sonarr_missing": self._call_if_ready(self.sonarr, self.sonarr.get_missing_episodes),
                "sonarr_queue": self._call_if_ready(self.sonarr, self.sonarr.get_queue),
            },
            max_workers=self.max_workers,
        )

        totals = QueueTotals()
        totals.add(results["radarr_queue"].value_or([]))
        totals.add(results["sonarr_queue"].value_or([]))

        return {
            "wanted": {
                "movies": len(results["radarr_wanted"].value_or([])),
                "episodes": len(results["sonarr_wanted"].value_or([])),
            },
            "missing": {
                "movies": len(results["radarr_missing"].value_or([])),
                "episodes": len(results["sonarr_missing"].value_or([])),
            },
            "queue": totals.to_dict(include_items=False),
            "errors": [f"{name}: {result.error}" for name, result in results.items() if not result.ok],
        }

    @staticmethod
    def _require(service) -> None:
        if not service.is_ready():
            raise ServiceUnavailableError(f"{service.service_name} is not configured")

    def get_movies(self, filters: MovieFilters | None = None, missing_only: bool = False) -> dict[str, Any]:
        """Wanted (or only released, missing) Radarr movies"""
        self._require(self.radarr)
        method = self.radarr.get_missing_movies if missing_only else self.radarr.get_wanted_movies
        movies = method(filters)
        return {"items": movies, "total": len(movies)}

    def get_episodes(self, filters: EpisodeFilters | None = None, missing_only: bool = False) -> dict[str, Any]:
        """Wanted (or only aired, missing) Sonarr episodes"""
        self._require(self.sonarr)
        method = self.sonarr.get_missing_episodes if missing_only else self.sonarr.get_wanted_episodes
        episodes = method(filters)
        return {"items": episodes, "total": len(episodes)}

    def get_combined_queue(self, filters: QueueFilters | None = None) -> dict[str, Any]:
        """Both queues merged, each item tagged with the service it came from"""
        results = run_settled(
            {
                "radarr": self._call_if_ready(self.radarr, lambda: self.radarr.get_queue(filters)),
                "sonarr": self._call_if_ready(self.sonarr, lambda: self.sonarr.get_queue(filters)),
            },
            max_workers=self.max_workers,
        )

        totals = QueueTotals()
        for source in ("radarr", "sonarr"):
            items: list[QueueItem] = results[source].value_or([])
            totals.add([item.tagged(source) for item in items])

        summary = totals.to_dict()
        summary["errors"] = [f"{name}: {result.error}" for name, result in results.items() if not result.ok]
        return summary

    def get_services_status(self) -> dict[str, dict[str, Any]]:
        status = {}
        for name, service in (("radarr", self.radarr), ("sonarr", self.sonarr)):
            entry: dict[str, Any] = {"configured": service.is_ready(), "connected": False, "error": None}
            if entry["configured"]:
                entry["connected"] = service.test_connection()
                if not entry["connected"]:
                    entry["error"] = "Connection failed"
            status[name] = entry
        return status
