"""
Radarr API service implementation
"""

from typing import Any

from analyzerr.models.filters import MovieFilters

from .base_service import ArrService

MOVIE_SORT_KEYS = {
    "title": lambda m: (m.get("sort_title") or m.get("title") or "").lower(),
    "year": lambda m: m.get("year") or 0,
    "added": lambda m: m.get("added") or "",
    "size_on_disk": lambda m: m.get("size_on_disk") or 0,
}


class RadarrService(ArrService):
    """Service for interacting with Radarr API."""

    service_name = "Radarr"

    def get_movies(self) -> list[dict[str, Any]]:
        return self._make_request("GET", "movie") or []

    def get_wanted_movies(self, filters: MovieFilters | None = None) -> list[dict[str, Any]]:
        """
        Get monitored movies that have no file yet.

        Returns:
            List of wanted movie items
        """
        wanted = [
            self._simplify(movie)
            for movie in self.get_movies()
            if movie.get("monitored", False) and not movie.get("hasFile", False)
        ]
        wanted = self._apply_filters(wanted, filters)
        self.logger.info(f"Found {len(wanted)} wanted movies")
        return wanted

    def get_missing_movies(self, filters: MovieFilters | None = None) -> list[dict[str, Any]]:
        """
        Get wanted movies that are already released and could be grabbed.

        Returns:
            List of missing movie items
        """
        missing = [movie for movie in self.get_wanted_movies(filters) if movie["is_available"]]
        self.logger.info(f"Found {len(missing)} missing movies")
        return missing

    @staticmethod
    def _simplify(movie: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": movie["id"],
            "title": movie.get("title", "Unknown"),
            "sort_title": movie.get("sortTitle"),
            "year": movie.get("year"),
            "tmdb_id": movie.get("tmdbId"),
            "imdb_id": movie.get("imdbId"),
            "monitored": movie.get("monitored", False),
            "has_file": movie.get("hasFile", False),
            "is_available": movie.get("isAvailable", False),
            "status": movie.get("status"),
            "genres": movie.get("genres", []),
            "quality_profile_id": movie.get("qualityProfileId"),
            "added": movie.get("added"),
            "size_on_disk": movie.get("sizeOnDisk", 0),
        }

    @staticmethod
    def _apply_filters(movies: list[dict[str, Any]], filters: MovieFilters | None) -> list[dict[str, Any]]:
        if not filters:
            return movies

        if filters.year is not None:
            movies = [m for m in movies if m["year"] == filters.year]
        if filters.genres:
            wanted_genres = {g.lower() for g in filters.genres}
            movies = [m for m in movies if wanted_genres & {g.lower() for g in m["genres"]}]
        if filters.quality_profile_id is not None:
            movies = [m for m in movies if m["quality_profile_id"] == filters.quality_profile_id]
        if filters.sort_by in MOVIE_SORT_KEYS:
            movies = sorted(movies, key=MOVIE_SORT_KEYS[filters.sort_by], reverse=filters.sort_direction == "desc")
        return movies
