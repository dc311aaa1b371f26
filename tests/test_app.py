"""Tests for the Flask request layer."""

import pytest

from analyzerr.app import create_app
from analyzerr.config import Config
from analyzerr.exceptions import ServiceUnavailableError
from analyzerr.models.filters import EpisodeFilters, MovieFilters, QueueFilters
from analyzerr.services import Services


@pytest.fixture
def app(plex_service, tautulli_service, radarr_service, sonarr_service, cache):
    config = Config(_env_file=None, cache_sweep_enabled=False, data_source="plex")
    services = Services(plex=plex_service, tautulli=tautulli_service, radarr=radarr_service, sonarr=sonarr_service)
    return create_app(config=config, services=services, cache=cache)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def movies(plex_service, remux_movie, dvd_movie):
    plex_service.get_library_items_with_episodes.return_value = [remux_movie, dvd_movie]
    plex_service.get_library_items.return_value = [remux_movie, dvd_movie]


# =============================================================================
# Service endpoints
# =============================================================================


class TestServiceEndpoints:
    def test_index(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json["service"] == "Analyzerr"
        assert response.json["data_source"] == "plex"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json["status"] == "healthy"
        assert response.json["services"]["radarr"] == {"configured": True}
        assert response.json["cache"]["enabled"] is True

    def test_no_sweeper_when_disabled(self, app):
        assert not hasattr(app, "sweeper")

    def test_unknown_endpoint(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json == {"error": "Endpoint not found"}


# =============================================================================
# Library analysis endpoints
# =============================================================================


class TestLibraryEndpoints:
    def test_libraries(self, client):
        response = client.get("/libraries")

        assert response.status_code == 200
        assert [lib["title"] for lib in response.json["libraries"]] == ["Movies", "TV Shows"]

    def test_upstream_failure_maps_to_503(self, client, plex_service):
        plex_service.get_libraries.side_effect = ServiceUnavailableError("Plex request failed: timed out")

        response = client.get("/libraries")

        assert response.status_code == 503
        assert response.json == {"error": "ServiceUnavailableError", "message": "Plex request failed: timed out"}

    def test_empty_library_maps_to_404(self, client):
        response = client.get("/libraries/1/analysis/size")

        assert response.status_code == 404
        assert response.json["error"] == "NotFoundError"

    @pytest.mark.usefixtures("movies")
    def test_size_analysis_pagination(self, client):
        response = client.get("/libraries/1/analysis/size?limit=1&offset=0")

        assert response.status_code == 200
        assert response.json["pagination"] == {"offset": 0, "limit": 1, "total": 2, "has_more": True}
        assert response.json["data"]["largest_files"][0]["id"] == "101"

    @pytest.mark.usefixtures("movies")
    def test_quality_and_content_analysis(self, client):
        quality = client.get("/libraries/1/analysis/quality")
        content = client.get("/libraries/1/analysis/content")

        assert quality.status_code == 200
        assert {r["resolution"] for r in quality.json["data"]["resolution_distribution"]} == {"4K", "480p"}
        assert content.status_code == 200
        assert content.json["pagination"]["limit"] == 50

    @pytest.mark.usefixtures("movies")
    def test_full_analysis_and_stats(self, client):
        analysis = client.get("/libraries/1/analysis")
        stats = client.get("/libraries/1")
        total = client.get("/libraries/1/total-size")

        assert analysis.status_code == 200
        assert analysis.json["library_name"] == "Movies"
        assert stats.json["total_items"] == 2
        assert total.json["total_size"] == analysis.json["total_size"]

    @pytest.mark.usefixtures("movies")
    def test_enhanced_analysis_returns_everything_by_default(self, client):
        response = client.get("/libraries/1/analysis/enhanced")

        assert response.status_code == 200
        assert response.json["pagination"]["limit"] == -1
        assert len(response.json["data"]["largest_files"]) == 2
        assert response.json["data"]["upgrade_recommendations"][0]["file_id"] == "102"

    @pytest.mark.usefixtures("movies")
    def test_refresh(self, client, plex_service):
        client.get("/libraries/1/analysis/size")

        response = client.post("/libraries/1/refresh")
        client.get("/libraries/1/analysis/size")

        assert response.status_code == 200
        assert response.json["cleared"] == 2
        assert plex_service.get_library_items_with_episodes.call_count == 2

    @pytest.mark.usefixtures("movies")
    def test_global_stats(self, client):
        response = client.get("/stats/global")

        assert response.status_code == 200
        assert response.json["total_libraries"] == 2
        assert response.json["total_items"] == 4


# =============================================================================
# Content endpoints
# =============================================================================


class TestContentEndpoints:
    def test_summary(self, client, radarr_service):
        radarr_service.get_wanted_movies.return_value = [{"id": 1}]

        response = client.get("/content/summary")

        assert response.status_code == 200
        assert response.json["wanted"] == {"movies": 1, "episodes": 0}

    def test_queue_filters_from_query(self, client, radarr_service, sonarr_service):
        response = client.get("/content/queue?status=downloading&protocol=torrent")

        assert response.status_code == 200
        expected = QueueFilters(status="downloading", protocol="torrent")
        radarr_service.get_queue.assert_called_once_with(expected)
        sonarr_service.get_queue.assert_called_once_with(expected)

    def test_status(self, client):
        response = client.get("/content/status")

        assert response.status_code == 200
        assert response.json["radarr"]["connected"] is True

    def test_wanted_movies_filters_from_query(self, client, radarr_service):
        radarr_service.get_wanted_movies.return_value = [{"id": 1, "title": "Movie"}]

        response = client.get("/content/movies/wanted?year=2020&genres=Action,Drama&sort_by=title")

        assert response.status_code == 200
        assert response.json == {"items": [{"id": 1, "title": "Movie"}], "total": 1}
        radarr_service.get_wanted_movies.assert_called_once_with(
            MovieFilters(year=2020, genres=("Action", "Drama"), sort_by="title")
        )

    def test_missing_episodes_filters_from_query(self, client, sonarr_service):
        response = client.get("/content/episodes/missing?series_id=7&season_number=2")

        assert response.status_code == 200
        assert response.json["total"] == 0
        sonarr_service.get_missing_episodes.assert_called_once_with(EpisodeFilters(series_id=7, season_number=2))

    def test_unknown_listing(self, client):
        response = client.get("/content/movies/upcoming")

        assert response.status_code == 404

    def test_unconfigured_listing_maps_to_503(self, client, sonarr_service):
        sonarr_service.is_ready.return_value = False
        sonarr_service.service_name = "Sonarr"

        response = client.get("/content/episodes/wanted")

        assert response.status_code == 503
        assert response.json["message"] == "Sonarr is not configured"
