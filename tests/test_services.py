"""Unit tests for the upstream API clients."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from analyzerr.exceptions import NotFoundError, ServiceUnavailableError
from analyzerr.models.filters import EpisodeFilters, MovieFilters, QueueFilters
from analyzerr.models.queue_item import QueueItem
from analyzerr.services.plex_service import PlexService
from analyzerr.services.radarr_service import RadarrService
from analyzerr.services.sonarr_service import SonarrService
from analyzerr.services.tautulli_service import TautulliService


def json_response(payload, status_code: int = 200) -> MagicMock:
    response = MagicMock(status_code=status_code)
    response.json.return_value = payload
    return response


@pytest.fixture
def radarr() -> RadarrService:
    return RadarrService("http://radarr:7878/", "radarr-key", timeout=5)


@pytest.fixture
def sonarr() -> SonarrService:
    return SonarrService("http://sonarr:8989", "sonarr-key")


@pytest.fixture
def plex() -> PlexService:
    return PlexService("http://plex:32400", "plex-token", timeout=10)


@pytest.fixture
def tautulli() -> TautulliService:
    return TautulliService("http://tautulli:8181", "tautulli-key")


# =============================================================================
# Base request handling
# =============================================================================


class TestMakeRequest:
    """Tests for BaseService._make_request."""

    def test_builds_url_and_headers(self, radarr):
        with patch.object(radarr.session, "request", return_value=json_response([{"id": 1}])) as request:
            assert radarr.get_movies() == [{"id": 1}]

        request.assert_called_once_with(
            method="GET", url="http://radarr:7878/api/v3/movie", json=None, params=None, timeout=5
        )
        assert radarr.session.headers["X-Api-Key"] == "radarr-key"

    def test_timeout_becomes_service_unavailable(self, radarr):
        with patch.object(radarr.session, "request", side_effect=requests.exceptions.Timeout("timed out")):
            with pytest.raises(ServiceUnavailableError):
                radarr.get_movies()

    def test_http_error_becomes_service_unavailable(self, radarr):
        response = json_response({}, status_code=500)
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")

        with patch.object(radarr.session, "request", return_value=response):
            with pytest.raises(ServiceUnavailableError) as exc_info:
                radarr.get_movies()

        assert exc_info.value.status_code == 503

    def test_404_becomes_not_found(self, radarr):
        with patch.object(radarr.session, "request", return_value=json_response({}, status_code=404)):
            with pytest.raises(NotFoundError):
                radarr.get_movies()

    def test_unconfigured_service_never_calls_upstream(self):
        service = RadarrService(None, None)

        with patch.object(service.session, "request") as request:
            with pytest.raises(ServiceUnavailableError):
                service.get_movies()

        request.assert_not_called()
        assert service.is_ready() is False

    def test_connection_check(self, radarr):
        with patch.object(radarr.session, "request", side_effect=requests.exceptions.ConnectionError("refused")):
            assert radarr.test_connection() is False
        with patch.object(radarr.session, "request", return_value=json_response({})):
            assert radarr.test_connection() is True


# =============================================================================
# Radarr / Sonarr
# =============================================================================


class TestRadarrService:
    @pytest.fixture
    def movies(self) -> list[dict]:
        return [
            {"id": 1, "title": "Zed", "year": 2020, "monitored": True, "hasFile": False, "isAvailable": True,
             "genres": ["Action"], "qualityProfileId": 1},
            {"id": 2, "title": "Alpha", "year": 2021, "monitored": True, "hasFile": False, "isAvailable": False,
             "genres": ["Drama"], "qualityProfileId": 2},
            {"id": 3, "title": "Owned", "year": 2020, "monitored": True, "hasFile": True, "isAvailable": True},
            {"id": 4, "title": "Ignored", "year": 2020, "monitored": False, "hasFile": False, "isAvailable": True},
        ]

    def test_wanted_movies(self, radarr, movies):
        with patch.object(radarr, "get_movies", return_value=movies):
            wanted = radarr.get_wanted_movies()

        assert [m["id"] for m in wanted] == [1, 2]
        assert wanted[0]["is_available"] is True

    def test_missing_movies_are_available(self, radarr, movies):
        with patch.object(radarr, "get_movies", return_value=movies):
            assert [m["id"] for m in radarr.get_missing_movies()] == [1]

    def test_filters_and_sorting(self, radarr, movies):
        with patch.object(radarr, "get_movies", return_value=movies):
            by_title = radarr.get_wanted_movies(MovieFilters(sort_by="title"))
            drama = radarr.get_wanted_movies(MovieFilters(genres=("drama",)))
            year = radarr.get_wanted_movies(MovieFilters(year=2020))

        assert [m["title"] for m in by_title] == ["Alpha", "Zed"]
        assert [m["id"] for m in drama] == [2]
        assert [m["id"] for m in year] == [1]

    def test_queue_records(self, radarr):
        payload = {
            "records": [
                {"id": 1, "title": "A", "status": "Downloading", "size": 100, "sizeleft": 25, "protocol": "torrent",
                 "quality": {"quality": {"name": "Bluray-1080p"}}},
                {"id": 2, "title": "B", "status": "paused", "size": 100, "sizeleft": 100, "protocol": "usenet"},
            ]
        }

        with patch.object(radarr.session, "request", return_value=json_response(payload)) as request:
            items = radarr.get_queue(QueueFilters(protocol="TORRENT"))

        assert request.call_args.kwargs["params"] == {"page": 1, "pageSize": 1000}
        assert len(items) == 1
        assert items[0].status == "downloading"
        assert items[0].quality == "Bluray-1080p"
        assert items[0].progress == 75.0


class TestSonarrService:
    @pytest.fixture
    def records(self) -> dict:
        return {
            "records": [
                {"id": 1, "seriesId": 7, "title": "Aired", "seasonNumber": 1, "episodeNumber": 2,
                 "airDateUtc": "2020-01-01T00:00:00Z", "monitored": True, "hasFile": False,
                 "series": {"title": "Show"}},
                {"id": 2, "seriesId": 7, "title": "Future", "seasonNumber": 2, "episodeNumber": 1,
                 "airDateUtc": "2999-01-01T00:00:00Z", "monitored": True, "hasFile": False},
                {"id": 3, "seriesId": 8, "title": "Downloaded", "airDateUtc": "2019-01-01T00:00:00Z", "hasFile": True},
                {"id": 4, "seriesId": 9, "title": "No date", "hasFile": False},
            ]
        }

    def test_wanted_episodes(self, sonarr, records):
        with patch.object(sonarr.session, "request", return_value=json_response(records)) as request:
            wanted = sonarr.get_wanted_episodes()

        assert request.call_args.kwargs["url"] == "http://sonarr:8989/api/v3/wanted/missing"
        assert [e["id"] for e in wanted] == [1, 2, 4]
        assert wanted[0]["series_title"] == "Show"

    def test_missing_only_aired(self, sonarr, records):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        with patch.object(sonarr.session, "request", return_value=json_response(records)):
            missing = sonarr.get_missing_episodes(now=now)

        assert [e["id"] for e in missing] == [1]

    def test_filters(self, sonarr, records):
        with patch.object(sonarr.session, "request", return_value=json_response(records)):
            season_two = sonarr.get_wanted_episodes(EpisodeFilters(series_id=7, season_number=2))

        assert [e["id"] for e in season_two] == [2]


# =============================================================================
# Plex / Tautulli
# =============================================================================


class TestPlexService:
    def test_libraries(self, plex):
        payload = {"MediaContainer": {"Directory": [{"key": 1, "title": "Movies", "type": "movie", "count": "12"}]}}

        with patch.object(plex.session, "request", return_value=json_response(payload)) as request:
            libraries = plex.get_libraries()

        assert libraries == [{"id": "1", "title": "Movies", "type": "movie", "item_count": 12, "total_size": 0}]
        assert request.call_args.kwargs["url"] == "http://plex:32400/library/sections"
        assert plex.session.headers["X-Plex-Token"] == "plex-token"

    def test_movie_library_not_expanded(self, plex):
        movies = [{"ratingKey": "1", "type": "movie", "title": "A"}]
        with patch.object(plex, "_metadata", return_value=movies) as metadata:
            assert plex.get_library_items_with_episodes("1") == movies

        metadata.assert_called_once()

    def test_shows_expanded_into_episodes(self, plex):
        responses = {
            "library/sections/2/all": [
                {"ratingKey": "10", "type": "show", "title": "Good Show", "year": 2015, "Genre": [{"tag": "Drama"}]},
                {"ratingKey": "20", "type": "show", "title": "Broken Show"},
            ],
            "library/metadata/10/children": [{"ratingKey": "100"}],
            "library/metadata/100/children": [
                {"ratingKey": "1000", "title": "Pilot", "type": "episode"},
                {"ratingKey": "1001", "title": "Second", "type": "episode", "year": 2016},
            ],
        }

        def fake_request(method, endpoint, params=None, data=None):
            if endpoint == "library/metadata/20/children":
                raise ServiceUnavailableError("Plex request failed")
            return {"MediaContainer": {"Metadata": responses[endpoint]}}

        with patch.object(plex, "_make_request", side_effect=fake_request):
            episodes = plex.get_library_items_with_episodes("2")

        assert [e["title"] for e in episodes] == ["Good Show - Pilot", "Good Show - Second"]
        assert [e["year"] for e in episodes] == [2015, 2016]
        assert episodes[0]["Genre"] == [{"tag": "Drama"}]
        assert all(e["type"] == "episode" for e in episodes)


class TestTautulliService:
    def test_command_unwraps_data(self, tautulli):
        payload = {"response": {"result": "success", "data": {"data": [], "total_file_size": 5}}}

        with patch.object(tautulli.session, "request", return_value=json_response(payload)) as request:
            info = tautulli.get_library_media_info("3", length=10)

        assert info == {"data": [], "total_file_size": 5}
        kwargs = request.call_args.kwargs
        assert kwargs["url"] == "http://tautulli:8181/api/v2"
        assert kwargs["params"]["cmd"] == "get_library_media_info"
        assert kwargs["params"]["apikey"] == "tautulli-key"
        assert kwargs["params"]["length"] == 10

    def test_error_result_raises(self, tautulli):
        payload = {"response": {"result": "error", "message": "Invalid apikey"}}

        with patch.object(tautulli.session, "request", return_value=json_response(payload)):
            with pytest.raises(ServiceUnavailableError, match="Invalid apikey"):
                tautulli.get_libraries()

    def test_libraries(self, tautulli):
        payload = {
            "response": {
                "result": "success",
                "data": {"data": [{"section_id": 1, "section_name": "Movies", "section_type": "movie", "count": "4"}]},
            }
        }

        with patch.object(tautulli.session, "request", return_value=json_response(payload)):
            libraries = tautulli.get_libraries()

        assert libraries == [{"id": "1", "title": "Movies", "type": "movie", "item_count": 4, "total_size": 0}]


class TestQueueItem:
    def test_from_api_defaults(self):
        item = QueueItem.from_api({"id": 5})

        assert item.title == "Unknown"
        assert item.status == "unknown"
        assert item.progress == 0.0

    def test_to_dict_includes_time_left(self):
        item = QueueItem(id=1, title="A", status="downloading", timeleft="00:20:00")
        assert item.to_dict()["time_left"] == {"total_minutes": 20, "formatted": "20m"}

    def test_to_dict_includes_readable_sizes(self):
        item = QueueItem(id=1, title="A", status="downloading", size=1536, sizeleft=1024 ** 3)
        data = item.to_dict()

        assert data["size_formatted"] == "1.5 KB"
        assert data["size_left_formatted"] == "1 GB"
