"""Shared test fixtures for Analyzerr."""

from unittest.mock import MagicMock

import pytest

from analyzerr.models.media_file import MediaFile, MediaType
from analyzerr.services.plex_service import PlexService
from analyzerr.services.radarr_service import RadarrService
from analyzerr.services.sonarr_service import SonarrService
from analyzerr.services.tautulli_service import TautulliService
from analyzerr.utils.cache import TTLCache

GB = 1024 ** 3


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Return a clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    """Return an enabled cache driven by the fake clock."""
    return TTLCache(default_ttl=300, clock=clock)


@pytest.fixture
def make_file():
    """Factory for MediaFile records with sensible defaults."""

    def _make(file_id: str, size_gb: float = 1, **kwargs) -> MediaFile:
        kwargs.setdefault("title", f"Title {file_id}")
        kwargs.setdefault("resolution", "1080p")
        kwargs.setdefault("codec", "H264")
        return MediaFile(id=file_id, file_size=int(size_gb * GB), **kwargs)

    return _make


@pytest.fixture
def make_episode(make_file):
    """Factory for episode records titled '<show> - <episode>'."""

    def _make(file_id: str, show: str, size_gb: float = 1, **kwargs) -> MediaFile:
        return make_file(file_id, size_gb, title=f"{show} - Episode {file_id}", type=MediaType.EPISODE, **kwargs)

    return _make


# =============================================================================
# Plex payloads
# =============================================================================


def plex_movie(rating_key: str, title: str, file: str, size: int, **kwargs) -> dict:
    """Build a Plex movie metadata item with one Media/Part."""
    return {
        "ratingKey": rating_key,
        "title": title,
        "type": "movie",
        "year": kwargs.get("year", 2020),
        "duration": kwargs.get("duration", 7_200_000),
        "Genre": [{"tag": g} for g in kwargs.get("genres", ["Drama"])],
        "Media": [
            {
                "videoResolution": kwargs.get("resolution", "1080"),
                "videoCodec": kwargs.get("codec", "h264"),
                "Part": [{"file": file, "size": size}],
            }
        ],
    }


@pytest.fixture
def make_plex_movie():
    """Factory for Plex movie metadata items."""
    return plex_movie


@pytest.fixture
def remux_movie() -> dict:
    """A 4K HDR remux well inside the Excellent tier."""
    return plex_movie(
        "101",
        "Big Movie",
        "/movies/Big.Movie.2020.2160p.BluRay.REMUX.HDR.HEVC.TrueHD.Atmos.7.1-FGT.mkv",
        60 * GB,
        resolution="4k",
        codec="hevc",
        genres=["Action", "Sci-Fi"],
    )


@pytest.fixture
def dvd_movie() -> dict:
    """An old XviD DVD rip that should be flagged for upgrade."""
    return plex_movie(
        "102",
        "Old Movie",
        "/movies/Old.Movie.2005.480p.DVDRip.XviD-GRP.avi",
        700 * 1024 * 1024,
        resolution="480",
        codec="xvid",
        year=2005,
        genres=["Comedy"],
    )


@pytest.fixture
def plex_libraries() -> list[dict]:
    return [
        {"id": "1", "title": "Movies", "type": "movie", "item_count": 2, "total_size": 0},
        {"id": "2", "title": "TV Shows", "type": "show", "item_count": 1, "total_size": 0},
    ]


# =============================================================================
# Service doubles
# =============================================================================


def _service_mock(spec) -> MagicMock:
    service = MagicMock(spec=spec)
    service.is_ready.return_value = True
    service.test_connection.return_value = True
    return service


@pytest.fixture
def plex_service(plex_libraries) -> MagicMock:
    """Mock PlexService that knows about two libraries and no items."""
    service = _service_mock(PlexService)
    service.get_libraries.return_value = plex_libraries
    service.get_library_items.return_value = []
    service.get_library_items_with_episodes.return_value = []
    return service


@pytest.fixture
def tautulli_service() -> MagicMock:
    service = _service_mock(TautulliService)
    service.get_libraries.return_value = []
    return service


@pytest.fixture
def radarr_service() -> MagicMock:
    service = _service_mock(RadarrService)
    service.get_wanted_movies.return_value = []
    service.get_missing_movies.return_value = []
    service.get_queue.return_value = []
    return service


@pytest.fixture
def sonarr_service() -> MagicMock:
    service = _service_mock(SonarrService)
    service.get_wanted_episodes.return_value = []
    service.get_missing_episodes.return_value = []
    service.get_queue.return_value = []
    return service
