"""Unit tests for media and filter models."""

import pytest

from analyzerr.models import EnhancedMediaFile, MediaFile, MediaType, MovieFilters, QueueFilters, QueueItem, QueueTotals


class TestMediaFile:
    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            MediaFile(id="1", title="Bad", file_size=-1)

    def test_to_dict_serializes_enums_and_tuples(self):
        data = MediaFile(id="1", title="Movie", type=MediaType.EPISODE, genres=("Drama",)).to_dict()

        assert data["type"] == "episode"
        assert data["genres"] == ["Drama"]

    def test_identity_includes_path(self):
        a = MediaFile(id="1", title="Movie", file_path="/a.mkv")
        b = MediaFile(id="1", title="Movie", file_path="/b.mkv")
        assert a.identity != b.identity

    def test_show_identity_includes_show_name(self):
        a = MediaFile(id="show-Who-", title="Who?", file_path="1 episodes", type=MediaType.SHOW, show_name="Who?")
        b = MediaFile(id="show-Who-", title="Who!", file_path="1 episodes", type=MediaType.SHOW, show_name="Who!")
        assert a.identity != b.identity

    def test_inference_text(self):
        assert MediaFile(id="1", title="Movie", file_path="/m/Movie.1080p.mkv").inference_text == "/m/Movie.1080p.mkv"
        assert MediaFile(id="1", title="Movie.720p").inference_text == "Movie.720p"
        assert MediaFile(id="s", title="Show", file_path="3 episodes", type=MediaType.SHOW).inference_text == "Show"

    def test_str(self):
        assert str(MediaFile(id="1", title="Movie", year=1999)) == "Movie (1999)"
        assert str(MediaFile(id="s", title="Show", type=MediaType.SHOW, episode_count=4)) == "Show (4 episodes)"

    def test_low_confidence(self):
        assert EnhancedMediaFile(id="1", title="M").low_confidence
        assert not EnhancedMediaFile(id="1", title="M", resolution_source="metadata").low_confidence


class TestQueueTotals:
    def test_add_counts_statuses(self):
        totals = QueueTotals()
        totals.add([
            QueueItem(id=1, title="A", status="downloading", size=10, sizeleft=5),
            QueueItem(id=2, title="B", status="queued", size=20, sizeleft=20),
        ])

        data = totals.to_dict(include_items=False)

        assert data["total_items"] == 2
        assert data["total_size"] == 30
        assert data["downloading"] == 1
        assert "items" not in data


class TestFilters:
    def test_movie_filters_from_args(self):
        filters = MovieFilters.from_args({"year": "2020", "genres": "Action, Drama", "sort_direction": "DESC"})

        assert filters.year == 2020
        assert filters.genres == ("Action", "Drama")
        assert filters.sort_direction == "desc"

    def test_invalid_numbers_ignored(self):
        assert MovieFilters.from_args({"year": "soon"}).year is None

    def test_queue_filter_matching_is_case_insensitive(self):
        item = QueueItem(id=1, title="A", status="downloading", protocol="torrent", download_client="qBittorrent")

        assert QueueFilters(status="DOWNLOADING", download_client="qbittorrent").matches(item)
        assert not QueueFilters(protocol="usenet").matches(item)
