"""Unit tests for the background cache sweeper."""

import threading
from unittest.mock import MagicMock

import pytest

from analyzerr.scheduler import CacheSweeper


@pytest.fixture
def sweeper():
    cache = MagicMock()
    cache.cleanup.return_value = 0
    sweeper = CacheSweeper(cache, interval_seconds=0.01)
    yield sweeper
    sweeper.stop()


class TestCacheSweeper:
    def test_sweep_delegates_to_cache(self, sweeper):
        sweeper.cache.cleanup.return_value = 3
        assert sweeper.sweep() == 3

    def test_runs_periodically(self, sweeper):
        swept = threading.Event()
        sweeper.cache.cleanup.side_effect = lambda: swept.set() or 0

        sweeper.start()

        assert swept.wait(timeout=2)

    def test_start_is_idempotent(self, sweeper):
        sweeper.start()
        thread = sweeper.thread

        sweeper.start()

        assert sweeper.thread is thread
        assert sweeper.running

    def test_stop_joins_thread(self, sweeper):
        sweeper.start()
        sweeper.stop()

        assert not sweeper.running
        assert not sweeper.thread.is_alive()

    def test_stop_without_start(self, sweeper):
        sweeper.stop()
        assert sweeper.thread is None

    def test_failed_sweep_keeps_running(self, sweeper):
        calls = []
        recovered = threading.Event()

        def cleanup():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            recovered.set()
            return 0

        sweeper.cache.cleanup.side_effect = cleanup
        sweeper.start()

        assert recovered.wait(timeout=2)
