"""
Background sweeper that purges expired cache entries
"""

import logging
import threading

from analyzerr.utils.cache import CacheBackend


class CacheSweeper:
    """Daemon thread calling ``cache.cleanup()`` on a fixed interval."""

    def __init__(self, cache: CacheBackend, interval_seconds: float = 300):
        """
        Initialize the sweeper.

        Args:
            cache: Cache whose expired entries should be removed
            interval_seconds: Seconds between sweeps
        """
        self.cache = cache
        self.interval_seconds = interval_seconds
        self.logger = logging.getLogger(self.__class__.__name__)
        self.running = False
        self.thread = None
        self._stop_event = threading.Event()

    def start(self) -> None:
        """Start the background sweeper."""
        if self.running:
            self.logger.warning("Cache sweeper is already running")
            return

        self.running = True
        self._stop_event.clear()
        self.thread = threading.Thread(target=self._run, name="cache-sweeper", daemon=True)
        self.thread.start()
        self.logger.info(f"Started cache sweeper (interval: {self.interval_seconds}s)")

    def stop(self) -> None:
        """Stop the background sweeper."""
        if not self.running:
            return

        self.running = False
        self._stop_event.set()
        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=5)
        self.logger.info("Stopped cache sweeper")

    def sweep(self) -> int:
        removed = self.cache.cleanup()
        if removed:
            self.logger.info(f"Removed {removed} expired cache entries")
        return removed

    def _run(self) -> None:
        """Main loop; wakes immediately when stop() is called."""
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.sweep()
            except Exception as e:
                self.logger.error(f"Cache sweep failed: {e}")
