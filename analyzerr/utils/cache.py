"""
In-memory TTL cache shared by analyzers and services
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


class CacheBackend(ABC):
    """Interface every cache implementation must provide"""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def cleanup(self) -> int:
        """Remove expired entries, returning how many were dropped"""

    @abstractmethod
    def keys(self) -> list[str]:
        pass

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix"""
        removed = 0
        for key in self.keys():
            if key.startswith(prefix) and self.delete(key):
                removed += 1
        return removed


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache(CacheBackend):
    """Thread-safe key/value store with per-entry expiry.

    Expired entries are removed lazily when read and in bulk by ``cleanup()``,
    which the background sweeper calls periodically. A disabled cache accepts
    every call but never stores anything.
    """

    def __init__(self, default_ttl: float = 300, enabled: bool = True, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self.enabled = enabled
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        if not self.enabled:
            return default

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return default
            if self._clock() > entry.expires_at:
                del self._entries[key]
                self._misses += 1
                return default
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        if not self.enabled:
            return

        lifetime = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + lifetime)

    def has(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def delete(self, key: str) -> bool:
        if not self.enabled:
            return False

        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        if not self.enabled:
            return 0

        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Cache cleanup removed {len(expired)} expired entries")
        return len(expired)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "enabled": self.enabled,
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "default_ttl": self.default_ttl,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
