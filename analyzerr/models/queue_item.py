"""
Acquisition queue data models for Analyzerr
"""

from dataclasses import dataclass, field, fields
from typing import Any

from analyzerr.utils.formatters import format_bytes, parse_time_left


@dataclass(frozen=True)
class QueueItem:
    """One download queue entry from Radarr or Sonarr"""
    id: int
    title: str
    status: str
    size: int = 0
    sizeleft: int = 0
    timeleft: str | None = None
    estimated_completion_time: str | None = None
    protocol: str | None = None
    download_client: str | None = None
    indexer: str | None = None
    quality: str | None = None
    error_message: str | None = None
    movie_id: int | None = None
    series_id: int | None = None
    episode_id: int | None = None
    source_service: str | None = None

    @classmethod
    def from_api(cls, record: dict[str, Any], source_service: str | None = None) -> "QueueItem":
        """Build a queue item from a raw /api/v3/queue record"""
        quality = (record.get("quality") or {}).get("quality") or {}
        return cls(
            id=record.get("id", 0),
            title=record.get("title") or "Unknown",
            status=(record.get("status") or "unknown").lower(),
            size=int(record.get("size") or 0),
            sizeleft=int(record.get("sizeleft") or 0),
            timeleft=record.get("timeleft"),
            estimated_completion_time=record.get("estimatedCompletionTime"),
            protocol=record.get("protocol"),
            download_client=record.get("downloadClient"),
            indexer=record.get("indexer"),
            quality=quality.get("name"),
            error_message=record.get("errorMessage"),
            movie_id=record.get("movieId"),
            series_id=record.get("seriesId"),
            episode_id=record.get("episodeId"),
            source_service=source_service,
        )

    def tagged(self, source_service: str) -> "QueueItem":
        """Return a copy tagged with the service it came from"""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values["source_service"] = source_service
        return QueueItem(**values)

    @property
    def progress(self) -> float:
        """Download progress as a percentage"""
        if self.size <= 0:
            return 0.0
        return round((self.size - self.sizeleft) / self.size * 100, 1)

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["progress"] = self.progress
        data["size_formatted"] = format_bytes(self.size)
        data["size_left_formatted"] = format_bytes(self.sizeleft)
        data["time_left"] = parse_time_left(self.timeleft)
        return data


@dataclass
class QueueTotals:
    """Aggregate counters over a merged queue"""
    total_items: int = 0
    total_size: int = 0
    total_size_left: int = 0
    downloading: int = 0
    completed: int = 0
    failed: int = 0
    paused: int = 0
    items: list[QueueItem] = field(default_factory=list)

    def add(self, items: list[QueueItem]) -> None:
        """Fold a list of queue items into the running totals"""
        for item in items:
            self.items.append(item)
            self.total_items += 1
            self.total_size += item.size
            self.total_size_left += item.sizeleft
            if item.status in ("downloading", "completed", "failed", "paused"):
                setattr(self, item.status, getattr(self, item.status) + 1)

    def to_dict(self, include_items: bool = True) -> dict[str, Any]:
        data = {
            "total_items": self.total_items,
            "total_size": self.total_size,
            "total_size_left": self.total_size_left,
            "total_size_formatted": format_bytes(self.total_size),
            "total_size_left_formatted": format_bytes(self.total_size_left),
            "downloading": self.downloading,
            "completed": self.completed,
            "failed": self.failed,
            "paused": self.paused,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data
