"""
Library analysis shared by every data source.

Each data source supplies an adapter that turns its raw payloads into
normalized MediaFile records; everything else (episode aggregation, size
buckets, histograms, pagination and caching) lives here.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections import Counter
from typing import Any

from analyzerr.exceptions import AnalyzerrError, NotFoundError
from analyzerr.models.media_file import UNKNOWN, MediaFile, MediaType
from analyzerr.utils.cache import CacheBackend
from analyzerr.utils.concurrency import run_settled
from analyzerr.utils.pagination import LIMIT_ALL, create_pagination_meta, paginate, validate_pagination_params

GB = 1024 ** 3

SIZE_RANGES = [
    ("< 1 GB", 0, GB),
    ("1-5 GB", GB, 5 * GB),
    ("5-10 GB", 5 * GB, 10 * GB),
    ("10-20 GB", 10 * GB, 20 * GB),
    ("> 20 GB", 20 * GB, float("inf")),
]

RUNTIME_RANGES = [
    ("< 30 min", 0, 30),
    ("30-60 min", 30, 60),
    ("60-90 min", 60, 90),
    ("90-120 min", 90, 120),
    ("120-180 min", 120, 180),
    ("> 180 min", 180, float("inf")),
]

TOP_GENRES = 10
SHOW_SEPARATOR = " - "


def percentage(count: float, total: float) -> float:
    """Share of total as a 0-100 value rounded to two decimals"""
    return round(count / total * 100, 2) if total else 0.0


def normalize_resolution(value: Any) -> str:
    """'1080' -> '1080p', '4k' -> '4K', 'sd' -> 'SD', missing -> 'Unknown'"""
    if value is None or str(value).strip() == "":
        return UNKNOWN
    text = str(value).strip()
    if text.isdigit():
        return f"{text}p"
    if text.lower() == "4k":
        return "4K"
    if re.fullmatch(r"\d+[pi]", text, re.IGNORECASE):
        return text.lower()
    return text.upper()


def normalize_codec_label(value: Any) -> str:
    if value is None or str(value).strip() == "":
        return UNKNOWN
    return str(value).strip().upper()


def to_int(value: Any) -> int:
    try:
        return max(int(float(value)), 0)
    except (TypeError, ValueError):
        return 0


def most_common(values: list[str]) -> str:
    """Most frequent value; ties go to whichever was seen first"""
    if not values:
        return UNKNOWN
    counts = Counter(values)
    best = max(counts.values())
    return next(value for value in values if counts[value] == best)


def show_name_for(title: str) -> str:
    return title.split(SHOW_SEPARATOR)[0]


def aggregate_episodes_by_show(files: list[MediaFile]) -> list[MediaFile]:
    """Collapse episode records into one 'show' record per show, keeping other records as-is"""
    groups: dict[str, list[MediaFile]] = {}
    others: list[MediaFile] = []
    for media_file in files:
        if media_file.type == MediaType.EPISODE:
            groups.setdefault(show_name_for(media_file.title), []).append(media_file)
        else:
            others.append(media_file)

    if not groups:
        return list(files)

    shows = []
    for show_name, episodes in groups.items():
        shows.append(
            MediaFile(
                id=f"show-{re.sub(r'[^a-zA-Z0-9]', '-', show_name)}",
                title=show_name,
                file_path=f"{len(episodes)} episodes",
                file_size=sum(ep.file_size for ep in episodes),
                resolution=most_common([ep.resolution for ep in episodes]),
                codec=most_common([ep.codec for ep in episodes]),
                year=episodes[0].year,
                type=MediaType.SHOW,
                show_name=show_name,
                episode_count=len(episodes),
                genres=episodes[0].genres,
            )
        )
    return shows + others


def calculate_size_distribution(files: list[MediaFile]) -> list[dict[str, Any]]:
    """Fixed size buckets; empty buckets are left out"""
    total_files = len(files)
    distribution = []
    for name, low, high in SIZE_RANGES:
        in_range = [f for f in files if low <= f.file_size < high]
        if not in_range:
            continue
        distribution.append(
            {
                "range": name,
                "count": len(in_range),
                "total_size": sum(f.file_size for f in in_range),
                "percentage": percentage(len(in_range), total_files),
            }
        )
    return distribution


def runtime_range(minutes: int) -> str:
    for name, low, high in RUNTIME_RANGES:
        if low <= minutes < high:
            return name
    return RUNTIME_RANGES[-1][0]


def build_size_analysis(files: list[MediaFile], limit: int = LIMIT_ALL, offset: int = 0) -> dict[str, Any]:
    """Size analysis over every file with a known size.

    Totals, averages and buckets always cover the whole library; only the
    ``largest_files`` and ``episode_breakdown`` lists are paginated.
    """
    sized = [f for f in files if f.file_size > 0]
    has_episodes = any(f.type == MediaType.EPISODE for f in sized)
    processed = aggregate_episodes_by_show(sized) if has_episodes else sized

    largest = sorted(processed, key=lambda f: f.file_size, reverse=True)
    total_size = sum(f.file_size for f in sized)

    result: dict[str, Any] = {
        "largest_files": [f.to_dict() for f in paginate(largest, offset, limit)],
        "size_distribution": calculate_size_distribution(processed),
        "average_file_size": total_size / len(processed) if processed else 0,
        "total_size": total_size,
        "total_files": len(processed),
        "has_episodes": has_episodes,
    }
    if has_episodes:
        episodes = sorted(sized, key=lambda f: f.file_size, reverse=True)
        result["episode_breakdown"] = [f.to_dict() for f in paginate(episodes, offset, limit)]
        result["episode_pagination"] = create_pagination_meta(offset, limit, len(episodes))
    return result


def build_quality_analysis(page: list[MediaFile], library_total: int) -> dict[str, Any]:
    """Resolution/codec histograms for a page of files, as a share of the whole library"""
    resolutions = Counter(f.resolution for f in page)
    codecs = Counter(f.codec for f in page)
    return {
        "resolution_distribution": [
            {"resolution": res, "count": count, "percentage": percentage(count, library_total)}
            for res, count in resolutions.most_common()
        ],
        "codec_distribution": [
            {"codec": codec, "count": count, "percentage": percentage(count, library_total)}
            for codec, count in codecs.most_common()
        ],
    }


def build_content_analysis(page: list[MediaFile], library_total: int) -> dict[str, Any]:
    """Genre/year/runtime histograms for a page of titles"""
    genres: Counter = Counter()
    years: Counter = Counter()
    runtimes: dict[str, list[int]] = {}

    for item in page:
        genres.update(g for g in item.genres if g)
        if item.year:
            years[item.year] += 1
        if item.duration_ms:
            minutes = item.duration_ms // 60000
            runtimes.setdefault(runtime_range(minutes), []).append(minutes)

    order = [name for name, _, _ in RUNTIME_RANGES]
    return {
        "genre_distribution": [
            {"genre": genre, "count": count, "percentage": percentage(count, library_total)}
            for genre, count in genres.most_common(TOP_GENRES)
        ],
        "year_distribution": [{"year": year, "count": years[year]} for year in sorted(years)],
        "runtime_distribution": [
            {
                "range": name,
                "count": len(runtimes[name]),
                "average_runtime": round(sum(runtimes[name]) / len(runtimes[name]), 2),
            }
            for name in order
            if name in runtimes
        ],
    }


class LibraryAnalyzer(ABC):
    """Analysis generator for one upstream statistics source.

    Subclasses implement the ingestion adapter (``get_libraries``,
    ``_load_files`` and ``_load_titles``); this class owns caching,
    aggregation and pagination.
    """

    source_name = "base"
    cache_prefix = "analysis"

    def __init__(self, service, cache: CacheBackend, cache_ttl: float = 1800, max_workers: int = 6):
        self.service = service
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.max_workers = max_workers
        self.logger = logging.getLogger(self.__class__.__name__)

    # Ingestion adapter

    @abstractmethod
    def get_libraries(self) -> list[dict[str, Any]]:
        """Libraries as [{id, title, type, item_count, total_size}]"""

    @abstractmethod
    def _load_files(self, library_id: str) -> list[MediaFile]:
        """One record per media file, episodes expanded for TV libraries"""

    @abstractmethod
    def _load_titles(self, library_id: str) -> list[MediaFile]:
        """One record per top-level title, carrying genres/year/runtime"""

    # Cache helpers

    def cache_key(self, library_id: str, *parts: Any) -> str:
        suffix = ":".join(str(p) for p in parts)
        return f"{self.cache_prefix}:{self.source_name}:{library_id}:{suffix}"

    def _cached(self, key: str, producer):
        cached = self.cache.get(key)
        if cached is not None:
            self.logger.debug(f"Cache hit for {key}")
            return cached
        value = producer()
        self.cache.set(key, value, self.cache_ttl)
        return value

    def get_files(self, library_id: str) -> list[MediaFile]:
        return self._cached(self.cache_key(library_id, "files"), lambda: self._load_files(library_id))

    def get_titles(self, library_id: str) -> list[MediaFile]:
        return self._cached(self.cache_key(library_id, "titles"), lambda: self._load_titles(library_id))

    def _require_files(self, library_id: str) -> list[MediaFile]:
        files = self.get_files(library_id)
        if not files:
            raise NotFoundError(f"No items found in library {library_id}")
        return files

    def _require_titles(self, library_id: str) -> list[MediaFile]:
        titles = self.get_titles(library_id)
        if not titles:
            raise NotFoundError(f"No items found in library {library_id}")
        return titles

    # Public operations

    def get_library(self, library_id: str) -> dict[str, Any]:
        library = next((lib for lib in self.get_libraries() if str(lib["id"]) == str(library_id)), None)
        if library is None:
            raise NotFoundError(f"Library {library_id} not found")
        return library

    def get_size_analysis(self, library_id: str, limit: int | None = None, offset: int | None = None) -> dict[str, Any]:
        limit, offset = validate_pagination_params(limit, offset, "size")

        def generate():
            self.logger.info(f"Generating size analysis for library {library_id} (limit: {limit}, offset: {offset})")
            data = build_size_analysis(self._require_files(library_id), limit, offset)
            return {"data": data, "pagination": create_pagination_meta(offset, limit, data["total_files"])}

        return self._cached(self.cache_key(library_id, "size", limit, offset), generate)

    def get_quality_analysis(self, library_id: str, limit: int | None = None, offset: int | None = None) -> dict[str, Any]:
        limit, offset = validate_pagination_params(limit, offset, "quality")

        def generate():
            files = self._require_files(library_id)
            page = paginate(files, offset, limit)
            self.logger.info(f"Generating quality analysis for {len(page)} of {len(files)} files in library {library_id}")
            return {
                "data": build_quality_analysis(page, len(files)),
                "pagination": create_pagination_meta(offset, limit, len(files)),
            }

        return self._cached(self.cache_key(library_id, "quality", limit, offset), generate)

    def get_content_analysis(self, library_id: str, limit: int | None = None, offset: int | None = None) -> dict[str, Any]:
        limit, offset = validate_pagination_params(limit, offset, "content")

        def generate():
            titles = self._require_titles(library_id)
            page = paginate(titles, offset, limit)
            self.logger.info(f"Generating content analysis for {len(page)} of {len(titles)} titles in library {library_id}")
            return {
                "data": build_content_analysis(page, len(titles)),
                "pagination": create_pagination_meta(offset, limit, len(titles)),
            }

        return self._cached(self.cache_key(library_id, "content", limit, offset), generate)

    def get_library_analysis(self, library_id: str) -> dict[str, Any]:
        """Full size/quality/content analysis of one library.

        The library itself must be reachable; after that the three analyses
        are generated in parallel and a failing one degrades to an empty
        section listed under ``errors``.
        """
        cached = self.cache.get(self.cache_key(library_id, "full"))
        if cached is not None:
            self.logger.info(f"Returning cached analysis for library {library_id}")
            return cached

        library = self.get_library(library_id)
        files = self._require_files(library_id)

        def content():
            titles = self.get_titles(library_id)
            return build_content_analysis(titles, len(titles))

        results = run_settled(
            {
                "size": lambda: build_size_analysis(files),
                "quality": lambda: build_quality_analysis(files, len(files)),
                "content": content,
            },
            max_workers=self.max_workers,
        )

        empty = {
            "size": build_size_analysis([]),
            "quality": build_quality_analysis([], 0),
            "content": build_content_analysis([], 0),
        }
        size_analysis = results["size"].value_or(empty["size"])
        analysis = {
            "library_id": str(library_id),
            "library_name": library["title"],
            "total_size": self._library_total_size(library_id, files),
            "total_items": len(files),
            "size_analysis": size_analysis,
            "quality_analysis": results["quality"].value_or(empty["quality"]),
            "content_analysis": results["content"].value_or(empty["content"]),
            "errors": [f"{name}: {result.error}" for name, result in results.items() if not result.ok],
        }

        if not analysis["errors"]:
            self.cache.set(self.cache_key(library_id, "full"), analysis, self.cache_ttl)
        return analysis

    def _library_total_size(self, library_id: str, files: list[MediaFile]) -> int:
        return sum(f.file_size for f in files)

    def get_library_total_size(self, library_id: str) -> int:
        return self._cached(
            self.cache_key(library_id, "total_size"),
            lambda: self._library_total_size(library_id, self.get_files(library_id)),
        )

    def _library_totals(self, library: dict[str, Any]) -> tuple[int, int]:
        """(total size, item count) for the global stats breakdown"""
        analysis = self.get_library_analysis(str(library["id"]))
        return analysis["total_size"], analysis["total_items"]

    def get_global_stats(self) -> dict[str, Any]:
        key = f"{self.cache_prefix}:{self.source_name}:global:stats"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        libraries = self.get_libraries()
        breakdown = []
        for library in libraries:
            try:
                size, item_count = self._library_totals(library)
            except AnalyzerrError as e:
                self.logger.warning(f"Failed to get analysis for library {library.get('title')}: {e.message}")
                continue
            breakdown.append(
                {
                    "id": str(library["id"]),
                    "title": library.get("title"),
                    "type": library.get("type"),
                    "size": size,
                    "item_count": item_count,
                }
            )

        total_size = sum(lib["size"] for lib in breakdown)
        total_items = sum(lib["item_count"] for lib in breakdown)
        for lib in breakdown:
            lib["percentage"] = percentage(lib["size"], total_size)

        stats = {
            "total_size": total_size,
            "total_items": total_items,
            "average_file_size": total_size / total_items if total_items else 0,
            "total_libraries": len(libraries),
            "library_breakdown": sorted(breakdown, key=lambda lib: lib["size"], reverse=True),
        }
        self.cache.set(key, stats, self.cache_ttl)
        return stats

    def get_library_stats(self, library_id: str) -> dict[str, Any]:
        analysis = self.get_library_analysis(library_id)
        files = self.get_files(library_id)

        quality_distribution: dict[str, dict[str, int]] = {}
        for media_file in files:
            entry = quality_distribution.setdefault(media_file.resolution, {"count": 0, "size": 0})
            entry["count"] += 1
            entry["size"] += media_file.file_size

        return {
            "library_id": analysis["library_id"],
            "library_name": analysis["library_name"],
            "total_size": analysis["total_size"],
            "total_items": analysis["total_items"],
            "quality_distribution": quality_distribution,
            "size_distribution": analysis["size_analysis"]["size_distribution"],
            "average_file_size": analysis["size_analysis"]["average_file_size"],
        }

    def refresh_analysis(self, library_id: str) -> int:
        """Drop every cached entry for a library, plus the global stats"""
        removed = self.cache.delete_prefix(f"{self.cache_prefix}:{self.source_name}:{library_id}:")
        self.cache.delete(f"{self.cache_prefix}:{self.source_name}:global:stats")
        self.logger.info(f"Cleared {removed} cache entries for library {library_id}")
        return removed
