"""
Analyzerr - media library analytics and quality scoring service
"""

import atexit
import logging
from datetime import datetime, timezone
from typing import Any

from flask import Flask, request

from analyzerr import __version__
from analyzerr.analysis import EnhancedAnalyzer, get_analyzer
from analyzerr.config import Config
from analyzerr.exceptions import AnalyzerrError, NotFoundError
from analyzerr.models.filters import EpisodeFilters, MovieFilters, QueueFilters
from analyzerr.scheduler import CacheSweeper
from analyzerr.services import ContentAggregator, Services, build_services
from analyzerr.utils.cache import TTLCache
from analyzerr.utils.pagination import LIMIT_ALL


def create_app(config: Config | None = None, services: Services | None = None, cache: TTLCache | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Load configuration
    config = config or Config()

    # Setup logging
    _setup_logging(config)

    # Initialize shared cache and services
    cache = cache or TTLCache(default_ttl=config.cache_ttl_seconds, enabled=config.cache_enabled)
    services = services or build_services(config)
    analyzer = get_analyzer(config, services, cache)
    enhanced = EnhancedAnalyzer(analyzer, cache, enrichment_ttl=config.enrichment_cache_ttl_seconds)
    aggregator = ContentAggregator(services.radarr, services.sonarr, max_workers=config.max_workers)

    # Register routes and error handlers
    _register_routes(app, config, services, analyzer, enhanced, aggregator, cache)
    _register_error_handlers(app)

    # Start background cache sweep if enabled
    if config.cache_enabled and config.cache_sweep_enabled:
        sweeper = CacheSweeper(cache, interval_seconds=config.cache_sweep_interval_seconds)
        sweeper.start()

        # Ensure sweeper is stopped when app shuts down
        atexit.register(sweeper.stop)
        app.sweeper = sweeper

    app.cache = cache
    app.analyzer = analyzer
    return app


def _setup_logging(config: Config) -> None:
    """Configure application logging."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

    logger = logging.getLogger(__name__)
    logger.info("Starting Analyzerr application")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _page_args() -> tuple[int | None, int | None]:
    return request.args.get("limit", type=int), request.args.get("offset", type=int)


def _register_routes(
    app: Flask,
    config: Config,
    services: Services,
    analyzer,
    enhanced: EnhancedAnalyzer,
    aggregator: ContentAggregator,
    cache: TTLCache,
) -> None:
    """Register application routes."""
    logger = logging.getLogger(__name__)

    @app.route("/")
    def index() -> dict[str, Any]:
        """Service information endpoint."""
        return {
            "service": "Analyzerr",
            "version": __version__,
            "description": "Media library analytics and quality scoring",
            "data_source": analyzer.source_name,
            "status": "running",
            "timestamp": _timestamp(),
        }

    @app.route("/health")
    def health() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": _timestamp(),
            "cache": cache.stats(),
            "services": {
                "plex": {"configured": services.plex.is_ready()},
                "tautulli": {"configured": services.tautulli.is_ready()},
                "radarr": {"configured": services.radarr.is_ready()},
                "sonarr": {"configured": services.sonarr.is_ready()},
            },
        }

    @app.route("/libraries")
    def libraries() -> dict[str, Any]:
        return {"libraries": analyzer.get_libraries()}

    @app.route("/libraries/<library_id>")
    def library_stats(library_id: str) -> dict[str, Any]:
        return analyzer.get_library_stats(library_id)

    @app.route("/libraries/<library_id>/total-size")
    def library_total_size(library_id: str) -> dict[str, Any]:
        return {"library_id": library_id, "total_size": analyzer.get_library_total_size(library_id)}

    @app.route("/libraries/<library_id>/analysis")
    def library_analysis(library_id: str) -> dict[str, Any]:
        return analyzer.get_library_analysis(library_id)

    @app.route("/libraries/<library_id>/analysis/size")
    def size_analysis(library_id: str) -> dict[str, Any]:
        limit, offset = _page_args()
        return analyzer.get_size_analysis(library_id, limit, offset)

    @app.route("/libraries/<library_id>/analysis/quality")
    def quality_analysis(library_id: str) -> dict[str, Any]:
        limit, offset = _page_args()
        return analyzer.get_quality_analysis(library_id, limit, offset)

    @app.route("/libraries/<library_id>/analysis/content")
    def content_analysis(library_id: str) -> dict[str, Any]:
        limit, offset = _page_args()
        return analyzer.get_content_analysis(library_id, limit, offset)

    @app.route("/libraries/<library_id>/analysis/enhanced")
    def enhanced_analysis(library_id: str) -> dict[str, Any]:
        limit, offset = _page_args()
        return enhanced.get_enhanced_size_analysis(library_id, LIMIT_ALL if limit is None else limit, offset)

    @app.route("/libraries/<library_id>/refresh", methods=["POST"])
    def refresh(library_id: str) -> dict[str, Any]:
        removed = analyzer.refresh_analysis(library_id)
        logger.info(f"Refresh requested for library {library_id}")
        return {"message": "Analysis cache cleared", "library_id": library_id, "cleared": removed}

    @app.route("/stats/global")
    def global_stats() -> dict[str, Any]:
        return analyzer.get_global_stats()

    @app.route("/content/summary")
    def content_summary() -> dict[str, Any]:
        return aggregator.get_content_summary()

    @app.route("/content/queue")
    def content_queue() -> dict[str, Any]:
        return aggregator.get_combined_queue(QueueFilters.from_args(request.args))

    @app.route("/content/movies/<kind>")
    def content_movies(kind: str) -> dict[str, Any]:
        if kind not in ("wanted", "missing"):
            raise NotFoundError(f"Unknown movie listing: {kind}")
        return aggregator.get_movies(MovieFilters.from_args(request.args), missing_only=kind == "missing")

    @app.route("/content/episodes/<kind>")
    def content_episodes(kind: str) -> dict[str, Any]:
        if kind not in ("wanted", "missing"):
            raise NotFoundError(f"Unknown episode listing: {kind}")
        return aggregator.get_episodes(EpisodeFilters.from_args(request.args), missing_only=kind == "missing")

    @app.route("/content/status")
    def content_status() -> dict[str, Any]:
        return aggregator.get_services_status()


def _register_error_handlers(app: Flask) -> None:
    """Register application error handlers."""
    logger = logging.getLogger(__name__)

    @app.errorhandler(AnalyzerrError)
    def analyzerr_error(error: AnalyzerrError) -> tuple[dict[str, str], int]:
        """Map domain errors to their status codes."""
        logger.warning(f"{error.__class__.__name__}: {error.message}")
        return {"error": error.__class__.__name__, "message": error.message}, error.status_code

    @app.errorhandler(404)
    def not_found(error) -> tuple[dict[str, str], int]:
        """Handle 404 errors."""
        return {"error": "Endpoint not found"}, 404

    @app.errorhandler(500)
    def internal_error(error) -> tuple[dict[str, str], int]:
        """Handle 500 errors."""
        logger.error(f"Internal server error: {error}")
        return {"error": "Internal server error"}, 500


def main():
    """Main entry point."""
    config = Config()
    app = create_app(config)

    app.run(host=config.host, port=config.port, debug=config.debug)


if __name__ == "__main__":
    main()
