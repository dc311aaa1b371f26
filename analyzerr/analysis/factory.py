"""
Data-source selection for library analysis
"""

import logging

from analyzerr.config import Config
from analyzerr.services import Services
from analyzerr.utils.cache import CacheBackend

from .base_analyzer import LibraryAnalyzer
from .plex_analyzer import PlexAnalyzer
from .tautulli_analyzer import TautulliAnalyzer

logger = logging.getLogger(__name__)


def get_analyzer(config: Config, services: Services, cache: CacheBackend) -> LibraryAnalyzer:
    """Build the analyzer for the configured data source.

    Tautulli is only used when it is both selected and fully configured;
    otherwise Plex is used.
    """
    if config.data_source == "tautulli":
        if config.tautulli_configured and services.tautulli.is_ready():
            logger.info("Using Tautulli as the library analysis data source")
            return TautulliAnalyzer(
                services.tautulli, cache, cache_ttl=config.analysis_cache_ttl_seconds, max_workers=config.max_workers
            )
        logger.warning("Tautulli selected as data source but not configured, falling back to Plex")

    logger.info("Using Plex as the library analysis data source")
    return PlexAnalyzer(services.plex, cache, cache_ttl=config.analysis_cache_ttl_seconds, max_workers=config.max_workers)
