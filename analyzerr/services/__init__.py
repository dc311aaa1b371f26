"""
Upstream API clients for Analyzerr
"""

from dataclasses import dataclass

from analyzerr.config import Config

from .base_service import ArrService, BaseService
from .content_aggregator import ContentAggregator
from .plex_service import PlexService
from .radarr_service import RadarrService
from .sonarr_service import SonarrService
from .tautulli_service import TautulliService


@dataclass
class Services:
    """Every upstream client, built once at composition time"""
    plex: PlexService
    tautulli: TautulliService
    radarr: RadarrService
    sonarr: SonarrService


def build_services(config: Config) -> Services:
    """Create service clients from configuration; disabled services get no credentials"""
    return Services(
        plex=PlexService(config.plex_url, config.plex_token, timeout=config.plex_timeout),
        tautulli=TautulliService(
            config.tautulli_url if config.tautulli_enabled else None,
            config.tautulli_api_key,
            timeout=config.tautulli_timeout,
        ),
        radarr=RadarrService(
            config.radarr_url if config.radarr_enabled else None,
            config.radarr_api_key,
            timeout=config.radarr_timeout,
        ),
        sonarr=SonarrService(
            config.sonarr_url if config.sonarr_enabled else None,
            config.sonarr_api_key,
            timeout=config.sonarr_timeout,
        ),
    )


__all__ = [
    "ArrService",
    "BaseService",
    "ContentAggregator",
    "PlexService",
    "RadarrService",
    "Services",
    "SonarrService",
    "TautulliService",
    "build_services",
]
