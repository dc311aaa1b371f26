"""
Configuration management for Analyzerr using Pydantic
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Configuration settings for Analyzerr loaded from environment or .env file"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Plex (source A)
    plex_url: str | None = Field(None, description="Plex server base URL")
    plex_token: str | None = Field(None, description="Plex authentication token")

    # Tautulli (source B)
    tautulli_url: str | None = Field(None, description="Tautulli base URL")
    tautulli_api_key: str | None = Field(None, description="Tautulli API key")
    tautulli_enabled: bool = Field(False, description="Allow Tautulli to be used as a data source")

    # Content acquisition services
    radarr_url: str | None = Field(None, description="Radarr base URL")
    radarr_api_key: str | None = Field(None, description="Radarr API key")
    radarr_enabled: bool = Field(True, description="Include Radarr in content summaries")
    sonarr_url: str | None = Field(None, description="Sonarr base URL")
    sonarr_api_key: str | None = Field(None, description="Sonarr API key")
    sonarr_enabled: bool = Field(True, description="Include Sonarr in content summaries")

    # Analysis
    data_source: Literal["plex", "tautulli"] = Field("plex", description="Statistics source for library analysis")

    # Cache
    cache_enabled: bool = Field(True, description="Enable the in-memory TTL cache")
    cache_ttl_seconds: int = Field(300, ge=1, description="Default cache entry lifetime")
    analysis_cache_ttl_seconds: int = Field(1800, ge=1, description="Lifetime of per-library analysis results")
    enrichment_cache_ttl_seconds: int = Field(86400, ge=1, description="Lifetime of per-file enrichment results")
    cache_sweep_enabled: bool = Field(True, description="Run the periodic expired-entry sweep")
    cache_sweep_interval_seconds: int = Field(300, ge=1, description="Seconds between cache sweeps")

    # Upstream timeouts (seconds)
    plex_timeout: float = Field(10, gt=0, description="Plex request timeout")
    tautulli_timeout: float = Field(5, gt=0, description="Tautulli request timeout")
    radarr_timeout: float = Field(5, gt=0, description="Radarr request timeout")
    sonarr_timeout: float = Field(5, gt=0, description="Sonarr request timeout")

    # Concurrency
    max_workers: int = Field(6, ge=1, description="Worker threads for parallel upstream calls")

    # Application Configuration
    host: str = Field("0.0.0.0", description="Flask host")  # noqa: S104
    port: int = Field(5002, description="Flask port")
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")
    log_file: str | None = Field(None, description="Optional log file path")

    @field_validator("plex_url", "tautulli_url", "radarr_url", "sonarr_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        if v is not None:
            return str(v).rstrip("/")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v):
        return str(v).upper()

    @property
    def tautulli_configured(self) -> bool:
        """Whether Tautulli is enabled and has both URL and API key"""
        return bool(self.tautulli_enabled and self.tautulli_url and self.tautulli_api_key)
