"""
Analyzerr - Library analytics and quality scoring for Plex, Tautulli, Radarr and Sonarr
"""

__version__ = "0.1.0"
