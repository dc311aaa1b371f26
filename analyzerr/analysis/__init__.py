"""
Library analysis, quality scoring and data-source selection
"""

from .base_analyzer import LibraryAnalyzer
from .enhanced_analyzer import EnhancedAnalyzer
from .factory import get_analyzer
from .plex_analyzer import PlexAnalyzer
from .quality_scorer import QualityScore, QualityScorer
from .tautulli_analyzer import TautulliAnalyzer

__all__ = [
    "EnhancedAnalyzer",
    "LibraryAnalyzer",
    "PlexAnalyzer",
    "QualityScore",
    "QualityScorer",
    "TautulliAnalyzer",
    "get_analyzer",
]
