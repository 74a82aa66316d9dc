"""Pydantic models and enums for the symbol search service.

    from doxsearch.models import SearchResponse, MatchTier
"""

# ============ ENUMS ============
from .enums import IndexCategory, MatchTier, ShardNaming

# ============ API MODELS ============
from .search import (
    ErrorResponse,
    HealthResponse,
    NavigationResponse,
    OccurrenceInfo,
    SearchResponse,
    SearchResultItem,
)

__all__ = [
    # Enums
    "IndexCategory",
    "MatchTier",
    "ShardNaming",
    # API models
    "ErrorResponse",
    "HealthResponse",
    "NavigationResponse",
    "OccurrenceInfo",
    "SearchResponse",
    "SearchResultItem",
]
