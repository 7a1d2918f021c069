"""
Data model definitions package.

Aggregates Pydantic models for use in other modules.
"""

from .context import RequestContext
from .envelope import ApiResponse, error_response, success_response
from .movie import Movie, MovieSummary, RecommendRequest, RecommendResult, SearchResult

__all__ = [
    "ApiResponse",
    "Movie",
    "MovieSummary",
    "RecommendRequest",
    "RecommendResult",
    "RequestContext",
    "SearchResult",
    "error_response",
    "success_response",
]
