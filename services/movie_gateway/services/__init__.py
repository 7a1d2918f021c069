"""
Service layer for the movie endpoints.
"""

from .recommender import MovieRecommender

__all__ = ["MovieRecommender"]
