"""
Upstream API clients.
"""

from .douban import DoubanClient, MovieProvider

__all__ = ["DoubanClient", "MovieProvider"]
