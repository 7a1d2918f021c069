"""
Movie Recommender Service

Builds a recommendation list from the movie provider: movies matching more of
the requested tags rank first, then by rating.
"""

import asyncio
import logging
from typing import Dict, List, Tuple

from ..clients.douban import MovieProvider
from ..models.movie import MovieSummary, RecommendRequest, RecommendResult

logger = logging.getLogger("movie_gateway.recommender")


class MovieRecommender:
    def __init__(self, provider: MovieProvider, per_tag_count: int = 20):
        self.provider = provider
        self.per_tag_count = per_tag_count

    async def recommend(self, request: RecommendRequest) -> RecommendResult:
        tags = _normalize_tags(request.tags)
        excluded = set(request.exclude_ids)

        if tags:
            candidates = await self._candidates_by_tag(tags, request.count + len(excluded))
        else:
            top = await self.provider.top_rated(0, request.count + len(excluded))
            candidates = [(movie, 0) for movie in top.subjects]

        candidates = [(m, hits) for m, hits in candidates if m.id not in excluded]
        candidates.sort(key=lambda item: (-item[1], -(item[0].rating or 0.0), item[0].title))

        movies = [movie for movie, _ in candidates[: request.count]]
        logger.info(
            f"Recommended {len(movies)} movies",
            extra={"tags": tags, "requested": request.count, "excluded": len(excluded)},
        )
        return RecommendResult(tags=tags, count=len(movies), movies=movies)

    async def _candidates_by_tag(
        self, tags: List[str], wanted: int
    ) -> List[Tuple[MovieSummary, int]]:
        count = max(self.per_tag_count, wanted)
        results = await asyncio.gather(
            *(self.provider.search_by_tag(tag, 0, count) for tag in tags)
        )

        merged: Dict[str, Tuple[MovieSummary, int]] = {}
        for result in results:
            for movie in result.subjects:
                if movie.id in merged:
                    first_seen, hits = merged[movie.id]
                    merged[movie.id] = (first_seen, hits + 1)
                else:
                    merged[movie.id] = (movie, 1)
        return list(merged.values())


def _normalize_tags(tags: List[str]) -> List[str]:
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
