"""
Movie endpoints mounted under /api.

Handlers validate their input, call the movie provider and wrap the result
in the response envelope. Provider failures propagate as UpstreamError
subclasses and are rendered by the registered exception handlers.
"""

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request
from pydantic import ValidationError

from ..core.exceptions import ClientInputError
from ..models.envelope import ApiResponse, success_response
from ..models.movie import Movie, RecommendRequest, RecommendResult, SearchResult
from .deps import LoggerDep, MovieProviderDep, RecommenderDep

MAX_SEARCH_COUNT = 100
DEFAULT_SEARCH_COUNT = 20

router = APIRouter(prefix="/api", tags=["Movies"])


@router.get("/movie/{movie_id}", response_model=ApiResponse[Movie])
async def get_movie(movie_id: str, provider: MovieProviderDep):
    """Movie detail by Douban subject id."""
    if not movie_id.isdigit():
        raise ClientInputError(f"invalid movie id: {movie_id}")
    movie = await provider.get_movie(movie_id)
    return success_response(movie)


@router.get("/search", response_model=ApiResponse[SearchResult])
async def search_movies(
    provider: MovieProviderDep,
    log: LoggerDep,
    q: Optional[str] = None,
    start: Optional[str] = None,
    count: Optional[str] = None,
):
    """Full-text movie search."""
    query = (q or "").strip()
    if not query:
        raise ClientInputError("query parameter 'q' is required")
    start_value = _parse_int("start", start, default=0, minimum=0)
    count_value = _parse_int(
        "count", count, default=DEFAULT_SEARCH_COUNT, minimum=1, maximum=MAX_SEARCH_COUNT
    )

    result = await provider.search(query, start_value, count_value)
    log.debug(
        f"Search '{query}' returned {len(result.subjects)} of {result.total}",
        extra={"query": query, "start": start_value, "count": count_value},
    )
    return success_response(result)


async def parse_recommend_request(request: Request) -> RecommendRequest:
    """Decode a JSON or URL-encoded recommend body."""
    raw = await request.body()
    content_type = request.headers.get("content-type", "")

    payload: Any
    if not raw.strip():
        payload = {}
    elif content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        payload = _form_payload(form)
    else:
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise ClientInputError("request body is not valid JSON") from e

    if not isinstance(payload, dict):
        raise ClientInputError("request body must be an object")

    try:
        return RecommendRequest.model_validate(payload)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"]) or "body"
        raise ClientInputError(f"invalid field '{location}': {error['msg']}") from e


@router.post("/recommend", response_model=ApiResponse[RecommendResult])
async def recommend_movies(request: Request, recommender: RecommenderDep):
    """Recommendations for a set of tags (top rated movies when no tags are given)."""
    body = await parse_recommend_request(request)
    result = await recommender.recommend(body)
    return success_response(result)


def _parse_int(
    name: str,
    raw: Optional[str],
    default: int,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ClientInputError(f"query parameter '{name}' must be an integer") from None
    if minimum is not None and value < minimum:
        raise ClientInputError(f"query parameter '{name}' must be >= {minimum}")
    if maximum is not None and value > maximum:
        raise ClientInputError(f"query parameter '{name}' must be <= {maximum}")
    return value


def _form_payload(form) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for key in ("tags", "exclude_ids"):
        values = []
        for value in form.getlist(key):
            values.extend(part.strip() for part in str(value).split(",") if part.strip())
        if values:
            payload[key] = values
    if form.get("count") is not None:
        payload["count"] = form.get("count")
    return payload
