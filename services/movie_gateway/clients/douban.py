"""
Douban movie API client.

Fetches subjects from the Douban v2 movie API and normalizes them into the
gateway's movie models. Every call carries a timeout and goes through a
circuit breaker so a failing upstream degrades into fast 503s.
"""

import logging
from typing import Any, Callable, Dict, Optional, Protocol, TypeVar

import httpx

from ..core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError
from ..core.exceptions import (
    MovieNotFoundError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from ..models.movie import Movie, MovieSummary, SearchResult

logger = logging.getLogger("movie_gateway.douban")

T = TypeVar("T")


class MovieProvider(Protocol):
    """What the /api handlers need from a movie data source."""

    async def get_movie(self, movie_id: str) -> Movie: ...

    async def search(self, query: str, start: int = 0, count: int = 20) -> SearchResult: ...

    async def search_by_tag(self, tag: str, start: int = 0, count: int = 20) -> SearchResult: ...

    async def top_rated(self, start: int = 0, count: int = 20) -> SearchResult: ...

    async def aclose(self) -> None: ...


class DoubanClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        breaker: Optional[CircuitBreaker] = None,
        owns_client: bool = False,
    ):
        """
        Args:
            client: Shared httpx.AsyncClient
            base_url: Douban movie API root, e.g. https://api.douban.com/v2/movie
            api_key: Sent as the apikey query parameter when non-empty
            timeout: Per-request timeout in seconds
            breaker: Circuit breaker guarding the upstream
            owns_client: Close the httpx client in aclose()
        """
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.breaker = breaker or CircuitBreaker(ignored_exceptions=(MovieNotFoundError,))
        self.owns_client = owns_client

    async def get_movie(self, movie_id: str) -> Movie:
        path = f"/subject/{movie_id}"
        data = await self._get(path, {}, not_found_id=movie_id)
        return self._normalize(path, Movie.from_subject, data)

    async def search(self, query: str, start: int = 0, count: int = 20) -> SearchResult:
        data = await self._get("/search", {"q": query, "start": start, "count": count})
        return self._normalize("/search", self._to_search_result, data, start, count)

    async def search_by_tag(self, tag: str, start: int = 0, count: int = 20) -> SearchResult:
        data = await self._get("/search", {"tag": tag, "start": start, "count": count})
        return self._normalize("/search", self._to_search_result, data, start, count)

    async def top_rated(self, start: int = 0, count: int = 20) -> SearchResult:
        data = await self._get("/top250", {"start": start, "count": count})
        return self._normalize("/top250", self._to_search_result, data, start, count)

    async def aclose(self) -> None:
        if self.owns_client:
            await self.client.aclose()

    async def _get(
        self, path: str, params: Dict[str, Any], not_found_id: Optional[str] = None
    ) -> Dict[str, Any]:
        try:
            return await self.breaker.call(self._request, path, params, not_found_id)
        except CircuitBreakerOpenError as e:
            logger.warning(
                "Douban request rejected, circuit open",
                extra={"upstream_path": path, "error_detail": str(e)},
            )
            raise UpstreamUnavailableError(str(e)) from e

    async def _request(
        self, path: str, params: Dict[str, Any], not_found_id: Optional[str]
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        if self.api_key:
            params = {**params, "apikey": self.api_key}

        try:
            response = await self.client.get(url, params=params, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.error(
                "Douban request timed out",
                extra={"target_url": url, "timeout": self.timeout, "error_detail": str(e)},
            )
            raise UpstreamTimeoutError(str(e)) from e
        except httpx.RequestError as e:
            logger.error(
                "Douban request failed",
                extra={
                    "target_url": url,
                    "error_type": type(e).__name__,
                    "error_detail": str(e),
                },
            )
            raise UpstreamUnavailableError(str(e)) from e

        if response.status_code == 404 and not_found_id is not None:
            raise MovieNotFoundError(not_found_id)
        if response.is_error:
            logger.error(
                f"Douban responded with HTTP {response.status_code}",
                extra={
                    "target_url": url,
                    "status": response.status_code,
                    "snippet": response.text[:200],
                },
            )
            raise UpstreamError(detail=f"HTTP {response.status_code} from {path}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(detail=f"non-JSON body from {path}") from e
        if not isinstance(data, dict):
            raise UpstreamError(detail=f"unexpected payload type from {path}")
        return data

    @staticmethod
    def _normalize(path: str, build: Callable[..., T], *args: Any) -> T:
        try:
            return build(*args)
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(
                "Douban payload has an unexpected shape",
                extra={"upstream_path": path, "error_type": type(e).__name__, "error_detail": str(e)},
            )
            raise UpstreamError(detail=f"malformed payload from {path}") from e

    @staticmethod
    def _to_search_result(data: Dict[str, Any], start: int, count: int) -> SearchResult:
        subjects = [
            MovieSummary.from_subject(s) for s in data.get("subjects") or [] if isinstance(s, dict)
        ]
        return SearchResult(
            start=int(data.get("start", start)),
            count=int(data.get("count", len(subjects))),
            total=int(data.get("total", len(subjects))),
            subjects=subjects,
        )
