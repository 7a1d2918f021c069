"""
Dependency Injection for Gateway API.

Manage request handler dependencies using FastAPI Depends.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from ..clients.douban import DoubanClient, MovieProvider
from ..config import GatewayConfig
from ..core.circuit_breaker import CircuitBreaker
from ..core.exceptions import MovieNotFoundError
from ..services.recommender import MovieRecommender
from services.common.core.http_client import HttpClientFactory


def get_config(request: Request) -> GatewayConfig:
    return request.app.state.config


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def build_movie_provider(gateway_config: GatewayConfig) -> DoubanClient:
    """Create a Douban client owning its own HTTP connection pool."""
    factory = HttpClientFactory(gateway_config)
    client = factory.create_async_client(timeout=gateway_config.UPSTREAM_TIMEOUT)
    breaker = CircuitBreaker(
        failure_threshold=gateway_config.CIRCUIT_BREAKER_THRESHOLD,
        recovery_timeout=gateway_config.CIRCUIT_BREAKER_RECOVERY_TIMEOUT,
        ignored_exceptions=(MovieNotFoundError,),
    )
    return DoubanClient(
        client,
        base_url=gateway_config.DOUBAN_API_BASE_URL,
        api_key=gateway_config.DOUBAN_API_KEY,
        timeout=gateway_config.UPSTREAM_TIMEOUT,
        breaker=breaker,
        owns_client=True,
    )


def get_movie_provider(request: Request) -> MovieProvider:
    provider = getattr(request.app.state, "movie_provider", None)
    if provider is not None:
        return provider

    # Managed hosts may invoke the app without running lifespan events.
    provider = build_movie_provider(request.app.state.config)
    request.app.state.movie_provider = provider
    request.app.state.owns_movie_provider = True
    return provider


# Dependency Type Aliases
ConfigDep = Annotated[GatewayConfig, Depends(get_config)]
LoggerDep = Annotated[logging.Logger, Depends(get_logger)]
MovieProviderDep = Annotated[MovieProvider, Depends(get_movie_provider)]


def get_recommender(provider: MovieProviderDep) -> MovieRecommender:
    return MovieRecommender(provider)


RecommenderDep = Annotated[MovieRecommender, Depends(get_recommender)]
