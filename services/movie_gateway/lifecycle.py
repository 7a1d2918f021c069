"""
Where: services/movie_gateway/lifecycle.py
What: Gateway startup/shutdown orchestration for shared resources.
Why: Keep main.py focused on app assembly.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .api.deps import build_movie_provider
from .config import GatewayConfig


@asynccontextmanager
async def manage_lifespan(
    app: FastAPI, gateway_config: GatewayConfig, log: logging.Logger
) -> AsyncIterator[None]:
    """Create the upstream client unless one was injected, and close what we own."""
    if getattr(app.state, "movie_provider", None) is None:
        app.state.movie_provider = build_movie_provider(gateway_config)
        app.state.owns_movie_provider = True
        log.info(
            "Movie provider initialized: %s (timeout=%ss)",
            gateway_config.DOUBAN_API_BASE_URL,
            gateway_config.UPSTREAM_TIMEOUT,
        )

    try:
        yield
    finally:
        provider = getattr(app.state, "movie_provider", None)
        if provider is not None and getattr(app.state, "owns_movie_provider", False):
            log.info("Gateway shutting down, closing movie provider client.")
            await provider.aclose()
            app.state.movie_provider = None
            app.state.owns_movie_provider = False
