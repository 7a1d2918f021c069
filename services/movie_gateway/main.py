"""
Douban Movie Gateway - HTTP entry point

Assembles the request pipeline (CORS, request logging, static assets, routes,
error handling) into an ASGI app. The same app is either served by uvicorn
on its own port or handed to a managed host that invokes it per request.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import movies, routes
from .clients.douban import MovieProvider
from .config import GatewayConfig, config
from .core.logging_config import setup_logging
from .core.static import StaticAssetMiddleware
from .exceptions import register_exception_handlers
from .lifecycle import manage_lifespan
from .middleware import (
    build_error_envelope_middleware,
    build_request_logging_middleware,
    request_id_middleware,
)

logger = logging.getLogger("movie_gateway.main")


def create_app(
    gateway_config: Optional[GatewayConfig] = None,
    log: Optional[logging.Logger] = None,
    movie_provider: Optional[MovieProvider] = None,
) -> FastAPI:
    """
    Build the gateway app.

    Args:
        gateway_config: Settings; defaults to the environment-loaded singleton
        log: Logger handed to every pipeline stage and handler
        movie_provider: Pre-built movie provider (tests, embedding); created on startup otherwise
    """
    gateway_config = gateway_config or config
    log = log or logger

    def lifespan(app: FastAPI):
        return manage_lifespan(app, gateway_config, log)

    # Swagger UI and ReDoc are disabled: /docs redirects to the static API guide.
    app = FastAPI(
        title=gateway_config.SERVICE_NAME,
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.config = gateway_config
    app.state.logger = log
    app.state.movie_provider = movie_provider
    app.state.owns_movie_provider = False

    # Starlette runs the last-added middleware first, so stages are added innermost first:
    # request id -> CORS -> error envelope -> request logging -> static assets -> routes.
    app.add_middleware(StaticAssetMiddleware, directory=gateway_config.PUBLIC_DIR)
    app.middleware("http")(build_request_logging_middleware(log))
    app.middleware("http")(build_error_envelope_middleware(log))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=gateway_config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )
    app.middleware("http")(request_id_middleware)

    register_exception_handlers(app)

    app.include_router(routes.router)
    app.include_router(movies.router)
    return app


def serve(gateway_config: Optional[GatewayConfig] = None) -> None:
    """
    Standalone entry point: bind a port and serve the app.

    In host-managed mode nothing is bound; the host imports `handler` instead.
    """
    gateway_config = gateway_config or config
    if gateway_config.is_host_managed:
        logger.info(
            "APP_ENV=%s: host-managed mode, not binding a port", gateway_config.APP_ENV
        )
        return

    import uvicorn

    base_url = f"http://localhost:{gateway_config.PORT}"
    logger.info(f"{gateway_config.SERVICE_NAME} started: {base_url}")
    logger.info(f"API docs: {base_url}/docs")
    logger.info(f"Client demo: {base_url}/demo")
    target = app if gateway_config is config else create_app(gateway_config)
    uvicorn.run(target, host=gateway_config.HOST, port=gateway_config.PORT, log_config=None)


setup_logging(config)
app = create_app()

# Export for managed hosts (serverless runtimes import the ASGI callable).
handler = app


if __name__ == "__main__":
    serve()
