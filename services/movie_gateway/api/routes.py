"""
Fixed endpoints: health check, documentation and demo redirects, service info.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from .deps import ConfigDep

DOCS_ASSET_PATH = "/api-docs.html"
DEMO_ASSET_PATH = "/client-demo.html"

API_ENDPOINTS = [
    {"method": "GET", "path": "/api/movie/:id", "description": "Get movie details"},
    {
        "method": "GET",
        "path": "/api/search",
        "description": "Search movies",
        "params": ["q", "start", "count"],
    },
    {
        "method": "POST",
        "path": "/api/recommend",
        "description": "Get movie recommendations",
        "params": ["tags", "count", "exclude_ids"],
    },
]

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/docs")
async def docs_redirect():
    return RedirectResponse(DOCS_ASSET_PATH, status_code=302)


@router.get("/demo")
async def demo_redirect():
    return RedirectResponse(DEMO_ASSET_PATH, status_code=302)


@router.get("/")
async def service_info(request: Request, gateway_config: ConfigDep):
    """Service metadata with absolute links derived from the request origin."""
    host = request.headers.get("host") or request.url.netloc
    origin = f"{request.url.scheme}://{host}"
    return {
        "message": gateway_config.SERVICE_NAME,
        "docs": f"{origin}/docs",
        "demo": f"{origin}/demo",
        "endpoints": API_ENDPOINTS,
    }
