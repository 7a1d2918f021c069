import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

# Config is loaded at import time, so pin the environment before anything imports it.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DOUBAN_API_BASE_URL", "http://douban.test/v2/movie")
os.environ.setdefault("DOUBAN_API_KEY", "")

from services.movie_gateway.clients.douban import DoubanClient  # noqa: E402
from services.movie_gateway.config import GatewayConfig  # noqa: E402
from services.movie_gateway.main import create_app  # noqa: E402
from services.movie_gateway.models.movie import Movie, MovieSummary, SearchResult  # noqa: E402


@pytest.fixture
def public_dir(tmp_path):
    root = tmp_path / "public"
    (root / "css").mkdir(parents=True)
    (root / "api-docs.html").write_text("<h1>API docs</h1>", encoding="utf-8")
    (root / "client-demo.html").write_text("<h1>Demo</h1>", encoding="utf-8")
    (root / "css" / "site.css").write_bytes(b"body { color: #333; }")
    return root


@pytest.fixture
def gateway_config(public_dir):
    return GatewayConfig(
        _env_file=None,
        APP_ENV="test",
        PUBLIC_DIR=str(public_dir),
        DOUBAN_API_BASE_URL="http://douban.test/v2/movie",
        UPSTREAM_TIMEOUT=1.0,
        CIRCUIT_BREAKER_THRESHOLD=3,
    )


@pytest.fixture
def movie_provider():
    provider = AsyncMock(spec=DoubanClient)
    provider.get_movie.return_value = Movie(
        id="1292052",
        title="The Shawshank Redemption",
        year="1994",
        rating=9.7,
        genres=["Drama", "Crime"],
    )
    provider.search.return_value = SearchResult(
        start=0,
        count=1,
        total=1,
        subjects=[MovieSummary(id="1292052", title="The Shawshank Redemption", rating=9.7)],
    )
    provider.top_rated.return_value = SearchResult(start=0, count=0, total=0, subjects=[])
    provider.search_by_tag.return_value = SearchResult(start=0, count=0, total=0, subjects=[])
    return provider


@pytest.fixture
def mock_logger():
    return MagicMock()


@pytest.fixture
def main_app(gateway_config, movie_provider, mock_logger):
    return create_app(gateway_config, log=mock_logger, movie_provider=movie_provider)


@pytest.fixture
def client(main_app):
    with TestClient(main_app) as test_client:
        yield test_client
