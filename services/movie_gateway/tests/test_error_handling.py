"""
Where: services/movie_gateway/tests/test_error_handling.py
What: Error envelopes for client, upstream and unhandled failures.
Why: No failure may escape the pipeline or leak internals to the client.
"""

import json
import logging

import pytest
from fastapi.testclient import TestClient

from services.common.core.logging_config import CustomJsonFormatter
from services.movie_gateway.core.exceptions import (
    ClientInputError,
    MovieNotFoundError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from services.movie_gateway.main import create_app

INTERNAL_ERROR = {"code": 500, "message": "internal server error", "data": None}


def _error_calls(mock_logger):
    return mock_logger.error.call_args_list


def test_unhandled_error_in_search_returns_fixed_envelope(client, movie_provider, mock_logger):
    movie_provider.search.side_effect = RuntimeError("database password is hunter2")

    response = client.get("/api/search", params={"q": "matrix"})

    assert response.status_code == 500
    assert response.json() == INTERNAL_ERROR
    assert "hunter2" not in response.text

    calls = _error_calls(mock_logger)
    assert len(calls) == 1
    extra = calls[0].kwargs["extra"]
    assert extra["path"] == "/api/search"
    assert extra["method"] == "GET"
    assert extra["error"] == "database password is hunter2"
    assert "RuntimeError" in extra["stack"]


def test_unhandled_error_is_logged_once_with_real_logger(
    gateway_config, movie_provider, caplog
):
    movie_provider.get_movie.side_effect = KeyError("rating")
    app = create_app(
        gateway_config,
        log=logging.getLogger("movie_gateway.test_errors"),
        movie_provider=movie_provider,
    )

    with caplog.at_level(logging.INFO):
        with TestClient(app) as test_client:
            response = test_client.get("/api/movie/123")

    assert response.status_code == 500
    assert response.json() == INTERNAL_ERROR
    errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert errors[0].path == "/api/movie/123"
    assert errors[0].method == "GET"


def test_unhandled_error_response_and_log_share_request_id(
    gateway_config, movie_provider, caplog
):
    movie_provider.get_movie.side_effect = RuntimeError("boom")
    app = create_app(
        gateway_config,
        log=logging.getLogger("movie_gateway.test_errors"),
        movie_provider=movie_provider,
    )

    with caplog.at_level(logging.INFO):
        with TestClient(app) as test_client:
            response = test_client.get("/api/movie/123")

    assert response.status_code == 500
    request_id = response.headers["x-request-id"]
    errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert errors[0].request_id == request_id
    assert json.loads(CustomJsonFormatter().format(errors[0]))["request_id"] == request_id


def test_exception_without_message_is_described_by_type(client, movie_provider, mock_logger):
    movie_provider.search.side_effect = ValueError()

    response = client.get("/api/search", params={"q": "x"})

    assert response.json() == INTERNAL_ERROR
    assert _error_calls(mock_logger)[0].kwargs["extra"]["error"] == "ValueError"


def test_unhandled_error_response_keeps_cors_headers(client, movie_provider):
    movie_provider.search.side_effect = RuntimeError("boom")

    response = client.get(
        "/api/search", params={"q": "x"}, headers={"Origin": "http://frontend.test"}
    )

    assert response.status_code == 500
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.parametrize(
    "exc, status",
    [
        (MovieNotFoundError("42"), 404),
        (UpstreamError(detail="HTTP 500 from /subject/42"), 502),
        (UpstreamUnavailableError("connection refused"), 503),
        (UpstreamTimeoutError("read timeout"), 504),
    ],
)
def test_upstream_errors_map_to_envelopes(client, movie_provider, exc, status):
    movie_provider.get_movie.side_effect = exc

    response = client.get("/api/movie/42")

    assert response.status_code == status
    body = response.json()
    assert body["code"] == status
    assert body["message"] == exc.message
    assert body["data"] is None
    # Upstream detail stays in the logs.
    if exc.detail:
        assert exc.detail not in response.text


def test_upstream_error_is_logged_with_path_and_method(client, movie_provider, mock_logger):
    movie_provider.get_movie.side_effect = UpstreamUnavailableError("connection refused")

    client.get("/api/movie/42")

    mock_logger.log.assert_called_once()
    level, message = mock_logger.log.call_args.args
    extra = mock_logger.log.call_args.kwargs["extra"]
    assert level == logging.ERROR
    assert extra["path"] == "/api/movie/42"
    assert extra["method"] == "GET"
    assert extra["error_detail"] == "connection refused"


def test_client_input_error_is_logged_as_warning(client, movie_provider, mock_logger):
    movie_provider.get_movie.side_effect = ClientInputError("nope")

    response = client.get("/api/movie/42")

    assert response.status_code == 400
    assert mock_logger.log.call_args.args[0] == logging.WARNING
    mock_logger.error.assert_not_called()


def test_unknown_route_returns_404_envelope(client):
    response = client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json() == {"code": 404, "message": "Not Found", "data": None}


def test_wrong_method_returns_405_envelope(client):
    response = client.delete("/api/recommend")

    assert response.status_code == 405
    assert response.json()["code"] == 405
    assert response.json()["data"] is None
