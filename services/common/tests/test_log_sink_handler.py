"""
HttpLogSinkHandler Unit Tests

Tests for the handler which ships JSON records to an HTTP collector
and falls back to stderr on failure.
"""

import json
import logging
import urllib.error
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest

from services.common.core import logging_config
from services.common.core.logging_config import CustomJsonFormatter, HttpLogSinkHandler


class TestHttpLogSinkHandler:
    @pytest.fixture
    def handler(self):
        handler = HttpLogSinkHandler(
            url="http://collector:9000/ingest",
            static_fields={"service": "movie-gateway"},
            timeout=0.1,
        )
        handler.setFormatter(CustomJsonFormatter())
        return handler

    @pytest.fixture
    def log_record(self):
        record = logging.LogRecord(
            name="test_logger",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="Test message",
            args=(),
            exc_info=None,
        )
        record.created = 1678886400.0  # 2023-03-15T13:20:00Z
        return record

    def test_emit_sends_http_post(self, handler, log_record):
        with patch("urllib.request.urlopen") as mock_urlopen:
            mock_urlopen.return_value.__enter__.return_value = MagicMock()

            handler.emit(log_record)

            assert mock_urlopen.called
            req = mock_urlopen.call_args.args[0]
            assert req.full_url == "http://collector:9000/ingest"
            assert req.get_method() == "POST"

            data = json.loads(req.data.decode("utf-8"))
            assert data["message"] == "Test message"
            assert data["level"] == "INFO"
            assert data["service"] == "movie-gateway"
            assert data["timestamp"] == "2023-03-15T13:20:00.000+00:00"

    def test_emit_fallback_to_stderr_on_failure(self, handler, log_record):
        mock_stderr = StringIO()

        with (
            patch("urllib.request.urlopen") as mock_urlopen,
            patch("sys.__stderr__", mock_stderr),
        ):
            mock_urlopen.side_effect = urllib.error.URLError("Connection refused")

            handler.emit(log_record)

        payload = json.loads(mock_stderr.getvalue())
        assert payload["fallback"] == "log_sink_failed"
        assert payload["original_log"]["message"] == "Test message"


def test_configure_queue_logging_noop_without_url():
    root = logging.getLogger()
    before = list(root.handlers)

    logging_config.configure_queue_logging(service_name="movie-gateway", sink_url="")

    assert root.handlers == before


def test_configure_queue_logging_attaches_queue_handler(monkeypatch):
    root = logging.getLogger()
    started = []

    class _Listener:
        def __init__(self, q, *handlers):
            self.handlers = handlers

        def start(self):
            started.append(self.handlers)

        def stop(self):
            pass

    monkeypatch.setattr(logging.handlers, "QueueListener", _Listener)
    before = list(root.handlers)
    try:
        logging_config.configure_queue_logging(
            service_name="movie-gateway", sink_url="http://collector:9000/ingest"
        )
        added = [h for h in root.handlers if h not in before]
        assert len(added) == 1
        assert isinstance(added[0], logging.handlers.QueueHandler)
        assert isinstance(started[0][0], HttpLogSinkHandler)
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
