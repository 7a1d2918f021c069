"""
Logging Configuration
Custom JSON Logger implementation for structured service logs.

Provides:
- CustomJsonFormatter: one JSON object per record (timestamp, level, message, metadata)
- HttpLogSinkHandler: Direct HTTP logging with stderr fallback
- configure_queue_logging: Async logging for long-lived processes
"""

import atexit
import json
import logging
import logging.config
import logging.handlers
import os
import queue
import string
import sys
import urllib.error
import urllib.request
from datetime import datetime, timezone
from typing import Optional

import yaml

# Attributes every LogRecord carries; anything else came in through `extra=`.
_STANDARD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class CustomJsonFormatter(logging.Formatter):
    """
    Structured JSON Formatter.

    Fields:
      - timestamp: ISO8601 timestamp (millisecond precision, UTC)
      - level: Log level
      - logger: Logger name (e.g. uvicorn.access, movie_gateway.main)
      - message: Log message
      - request_id: ID of the request being served, when there is one
      - any `extra=` fields, verbatim
    """

    def format(self, record: logging.LogRecord) -> str:
        request_id = getattr(record, "request_id", None)
        if not request_id:
            from .request_context import get_request_id

            request_id = get_request_id()

        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if request_id:
            log_data["request_id"] = request_id

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(config_path: str = "logging.yml"):
    """
    Load the YAML config, substitute environment variables, and initialize logging.
    """
    if not os.path.exists(config_path):
        logging.basicConfig(level=logging.INFO)
        return

    with open(config_path, "r", encoding="utf-8") as f:
        # Supports ${LOG_LEVEL} format.
        template = string.Template(f.read())

        mapping = os.environ.copy()
        if "LOG_LEVEL" not in mapping:
            mapping["LOG_LEVEL"] = "INFO"

        content = template.safe_substitute(mapping)
        config = yaml.safe_load(content)
        logging.config.dictConfig(config)


class HttpLogSinkHandler(logging.Handler):
    """
    Handler that POSTs each record as a JSON document to a log collector.
    On failure, fall back to stderr so the record is not lost.
    """

    def __init__(self, url: str, static_fields: Optional[dict] = None, timeout: float = 0.5):
        super().__init__()
        self.url = url
        self.static_fields = static_fields or {}
        self.timeout = timeout

    def emit(self, record: logging.LogRecord):
        try:
            if self.formatter:
                msg = self.formatter.format(record)
            else:
                msg = record.getMessage()

            try:
                log_entry = json.loads(msg)
            except json.JSONDecodeError:
                log_entry = {"message": msg, "level": record.levelname}

            for k, v in self.static_fields.items():
                log_entry.setdefault(k, v)

            data = json.dumps(log_entry, ensure_ascii=False).encode("utf-8")
            req = urllib.request.Request(
                self.url,
                data=data,
                headers={"Content-Type": "application/json"},
                method="POST",
            )

            try:
                with urllib.request.urlopen(req, timeout=self.timeout) as res:
                    res.read()
            except (OSError, urllib.error.URLError) as e:
                # Use sys.__stderr__ so a redirected stderr cannot loop back into logging.
                fallback_msg = json.dumps(
                    {
                        "fallback": "log_sink_failed",
                        "error": str(e),
                        "original_log": log_entry,
                    },
                    ensure_ascii=False,
                )
                stream = getattr(sys, "__stderr__", None) or sys.stderr
                try:
                    stream.write(fallback_msg + "\n")
                except Exception:
                    pass  # Nowhere left to report to.

        except Exception:
            self.handleError(record)

    def flush(self):
        pass


def configure_queue_logging(service_name: str, sink_url: Optional[str] = None):
    """
    Configure async QueueLogging.

    Records are handed to a queue on the calling thread and delivered to the
    sink from a listener thread, so request handling never waits on the sink.
    """
    if not sink_url:
        return

    real_handler = HttpLogSinkHandler(url=sink_url, static_fields={"service": service_name})
    real_handler.setFormatter(CustomJsonFormatter())

    log_queue = queue.Queue(-1)
    queue_handler = logging.handlers.QueueHandler(log_queue)

    listener = logging.handlers.QueueListener(log_queue, real_handler)
    listener.start()
    atexit.register(listener.stop)

    root = logging.getLogger()
    root.addHandler(queue_handler)
