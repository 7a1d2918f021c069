"""
Per-request id shared across the async call chain.

The id is set when a request enters the pipeline, echoed back as the
X-Request-Id header and stamped onto log records by CustomJsonFormatter.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def generate_request_id() -> str:
    """Start a new request scope with a fresh UUID4 id and return it."""
    request_id = str(uuid.uuid4())
    _request_id_var.set(request_id)
    return request_id


def clear_request_id() -> None:
    _request_id_var.set(None)
