"""
Where: services/movie_gateway/middleware.py
What: Request id, request logging and terminal error handling stages of the pipeline.
Why: Isolate cross-cutting request concerns from app assembly.
"""

import json
import logging
import sys
import time

from fastapi import Request, status
from fastapi.responses import JSONResponse

from services.common.core.request_context import (
    clear_request_id,
    generate_request_id,
    get_request_id,
)

from .core.exceptions import describe_failure
from .models.context import RequestContext
from .models.envelope import INTERNAL_ERROR_BODY


async def request_id_middleware(request: Request, call_next):
    """Outermost stage: every response, the 500 envelope included, carries X-Request-Id."""
    req_id = generate_request_id()
    try:
        response = await call_next(request)
        response.headers["X-Request-Id"] = req_id
        return response
    finally:
        clear_request_id()


def build_request_logging_middleware(log: logging.Logger):
    """Return the request-logging stage bound to the given logger."""

    async def request_logging_middleware(request: Request, call_next):
        """Log every inbound request, then always continue down the pipeline."""
        start_time = time.perf_counter()
        context = RequestContext.from_request(request)
        request.state.context = context

        try:
            log.info(
                f"{context.method} {context.url}",
                extra={
                    "method": context.method,
                    "url": context.url,
                    "ip": context.client_ip,
                    "user_agent": context.user_agent,
                },
            )
        except Exception as exc:
            _write_stderr("request_log_failed", exc)

        response = await call_next(request)
        response.headers["X-Response-Time"] = f"{(time.perf_counter() - start_time) * 1000:.2f}ms"
        return response

    return request_logging_middleware


def build_error_envelope_middleware(log: logging.Logger):
    """Return the terminal error stage bound to the given logger."""

    async def error_envelope_middleware(request: Request, call_next):
        """Turn any failure escaping the inner stages into the fixed 500 envelope."""
        try:
            return await call_next(request)
        except Exception as exc:
            failure = describe_failure(exc)
            try:
                log.error(
                    "Unhandled application error",
                    extra={
                        "error": failure.message,
                        "stack": failure.trace,
                        "path": request.url.path,
                        "method": request.method,
                        "request_id": get_request_id(),
                    },
                )
            except Exception as log_exc:
                _write_stderr("error_log_failed", log_exc)

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=dict(INTERNAL_ERROR_BODY),
            )

    return error_envelope_middleware


def _write_stderr(kind: str, exc: Exception) -> None:
    stream = getattr(sys, "__stderr__", None) or sys.stderr
    try:
        stream.write(json.dumps({"fallback": kind, "error": str(exc)}) + "\n")
    except Exception:
        pass  # Nowhere left to report to.
