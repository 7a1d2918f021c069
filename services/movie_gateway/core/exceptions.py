"""
Custom exception classes and exception handlers.

Represent errors raised while serving movie requests and translate them into
the response envelope.
"""

import logging
import traceback
from dataclasses import dataclass
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..models.envelope import INTERNAL_ERROR_BODY, error_response

logger = logging.getLogger("movie_gateway.errors")


def _request_logger(request: Request) -> logging.Logger:
    return getattr(request.app.state, "logger", None) or logger


class GatewayError(Exception):
    """Base exception class for errors surfaced to clients as an envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ClientInputError(GatewayError):
    """Raised when query parameters or the request body are malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(GatewayError):
    """Raised when the movie data provider returns an unusable response."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str = "movie data provider error", detail: Optional[str] = None):
        self.detail = detail
        super().__init__(message)


class MovieNotFoundError(UpstreamError):
    """Raised when the provider does not know the requested movie."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, movie_id: str):
        self.movie_id = movie_id
        super().__init__(f"movie not found: {movie_id}")


class UpstreamTimeoutError(UpstreamError):
    """Raised when the provider does not answer within the configured timeout."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(self, detail: Optional[str] = None):
        super().__init__("movie data provider timed out", detail)


class UpstreamUnavailableError(UpstreamError):
    """Raised when the provider cannot be reached or the circuit is open."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, detail: Optional[str] = None):
        super().__init__("movie data provider unavailable", detail)


@dataclass(frozen=True)
class FailureInfo:
    """Least-common-denominator view of anything that was raised."""

    message: str
    trace: Optional[str] = None


def describe_failure(failure: object) -> FailureInfo:
    """
    Coerce an arbitrary failure value into FailureInfo.

    Exceptions without a message fall back to their type name; values that
    are not exceptions at all are rendered with repr() and carry no trace.
    """
    if isinstance(failure, BaseException):
        message = str(failure) or type(failure).__name__
        trace = "".join(
            traceback.format_exception(type(failure), failure, failure.__traceback__)
        )
        return FailureInfo(message=message, trace=trace)
    return FailureInfo(message=repr(failure))


# ===========================================
# Exception Handlers
# ===========================================


async def gateway_error_handler(request: Request, exc: GatewayError):
    """
    Handler for errors raised deliberately by route handlers.
    """
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    _request_logger(request).log(
        level,
        f"Request failed: {exc.message}",
        extra={
            "error_type": type(exc).__name__,
            "error_detail": getattr(exc, "detail", None),
            "status": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.status_code, exc.message).model_dump(),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException (unknown route, wrong method).
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.status_code, str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for validation errors (undecodable body, wrong parameter types).
    """
    _request_logger(request).warning(
        "Request validation failed",
        extra={
            "errors": str(exc.errors()),
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response(
            status.HTTP_400_BAD_REQUEST, "invalid request parameters"
        ).model_dump(),
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions that got past the error middleware.
    """
    failure = describe_failure(exc)
    _request_logger(request).error(
        "Unhandled application error",
        extra={
            "error": failure.message,
            "stack": failure.trace,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=dict(INTERNAL_ERROR_BODY),
    )
