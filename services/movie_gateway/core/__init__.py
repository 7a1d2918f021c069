"""
Core logic package.

Provides shared pieces of the request pipeline: error taxonomy, static
asset serving and upstream resilience.
"""

from .circuit_breaker import CircuitBreaker, CircuitBreakerOpenError
from .exceptions import (
    ClientInputError,
    FailureInfo,
    GatewayError,
    MovieNotFoundError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
    describe_failure,
)

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "ClientInputError",
    "FailureInfo",
    "GatewayError",
    "MovieNotFoundError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "UpstreamUnavailableError",
    "describe_failure",
]
