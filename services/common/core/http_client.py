"""
Outbound HTTP client construction.

Upstream clients share one TLS, pooling and proxy policy taken from
BaseAppConfig.
"""

import logging

import httpx

from .config import BaseAppConfig

logger = logging.getLogger(__name__)

_DEFAULT_LIMITS = httpx.Limits(max_keepalive_connections=20, max_connections=100)


class HttpClientFactory:
    def __init__(self, config: BaseAppConfig):
        self.config = config

    def create_async_client(self, **kwargs) -> httpx.AsyncClient:
        """
        Build an httpx.AsyncClient for upstream calls.

        Caller-supplied `verify`, `limits` and `trust_env` override the defaults;
        everything else is passed to httpx unchanged.
        """
        verify = kwargs.pop("verify", None)
        if verify is None:
            verify = self.config.VERIFY_SSL
        if not verify:
            logger.warning("TLS verification disabled for upstream requests (VERIFY_SSL=False)")

        kwargs.setdefault("limits", _DEFAULT_LIMITS)
        # Host proxy variables are ignored unless asked for.
        kwargs.setdefault("trust_env", False)
        return httpx.AsyncClient(verify=verify, **kwargs)
