"""
Gateway configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field
from services.common.core.config import BaseAppConfig

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

PRODUCTION_ENV = "production"


class GatewayConfig(BaseAppConfig):
    """
    Configuration management for the Movie Gateway service.
    """

    # Server settings
    HOST: str = Field(default="0.0.0.0", description="Listen address (standalone mode)")
    PORT: int = Field(default=3000, description="Listen port (standalone mode)")
    APP_ENV: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
        description="Deployment marker; 'production' hands the app to a managed host",
    )

    # Path settings
    PUBLIC_DIR: str = Field(
        default=str(_PROJECT_ROOT / "public"), description="Static asset root"
    )
    LOG_CONFIG_PATH: str = Field(
        default=str(_PROJECT_ROOT / "config" / "gateway_log.yaml"),
        description="Logging dictConfig file path",
    )
    LOG_SINK_URL: str = Field(default="", description="HTTP log collector URL (optional)")

    # Presentation
    SERVICE_NAME: str = Field(default="Douban Movie Service", description="Service display name")
    CORS_ALLOW_ORIGINS: str = Field(default="*", description="Comma-separated allowed origins")

    # Upstream (Douban movie API)
    DOUBAN_API_BASE_URL: str = Field(
        default="https://api.douban.com/v2/movie", description="Douban movie API base URL"
    )
    DOUBAN_API_KEY: str = Field(default="", description="Douban API key (sent as apikey)")
    UPSTREAM_TIMEOUT: float = Field(default=10.0, description="Upstream request timeout (seconds)")

    # Circuit breaker settings
    CIRCUIT_BREAKER_THRESHOLD: int = Field(default=5, description="Failure threshold")
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT: float = Field(
        default=30.0, description="Wait time before recovery attempt (seconds)"
    )

    @property
    def is_host_managed(self) -> bool:
        """True when an external host invokes the app instead of it binding a port."""
        return self.APP_ENV.strip().lower() == PRODUCTION_ENV

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ALLOW_ORIGINS.split(",") if origin.strip()]


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = GatewayConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
