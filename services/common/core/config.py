"""
Settings shared by every service: log level and outbound TLS policy.

Services subclass BaseAppConfig and add their own fields; values come from
the environment, then an optional .env file, then the defaults below.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppConfig(BaseSettings):
    LOG_LEVEL: str = Field(default="INFO", description="Root level for service loggers")
    VERIFY_SSL: bool = Field(
        default=True, description="Verify TLS certificates on upstream requests"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )
