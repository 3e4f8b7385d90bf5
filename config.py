"""Environment-driven configuration for the governance API gateway."""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # HTTP server
    HOST: str = Field(default="0.0.0.0", description="Bind address")
    PORT: int = Field(default=4001, description="Listening port")

    # Upstream forum
    UPSTREAM_BASE_URL: str = Field(
        default="https://gov.gitcoin.co/",
        description="Base URL of the Discourse forum being proxied",
    )
    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound on how long to wait for the forum",
    )

    # Inbound request limits
    MAX_BODY_BYTES: int = Field(default=50 * 1024 * 1024, ge=0)
    CORS_ORIGINS: List[str] = Field(default=["*"])

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="console", description="'console' or 'json'")
