"""
Configuration for webexplore.

Uses Pydantic Settings for type-safe environment variable loading.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from webexplore._version import __version__

DEFAULT_USER_AGENT = f"webexplore/{__version__}"


class ExploreSettings(BaseSettings):
    """Process-wide defaults, read from ``WEBEXPLORE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WEBEXPLORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Requests
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="Default User-Agent header")

    # Sitemap discovery
    crawl_delay: float = Field(
        default=0.1,
        ge=0,
        le=60,
        description="Seconds to wait between sitemap probes",
    )

    # Response cache (only used when a request enables caching)
    cache_ttl: float | None = Field(default=None, ge=0, description="Cache entry lifetime in seconds")
    cache_capacity: int = Field(default=128, ge=1, description="Maximum cached responses")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper


@lru_cache
def get_settings() -> ExploreSettings:
    """Get cached settings instance."""
    return ExploreSettings()
