"""
Client settings using Pydantic.

Provides environment-based configuration loading with MACKEREL_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_BASE_URL = "https://api.mackerelio.com/"
DEFAULT_USER_AGENT = "mackerel-client-python"
DEFAULT_TIMEOUT = 30.0


class Settings(BaseSettings):
    """Client settings."""

    # API
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT

    # Debug
    verbose: bool = False

    # HTTP client settings
    http_timeout: float = DEFAULT_TIMEOUT

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "MACKEREL_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
