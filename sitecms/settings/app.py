"""Client settings powered by Pydantic BaseSettings."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitecms.transport.config import ClientConfig
from sitecms.transport.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
)


class ClientSettings(BaseSettings):
    """Environment configuration (``CMS_*`` variables or ``.env``)."""

    model_config = SettingsConfigDict(
        env_prefix="CMS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(default="http://localhost:1337")
    site_id: str | None = None
    api_token: str | None = Field(default=None, repr=False)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    cache_enabled: bool = True
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, INFO when the name is unknown."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    def to_client_config(self, **overrides: object) -> ClientConfig:
        """Build a validated ``ClientConfig``.

        Args:
            **overrides: Fields that take precedence over the environment.

        Returns:
            Client configuration.

        Raises:
            pydantic.ValidationError: If required values (``site_id``) are
                missing or out of range.
        """
        values: dict[str, object] = {
            "base_url": self.base_url,
            "site_id": self.site_id,
            "token": self.api_token,
            "timeout_seconds": self.timeout_seconds,
            "max_retries": self.max_retries,
            "cache_enabled": self.cache_enabled,
            "cache_ttl_seconds": self.cache_ttl_seconds,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ClientConfig.model_validate(values)


def get_settings() -> ClientSettings:
    """Get a settings instance."""
    return ClientSettings()
