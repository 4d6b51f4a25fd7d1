"""Configuration model for the site-scoped transport."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sitecms.transport.constants import (
    DEFAULT_BACKOFF_BASE_DELAY_MS,
    DEFAULT_BACKOFF_MAX_DELAY_MS,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from sitecms.transport.models import RetryPolicy


class ClientConfig(BaseModel):
    """Construction parameters for one tenant's client.

    Frozen: the tenant scope and credentials never change after
    construction.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: Annotated[
        str, Field(min_length=1, description="Backend origin, e.g. https://cms.test")
    ]
    site_id: Annotated[
        str, Field(min_length=1, description="Tenant scope sent as X-Site-ID")
    ]
    token: str | None = Field(
        default=None, repr=False, description="Bearer token for authenticated calls"
    )
    timeout_seconds: Annotated[float, Field(gt=0.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_retries: Annotated[int, Field(ge=0, le=10)] = DEFAULT_MAX_RETRIES
    cache_enabled: bool = True
    cache_ttl_seconds: Annotated[float, Field(gt=0.0)] = DEFAULT_CACHE_TTL_SECONDS
    retry_non_idempotent: bool = Field(
        default=True,
        description="Retry POST/PATCH like other verbs (may double-apply writes)",
    )
    backoff_base_delay_ms: Annotated[int, Field(ge=0, le=60000)] = (
        DEFAULT_BACKOFF_BASE_DELAY_MS
    )
    backoff_max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = (
        DEFAULT_BACKOFF_MAX_DELAY_MS
    )
    backoff_jitter_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.0
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so endpoint paths join cleanly."""
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must start with http:// or https://, got {v!r}"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("token")
    @classmethod
    def blank_token_is_none(cls, v: str | None) -> str | None:
        """Treat an empty token as no token."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def retry_policy(self) -> RetryPolicy:
        """Retry policy derived from this configuration."""
        return RetryPolicy(
            max_retries=self.max_retries,
            base_delay_ms=self.backoff_base_delay_ms,
            max_delay_ms=self.backoff_max_delay_ms,
            jitter_factor=self.backoff_jitter_factor,
            retry_non_idempotent=self.retry_non_idempotent,
        )
