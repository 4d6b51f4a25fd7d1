"""Data models for the transport layer."""

import random
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from sitecms.transport.constants import (
    DEFAULT_BACKOFF_BASE_DELAY_MS,
    DEFAULT_BACKOFF_MAX_DELAY_MS,
    DEFAULT_MAX_RETRIES,
    NON_IDEMPOTENT_METHODS,
)


class ClientErrorClass(str, Enum):
    """Classification of request failures for metrics and retry decisions.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Connection refused, reset or dropped
    - HTTP_4XX: Client error, never retried (includes 404 and 429)
    - HTTP_5XX: Server error, retried
    - INVALID_RESPONSE: Body could not be decoded or validated
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    UNKNOWN = "UNKNOWN"


RETRYABLE_ERROR_CLASSES = frozenset(
    {
        ClientErrorClass.NETWORK_TIMEOUT,
        ClientErrorClass.CONNECTION_ERROR,
        ClientErrorClass.HTTP_5XX,
    }
)


class ApiErrorBody(BaseModel):
    """The ``error`` object of the backend's error envelope."""

    model_config = ConfigDict(frozen=True, extra="allow")

    status: int | None = None
    name: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


class RetryPolicy(BaseModel):
    """Configuration for retry behavior.

    Exponential backoff: the delay before retry ``n`` (1-indexed) is
    ``base_delay_ms * exponential_base ** n``, i.e. 2 s, 4 s, 8 s with the
    defaults. Jitter is off unless ``jitter_factor`` is set.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: Annotated[int, Field(ge=0, le=10)] = DEFAULT_MAX_RETRIES
    base_delay_ms: Annotated[int, Field(ge=0, le=60000)] = (
        DEFAULT_BACKOFF_BASE_DELAY_MS
    )
    max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = (
        DEFAULT_BACKOFF_MAX_DELAY_MS
    )
    exponential_base: Annotated[float, Field(ge=1.0, le=5.0)] = 2.0
    jitter_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.0
    retry_non_idempotent: bool = True

    def should_retry(
        self,
        error_class: ClientErrorClass,
        retries_done: int,
        method: str = "GET",
    ) -> bool:
        """Determine if a failed request should be re-issued.

        Args:
            error_class: Classification of the failure.
            retries_done: Retries already performed for this call.
            method: HTTP method of the request.

        Returns:
            True if the request should be retried.
        """
        if retries_done >= self.max_retries:
            return False

        if (
            not self.retry_non_idempotent
            and method.upper() in NON_IDEMPOTENT_METHODS
        ):
            return False

        return error_class in RETRYABLE_ERROR_CLASSES

    def get_delay_ms(self, retry_number: int) -> int:
        """Calculate the delay before a retry.

        Args:
            retry_number: Which retry is about to happen (1-indexed).

        Returns:
            Delay in milliseconds.
        """
        delay = self.base_delay_ms * (self.exponential_base**retry_number)
        delay = min(delay, self.max_delay_ms)

        if self.jitter_factor:
            delay += delay * self.jitter_factor * random.random()  # noqa: S311
        return int(delay)
