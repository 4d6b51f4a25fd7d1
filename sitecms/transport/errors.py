"""Typed errors raised by the transport layer."""

from typing import Any

from sitecms.transport.constants import DEFAULT_ERROR_STATUS, HTTP_STATUS_NOT_FOUND
from sitecms.transport.models import RETRYABLE_ERROR_CLASSES, ClientErrorClass


class CmsClientError(Exception):
    """Content API call failure.

    Attributes:
        message: Server-provided message when available, else the
            transport-level message.
        status: HTTP status code (500 when the server gave none).
        details: Structured detail payload from the server's error envelope.
        error_class: Failure classification used for retry decisions.
        method: HTTP method of the failed request.
        endpoint: Endpoint path of the failed request.
    """

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        status: int = DEFAULT_ERROR_STATUS,
        details: dict[str, Any] | None = None,
        *,
        error_class: ClientErrorClass = ClientErrorClass.UNKNOWN,
        method: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details
        self.error_class = error_class
        self.method = method
        self.endpoint = endpoint

    @property
    def is_not_found(self) -> bool:
        """Check if the server answered 404."""
        return self.status == HTTP_STATUS_NOT_FOUND

    @property
    def is_retryable(self) -> bool:
        """Check if the failure class is transient."""
        return self.error_class in RETRYABLE_ERROR_CLASSES

    def __str__(self) -> str:
        if self.method and self.endpoint:
            context = f"{self.method} {self.endpoint}, status {self.status}"
            return f"{self.message} ({context})"
        return self.message

    def __repr__(self) -> str:
        return (
            f"CmsClientError(message={self.message!r}, status={self.status}, "
            f"error_class={self.error_class.value})"
        )
