"""Site-scoped HTTP transport with caching, retries, and typed errors.

This module provides:
- Tenant scoping via the X-Site-ID header on every request
- Time-bounded response caching, cleared on every successful write
- Configurable retry policy with exponential backoff
- Classified errors carrying status, message and server details
- Header redaction for logging
- Per-instance metrics
"""

from sitecms.transport.cache import CacheEntry, ResponseCache, make_cache_key
from sitecms.transport.client import SiteTransport
from sitecms.transport.config import ClientConfig
from sitecms.transport.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    HEADER_SITE_ID,
    HTTP_STATUS_NOT_FOUND,
)
from sitecms.transport.errors import CmsClientError
from sitecms.transport.metrics import TransportMetrics
from sitecms.transport.models import (
    RETRYABLE_ERROR_CLASSES,
    ApiErrorBody,
    ClientErrorClass,
    RetryPolicy,
)
from sitecms.transport.redact import redact_headers, redact_url_credentials
from sitecms.transport.retry import RetryExecutor


__all__ = [
    # Transport
    "SiteTransport",
    # Cache
    "CacheEntry",
    "ResponseCache",
    "make_cache_key",
    # Config
    "ClientConfig",
    # Retry
    "RetryExecutor",
    "RetryPolicy",
    # Errors
    "ApiErrorBody",
    "ClientErrorClass",
    "CmsClientError",
    "RETRYABLE_ERROR_CLASSES",
    # Constants
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT_SECONDS",
    "HEADER_SITE_ID",
    "HTTP_STATUS_NOT_FOUND",
    # Metrics
    "TransportMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
