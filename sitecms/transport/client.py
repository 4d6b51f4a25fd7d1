"""Site-scoped HTTP transport with caching and retries."""

import asyncio
import time
from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from sitecms.query.builder import build_query_string, cache_key_params
from sitecms.query.params import QueryParams
from sitecms.transport.cache import ResponseCache, make_cache_key
from sitecms.transport.config import ClientConfig
from sitecms.transport.constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_ERROR_STATUS,
    HEADER_ACCEPT,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    HEADER_SITE_ID,
    HEADER_USER_AGENT,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_NO_CONTENT,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MIN,
    MUTATING_METHODS,
    WRITE_ENVELOPE_KEY,
)
from sitecms.transport.errors import CmsClientError
from sitecms.transport.metrics import TransportMetrics
from sitecms.transport.models import ApiErrorBody, ClientErrorClass
from sitecms.transport.redact import redact_headers, redact_url_credentials
from sitecms.transport.retry import RetryExecutor, SleepFunc


logger = structlog.get_logger()


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class SiteTransport:
    """HTTP transport bound to a single tenant site.

    Every request carries the ``X-Site-ID`` header and, when a token was
    configured, ``Authorization: Bearer``. Reads go through the response
    cache; writes bypass it and clear it on success. Both are governed by
    the retry policy.

    The cache, retry executor and metrics belong to this instance and are
    not exposed for mutation.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFunc = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Client configuration.
            http_client: Pre-built async client (tests inject a mock
                transport here). Created and owned internally when omitted.
            sleep: Awaitable sleep used between retries.
            clock: Monotonic clock used by the cache.
        """
        self._config = config
        self._headers = self._build_headers()
        self._metrics = TransportMetrics()
        self._cache: ResponseCache | None = (
            ResponseCache(config.cache_ttl_seconds, clock=clock)
            if config.cache_enabled
            else None
        )
        self._retry = RetryExecutor(config.retry_policy, self._metrics, sleep=sleep)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
            follow_redirects=True,
        )
        self._log = logger.bind(component="transport", site_id=config.site_id)
        self._log.debug(
            "transport_ready",
            base_url=redact_url_credentials(config.base_url),
            headers=redact_headers(self._headers),
            cache_enabled=config.cache_enabled,
            cache_ttl_seconds=config.cache_ttl_seconds,
            max_retries=config.max_retries,
        )

    @property
    def config(self) -> ClientConfig:
        """Configuration this transport was built with."""
        return self._config

    @property
    def site_id(self) -> str:
        """Tenant scope sent with every request."""
        return self._config.site_id

    @property
    def metrics(self) -> dict[str, Any]:
        """Snapshot of transport metrics."""
        return self._metrics.to_dict()

    def cached_keys(self) -> list[str]:
        """Keys currently held by the response cache."""
        return self._cache.keys() if self._cache is not None else []

    def _build_headers(self) -> dict[str, str]:
        """Build the fixed per-client request headers.

        Returns:
            Headers sent with every request.
        """
        headers: dict[str, str] = {
            HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
            HEADER_ACCEPT: CONTENT_TYPE_JSON,
            HEADER_USER_AGENT: self._config.user_agent,
            HEADER_SITE_ID: self._config.site_id,
        }
        if self._config.token:
            headers[HEADER_AUTHORIZATION] = f"Bearer {self._config.token}"
        return headers

    def _url(self, endpoint: str, query_string: str = "") -> str:
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self._config.base_url}{path}{query_string}"

    async def read(
        self,
        endpoint: str,
        params: QueryParams | Mapping[str, Any] | None = None,
        *,
        use_cache: bool = True,
    ) -> Any:
        """GET an endpoint, serving from cache when possible.

        Args:
            endpoint: Endpoint path, e.g. ``/api/blogs``.
            params: Query parameters.
            use_cache: When False the cache is neither read nor written.

        Returns:
            Decoded JSON payload.

        Raises:
            CmsClientError: If the request fails after retries.
        """
        query = QueryParams.coerce(params)
        cache = self._cache if use_cache else None
        cache_key = make_cache_key(self.site_id, endpoint, cache_key_params(query))
        log = self._log.bind(method="GET", endpoint=endpoint)

        if cache is not None:
            cached = cache.get(cache_key)
            if cached is not None:
                self._metrics.record_cache_hit()
                log.debug("cache_hit", cache_key=cache_key)
                return cached
            self._metrics.record_cache_miss()
            log.debug("cache_miss", cache_key=cache_key)

        url = self._url(endpoint, build_query_string(query))
        payload = await self._retry.run(
            lambda: self._send("GET", endpoint, url, None, log),
            method="GET",
            log=log,
        )

        if cache is not None and payload is not None:
            cache.set(cache_key, payload)
        return payload

    async def mutate(
        self,
        endpoint: str,
        method: str = "POST",
        body: Any = None,
    ) -> Any:
        """Send a write and clear the cache once it succeeds.

        Args:
            endpoint: Endpoint path.
            method: One of POST, PUT, PATCH, DELETE.
            body: Payload wrapped as ``{"data": body}``; no body when None.

        Returns:
            Decoded JSON payload, or None for empty responses.

        Raises:
            ValueError: If ``method`` is not a write verb.
            CmsClientError: If the request fails after retries.
        """
        verb = method.upper()
        if verb not in MUTATING_METHODS:
            msg = f"Unsupported write method: {method}"
            raise ValueError(msg)

        json_body = {WRITE_ENVELOPE_KEY: body} if body is not None else None
        url = self._url(endpoint)
        log = self._log.bind(method=verb, endpoint=endpoint)

        payload = await self._retry.run(
            lambda: self._send(verb, endpoint, url, json_body, log),
            method=verb,
            log=log,
        )

        self.clear_cache(reason="mutation")
        return payload

    def clear_cache(self, reason: str = "manual") -> None:
        """Drop every cached response."""
        if self._cache is None:
            return
        self._cache.clear()
        self._metrics.record_cache_clear()
        self._log.debug("cache_cleared", reason=reason)

    def invalidate_cache(self, pattern: str | None = None) -> int:
        """Drop cached responses whose endpoint matches a glob pattern.

        Args:
            pattern: Pattern over ``endpoint:params``, e.g. ``/api/blogs*``.
                A full clear happens when omitted.

        Returns:
            Number of entries removed (0 for a full clear).
        """
        if self._cache is None:
            return 0
        if not pattern:
            self.clear_cache(reason="invalidate")
            return 0
        removed = self._cache.evict_matching(f"{self.site_id}:{pattern}")
        self._log.debug("cache_invalidated", pattern=pattern, removed=removed)
        return removed

    async def _send(
        self,
        method: str,
        endpoint: str,
        url: str,
        json_body: Any,
        log: structlog.stdlib.BoundLogger,
    ) -> Any:
        """Perform one HTTP exchange and classify the outcome.

        Args:
            method: HTTP method.
            endpoint: Endpoint path, for error context.
            url: Absolute URL including query string.
            json_body: JSON body, or None.
            log: Bound logger.

        Returns:
            Decoded JSON payload.

        Raises:
            CmsClientError: On any transport or HTTP failure.
        """
        start_time_ns = time.perf_counter_ns()
        try:
            response = await self._client.request(
                method,
                url,
                headers=self._headers,
                json=json_body,
                timeout=self._config.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise CmsClientError(
                f"Request timed out: {_describe(exc)}",
                error_class=ClientErrorClass.NETWORK_TIMEOUT,
                method=method,
                endpoint=endpoint,
            ) from exc
        except (httpx.NetworkError, httpx.RemoteProtocolError) as exc:
            raise CmsClientError(
                f"Connection failed: {_describe(exc)}",
                error_class=ClientErrorClass.CONNECTION_ERROR,
                method=method,
                endpoint=endpoint,
            ) from exc
        except httpx.HTTPError as exc:
            raise CmsClientError(
                f"Unexpected transport error: {_describe(exc)}",
                error_class=ClientErrorClass.UNKNOWN,
                method=method,
                endpoint=endpoint,
            ) from exc

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_request(response.status_code, duration_ms)
        log.debug(
            "request_complete",
            status_code=response.status_code,
            bytes=len(response.content),
            duration_ms=round(duration_ms, 2),
        )

        if not HTTP_STATUS_OK_MIN <= response.status_code < HTTP_STATUS_OK_MAX:
            raise self._error_from_response(response, method, endpoint)

        return self._decode(response, method, endpoint)

    @staticmethod
    def _decode(response: httpx.Response, method: str, endpoint: str) -> Any:
        """Decode a successful response body.

        Raises:
            CmsClientError: If the body is not JSON.
        """
        if response.status_code == HTTP_STATUS_NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise CmsClientError(
                "Response body is not valid JSON",
                DEFAULT_ERROR_STATUS,
                {"status_code": response.status_code},
                error_class=ClientErrorClass.INVALID_RESPONSE,
                method=method,
                endpoint=endpoint,
            ) from exc

    @staticmethod
    def _error_from_response(
        response: httpx.Response, method: str, endpoint: str
    ) -> CmsClientError:
        """Build a classified error from a non-2xx response.

        Uses the server's ``{"error": {...}}`` envelope when present.
        """
        status = response.status_code
        api_error: ApiErrorBody | None = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            try:
                api_error = ApiErrorBody.model_validate(body["error"])
            except ValidationError:
                api_error = None

        if status >= HTTP_STATUS_SERVER_ERROR_MIN:
            error_class = ClientErrorClass.HTTP_5XX
        elif status >= HTTP_STATUS_BAD_REQUEST:
            error_class = ClientErrorClass.HTTP_4XX
        else:
            error_class = ClientErrorClass.UNKNOWN

        message = (
            api_error.message
            if api_error is not None and api_error.message
            else f"Request failed with status code {status}"
        )
        return CmsClientError(
            message,
            status,
            api_error.details if api_error is not None else None,
            error_class=error_class,
            method=method,
            endpoint=endpoint,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SiteTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
