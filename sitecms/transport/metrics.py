"""Metrics collection for the transport layer."""

from dataclasses import dataclass, field

from sitecms.transport.models import ClientErrorClass


@dataclass
class TransportMetrics:
    """Counters for one transport instance.

    Tracks request outcomes, cache effectiveness, retries and failures.
    Owned by the transport; callers read it through ``to_dict``.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_duration_ms_total: float = 0.0
    http_request_count: int = 0
    cache_hits_total: int = 0
    cache_misses_total: int = 0
    cache_clears_total: int = 0

    def record_request(self, status_code: int, duration_ms: float) -> None:
        """Record a completed HTTP exchange.

        Args:
            status_code: HTTP status code.
            duration_ms: Wall time of the exchange.
        """
        self.http_requests_total[status_code] = (
            self.http_requests_total.get(status_code, 0) + 1
        )
        self.http_request_count += 1
        self.http_duration_ms_total += duration_ms

    def record_cache_hit(self) -> None:
        """Record a read served from cache."""
        self.cache_hits_total += 1

    def record_cache_miss(self) -> None:
        """Record a read that went to the network."""
        self.cache_misses_total += 1

    def record_cache_clear(self) -> None:
        """Record a cache clear."""
        self.cache_clears_total += 1

    def record_retry(self) -> None:
        """Record a retry attempt."""
        self.http_retry_total += 1

    def record_failure(self, error_class: ClientErrorClass) -> None:
        """Record a call that surfaced an error.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    @property
    def avg_duration_ms(self) -> float:
        """Average duration of completed exchanges."""
        if self.http_request_count == 0:
            return 0.0
        return self.http_duration_ms_total / self.http_request_count

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_requests_total": dict(self.http_requests_total),
            "http_retry_total": self.http_retry_total,
            "http_failures_total": dict(self.http_failures_total),
            "http_duration_ms_total": self.http_duration_ms_total,
            "http_request_count": self.http_request_count,
            "cache_hits_total": self.cache_hits_total,
            "cache_misses_total": self.cache_misses_total,
            "cache_clears_total": self.cache_clears_total,
        }
