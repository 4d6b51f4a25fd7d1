"""Retry loop with exponential backoff for transport calls."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from sitecms.transport.errors import CmsClientError
from sitecms.transport.metrics import TransportMetrics
from sitecms.transport.models import RetryPolicy


logger = structlog.get_logger()

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """Re-issues failed attempts according to a ``RetryPolicy``.

    Only ``CmsClientError`` failures are considered; anything else
    propagates immediately. When retries run out, the last error is
    re-raised as-is.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        metrics: TransportMetrics,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the executor.

        Args:
            policy: Retry policy to apply.
            metrics: Metrics sink owned by the transport.
            sleep: Awaitable sleep, injectable for tests.
        """
        self._policy = policy
        self._metrics = metrics
        self._sleep = sleep

    async def run(
        self,
        attempt: Callable[[], Awaitable[T]],
        *,
        method: str,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> T:
        """Run ``attempt`` until it succeeds or the policy gives up.

        Args:
            attempt: Zero-argument coroutine factory performing one request.
            method: HTTP method, consulted for non-idempotent verbs.
            log: Bound logger for the call.

        Returns:
            Result of the first successful attempt.

        Raises:
            CmsClientError: Last classified failure.
        """
        log = log or logger
        retries_done = 0

        while True:
            try:
                return await attempt()
            except CmsClientError as exc:
                if not self._policy.should_retry(exc.error_class, retries_done, method):
                    if retries_done > 0:
                        log.warning(
                            "retries_exhausted",
                            attempts=retries_done + 1,
                            status=exc.status,
                            error_class=exc.error_class.value,
                        )
                    self._metrics.record_failure(exc.error_class)
                    raise

                retries_done += 1
                delay_ms = self._policy.get_delay_ms(retries_done)
                self._metrics.record_retry()
                log.info(
                    "retry_scheduled",
                    attempt=retries_done,
                    delay_ms=delay_ms,
                    max_retries=self._policy.max_retries,
                    status=exc.status,
                    error_class=exc.error_class.value,
                )
                await self._sleep(delay_ms / 1000.0)
