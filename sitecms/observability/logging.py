"""Structured logging for CMS client processes.

Every record carries the tenant scope when one is bound, and credential
fields are masked before rendering so tokens never reach log sinks.
"""

import logging
import sys
from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from typing import Any, TextIO

import structlog

from sitecms.transport.redact import (
    REDACTED_VALUE,
    redact_headers,
    redact_url_credentials,
)


SITE_CONTEXT_KEY = "site_id"

_SECRET_KEYS = frozenset({"token", "api_token", "authorization", "password"})
_URL_KEYS = frozenset({"url", "base_url"})

# Loggers of the HTTP stack that would otherwise echo full request lines.
_QUIET_LIBRARIES = ("httpx", "httpcore")


def mask_credentials(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Structlog processor masking tokens, auth headers and URL userinfo."""
    for key, value in event_dict.items():
        if value is None:
            continue
        lowered = key.lower()
        if lowered in _SECRET_KEYS:
            event_dict[key] = REDACTED_VALUE
        elif lowered in _URL_KEYS and isinstance(value, str):
            event_dict[key] = redact_url_credentials(value)
        elif lowered == "headers" and isinstance(value, Mapping):
            event_dict[key] = redact_headers(dict(value))
    return event_dict


def _renderer(json_format: bool, output: TextIO) -> structlog.types.Processor:
    if json_format:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=output.isatty())


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structlog for a client process.

    Args:
        level: Minimum level emitted (default: INFO).
        output: Output stream (default: stderr).
        json_format: JSON lines when True, console rendering otherwise.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            mask_credentials,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(json_format, output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(component: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, optionally bound to a client component.

    Args:
        component: Component name added to every record (``transport``).

    Returns:
        Bound logger instance.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger()
    if component is not None:
        logger = logger.bind(component=component)
    return logger


def bind_site_context(site_id: str) -> None:
    """Tag all subsequent records of this context with a tenant scope."""
    structlog.contextvars.bind_contextvars(**{SITE_CONTEXT_KEY: site_id})


def clear_site_context() -> None:
    """Remove the tenant scope from subsequent records."""
    structlog.contextvars.unbind_contextvars(SITE_CONTEXT_KEY)


@contextmanager
def site_context(site_id: str) -> Iterator[None]:
    """Bind a tenant scope for the duration of a ``with`` block."""
    bind_site_context(site_id)
    try:
        yield
    finally:
        clear_site_context()
