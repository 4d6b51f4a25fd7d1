"""Observability module for logging."""

from sitecms.observability.logging import (
    bind_site_context,
    clear_site_context,
    configure_logging,
    get_logger,
    mask_credentials,
    site_context,
)


__all__ = [
    "bind_site_context",
    "clear_site_context",
    "configure_logging",
    "get_logger",
    "mask_credentials",
    "site_context",
]
