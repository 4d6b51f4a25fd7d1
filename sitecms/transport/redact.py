"""Redaction of credentials before request details reach the logs."""

import re


SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "proxy-authorization",
        "set-cookie",
        "x-api-key",
    }
)

REDACTED_VALUE = "[REDACTED]"

_URL_CREDENTIALS = re.compile(r"(https?://)([^:/@]+):([^@/]+)@")


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy headers with credential values replaced.

    The tenant header is kept; it identifies the site, not the caller.

    Args:
        headers: Outgoing request headers.

    Returns:
        New dictionary safe for logging.
    """
    return {
        key: REDACTED_VALUE if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def redact_url_credentials(url: str) -> str:
    """Mask ``user:password@`` in a base URL."""
    return _URL_CREDENTIALS.sub(r"\1[REDACTED]:[REDACTED]@", url)
