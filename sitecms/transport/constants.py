"""HTTP constants for the transport layer.

Centralizes header names, status ranges and client defaults.
"""

# Request headers
HEADER_SITE_ID = "X-Site-ID"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_ACCEPT = "Accept"
HEADER_USER_AGENT = "User-Agent"
CONTENT_TYPE_JSON = "application/json"

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_NO_CONTENT = 204
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_SERVER_ERROR_MIN = 500

# Status reported when the server gave none (transport failures)
DEFAULT_ERROR_STATUS = 500

# Client defaults
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_CACHE_TTL_SECONDS = 60.0
DEFAULT_BACKOFF_BASE_DELAY_MS = 1000
DEFAULT_BACKOFF_MAX_DELAY_MS = 30000
DEFAULT_USER_AGENT = "sitecms-client/1.0"

# Request body envelope key for writes
WRITE_ENVELOPE_KEY = "data"

# Verbs that may change server state when repeated
NON_IDEMPOTENT_METHODS = frozenset({"POST", "PATCH"})
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
