"""Site-scoped client for a multi-tenant headless CMS."""

from sitecms.content import ContentCollection, SiteClient, create_site_client
from sitecms.query import QueryParams, build_query_string, where
from sitecms.transport import ClientConfig, CmsClientError, SiteTransport


__version__ = "1.0.0"

__all__ = [
    "ClientConfig",
    "CmsClientError",
    "ContentCollection",
    "QueryParams",
    "SiteClient",
    "SiteTransport",
    "build_query_string",
    "create_site_client",
    "where",
]
