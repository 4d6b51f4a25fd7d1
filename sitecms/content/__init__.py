"""Typed content API: entities, envelopes and the per-site facade."""

from sitecms.content.constants import ContentCollection
from sitecms.content.facade import SiteClient, create_site_client
from sitecms.content.models import (
    SEO,
    Analytics,
    Author,
    Blog,
    BlogsByCategory,
    Category,
    ContentModel,
    ListResponse,
    Media,
    MediaFormat,
    MediaFormats,
    Page,
    PageType,
    PaginationMeta,
    Product,
    ProductShipping,
    ProductVariant,
    ResponseMeta,
    SingleResponse,
    Site,
    SiteStats,
    SiteStatus,
    SiteWithStats,
    SocialLink,
    Tag,
    flatten_record,
)


__all__ = [
    # Facade
    "SiteClient",
    "create_site_client",
    "ContentCollection",
    # Entities
    "Analytics",
    "Author",
    "Blog",
    "Category",
    "ContentModel",
    "Media",
    "MediaFormat",
    "MediaFormats",
    "Page",
    "PageType",
    "Product",
    "ProductShipping",
    "ProductVariant",
    "SEO",
    "Site",
    "SiteStats",
    "SiteStatus",
    "SocialLink",
    "Tag",
    # Envelopes
    "BlogsByCategory",
    "ListResponse",
    "PaginationMeta",
    "ResponseMeta",
    "SingleResponse",
    "SiteWithStats",
    "flatten_record",
]
