"""Endpoints and default relation population for content operations.

The facade owns these defaults so callers never need backend relation
names.
"""

from enum import Enum


API_PREFIX = "/api"

# Sites
ENDPOINT_SITE_CURRENT = f"{API_PREFIX}/sites/current"
ENDPOINT_SITE_STATS = f"{API_PREFIX}/sites/stats"

# Products
ENDPOINT_PRODUCTS = f"{API_PREFIX}/products"
ENDPOINT_PRODUCTS_FEATURED = f"{API_PREFIX}/products/featured"
ENDPOINT_PRODUCTS_BY_STATUS = f"{API_PREFIX}/products/status/{{status}}"
ENDPOINT_PRODUCT_SYNC_STRIPE = f"{API_PREFIX}/products/{{id}}/sync-stripe"

# Blogs
ENDPOINT_BLOGS = f"{API_PREFIX}/blogs"
ENDPOINT_BLOGS_FEATURED = f"{API_PREFIX}/blogs/featured"
ENDPOINT_BLOGS_BY_CATEGORY = f"{API_PREFIX}/blogs/category/{{slug}}"
ENDPOINT_BLOGS_RELATED = f"{API_PREFIX}/blogs/{{id}}/related"

# Pages
ENDPOINT_PAGES = f"{API_PREFIX}/pages"
ENDPOINT_PAGE_BY_SLUG = f"{API_PREFIX}/pages/slug/{{slug}}"
ENDPOINT_PAGES_NAVIGATION = f"{API_PREFIX}/pages/navigation"

# Categories and tags
ENDPOINT_CATEGORIES = f"{API_PREFIX}/categories"
ENDPOINT_CATEGORY_TREE = f"{API_PREFIX}/categories/tree"
ENDPOINT_TAGS = f"{API_PREFIX}/tags"

# Marketing
ENDPOINT_CREATE_CAMPAIGN = f"{API_PREFIX}/marketing/create-campaign"

# Default population per endpoint
POPULATE_SITE_CURRENT = [
    "logo",
    "favicon",
    "seo",
    "analytics",
    "social_links",
    "email_config",
]
POPULATE_SITE_STATS = ["logo", "favicon", "seo"]
POPULATE_PRODUCT_LIST = ["images", "categories", "tags", "seo"]
POPULATE_PRODUCT_DETAIL = [
    "images",
    "categories",
    "tags",
    "variants",
    "shipping",
    "seo",
]
POPULATE_PRODUCTS_BY_CATEGORY = ["images", "categories"]
POPULATE_BLOG_LIST = ["featured_image", "author", "categories", "tags"]
POPULATE_BLOG_DETAIL = [
    "featured_image",
    "gallery",
    "author",
    "categories",
    "tags",
    "seo",
]
POPULATE_PAGE_LIST = ["featured_image", "seo"]
POPULATE_PAGE_DETAIL = ["blocks", "featured_image", "seo"]
POPULATE_CATEGORY_LIST = ["image"]
POPULATE_CATEGORY_DETAIL = ["image", "children"]

SORT_BLOGS_DEFAULT = ["publishedAt:desc"]

DEFAULT_FEATURED_BLOGS_LIMIT = 5
DEFAULT_RELATED_BLOGS_LIMIT = 3


class ContentCollection(str, Enum):
    """Writable tenant-scoped collections and their path segment."""

    BLOGS = "blogs"
    PRODUCTS = "products"
    PAGES = "pages"
    CATEGORIES = "categories"
    TAGS = "tags"

    @property
    def endpoint(self) -> str:
        """Collection endpoint path."""
        return f"{API_PREFIX}/{self.value}"

    def item_endpoint(self, entry_id: int | str) -> str:
        """Single-entry endpoint path."""
        return f"{self.endpoint}/{entry_id}"
