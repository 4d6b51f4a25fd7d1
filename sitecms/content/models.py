"""Content entities and response envelopes.

Entities mirror backend content types and are read-only. Unknown fields
are kept (``extra="allow"``) so backend schema additions do not break
older clients.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator


def flatten_record(value: Any) -> Any:
    """Flatten Strapi v4 record shapes.

    ``{"id": 1, "attributes": {...}}`` becomes ``{"id": 1, ...}`` and
    relation wrappers ``{"data": ...}`` are unwrapped. Other values are
    returned unchanged.
    """
    if isinstance(value, list):
        return [flatten_record(item) for item in value]
    if not isinstance(value, dict):
        return value

    if set(value) <= {"data", "meta"} and "data" in value:
        return flatten_record(value["data"])

    if isinstance(value.get("attributes"), dict):
        flat = {key: item for key, item in value.items() if key != "attributes"}
        flat.update(value["attributes"])
        value = flat

    return {key: flatten_record(item) for key, item in value.items()}


class ContentModel(BaseModel):
    """Base for all content DTOs."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def flatten_v4_shape(cls, data: Any) -> Any:
        """Accept both flat and ``attributes``-wrapped records."""
        if isinstance(data, dict):
            return flatten_record(data)
        return data


# ============================================
# Value objects
# ============================================


class MediaFormat(ContentModel):
    """One rendition of an uploaded asset."""

    url: str
    width: int | None = None
    height: int | None = None


class MediaFormats(ContentModel):
    """Renditions generated by the media pipeline."""

    thumbnail: MediaFormat | None = None
    small: MediaFormat | None = None
    medium: MediaFormat | None = None
    large: MediaFormat | None = None


class Media(ContentModel):
    """Uploaded asset reference."""

    id: int | None = None
    url: str
    alternative_text: str | None = Field(default=None, alias="alternativeText")
    width: int | None = None
    height: int | None = None
    formats: MediaFormats | None = None


class TwitterCard(str, Enum):
    """Twitter card variants."""

    SUMMARY = "summary"
    SUMMARY_LARGE_IMAGE = "summary_large_image"
    APP = "app"
    PLAYER = "player"


class SEO(ContentModel):
    """SEO component shared by sites, products, blogs and pages."""

    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: str | None = None
    og_title: str | None = None
    og_description: str | None = None
    og_image: Media | None = None
    twitter_card: TwitterCard | str | None = None
    canonical_url: str | None = None
    robots: str | None = None
    structured_data: dict[str, Any] | None = None


class SocialLink(ContentModel):
    """Social profile link shown in site chrome."""

    platform: str
    url: str
    label: str | None = None
    display_order: int = 0


class Analytics(ContentModel):
    """Tracking identifiers configured for a site."""

    google_analytics_id: str | None = None
    google_tag_manager_id: str | None = None
    facebook_pixel_id: str | None = None
    tiktok_pixel_id: str | None = None


class Author(ContentModel):
    """Blog author (admin user projection)."""

    id: int
    username: str | None = None
    email: str | None = None


# ============================================
# Entities
# ============================================


class SiteStatus(str, Enum):
    """Lifecycle state of a tenant site."""

    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


class Site(ContentModel):
    """Tenant site configuration."""

    id: int
    name: str = ""
    site_uid: str = ""
    domain: str | None = None
    description: str | None = None
    logo: Media | None = None
    favicon: Media | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    seo: SEO | None = None
    analytics: Analytics | None = None
    social_links: list[SocialLink] = Field(default_factory=list)
    status: SiteStatus | str = SiteStatus.ACTIVE


class SiteStats(ContentModel):
    """Content counts computed by the backend."""

    blogs: int = 0
    products: int = 0
    pages: int = 0


class Category(ContentModel):
    """Hierarchical content category."""

    id: int
    name: str = ""
    slug: str = ""
    description: str | None = None
    image: Media | None = None
    parent: "Category | None" = None
    children: list["Category"] = Field(default_factory=list)
    display_order: int = 0
    featured: bool = False


class Tag(ContentModel):
    """Flat content tag."""

    id: int
    name: str = ""
    slug: str = ""


class ProductVariant(ContentModel):
    """Purchasable variant of a product."""

    name: str
    sku: str | None = None
    price_adjustment: float = 0.0
    inventory_quantity: int = 0
    stripe_price_id: str | None = None
    options: dict[str, str] | None = None
    image: Media | None = None
    is_default: bool = False
    available: bool = True


class ProductShipping(ContentModel):
    """Shipping dimensions and rules."""

    requires_shipping: bool = True
    weight: float | None = None
    weight_unit: str = "lb"
    length: float | None = None
    width: float | None = None
    height: float | None = None
    dimension_unit: str = "in"
    flat_rate: float | None = None
    free_shipping: bool = False
    shipping_class: str = "standard"


class Product(ContentModel):
    """Catalog product."""

    id: int
    name: str = ""
    slug: str = ""
    description: str | None = None
    short_description: str | None = None
    price: float = 0.0
    compare_at_price: float | None = None
    currency: str = "USD"
    product_type: str = "physical"
    stripe_product_id: str | None = None
    stripe_price_id: str | None = None
    sku: str | None = None
    inventory_quantity: int = 0
    track_inventory: bool = False
    allow_backorder: bool = False
    images: list[Media] = Field(default_factory=list)
    digital_file: Media | None = None
    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    seo: SEO | None = None
    variants: list[ProductVariant] = Field(default_factory=list)
    shipping: ProductShipping | None = None
    featured: bool = False
    status: str = "active"
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    published_at: datetime | None = Field(default=None, alias="publishedAt")


class Blog(ContentModel):
    """Blog post."""

    id: int
    title: str = ""
    slug: str = ""
    content: str | None = None
    excerpt: str | None = None
    featured_image: Media | None = None
    gallery: list[Media] = Field(default_factory=list)
    author: Author | None = None
    categories: list[Category] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    seo: SEO | None = None
    read_time: int | None = None
    featured: bool = False
    published_at_override: datetime | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    published_at: datetime | None = Field(default=None, alias="publishedAt")


class PageType(str, Enum):
    """Page layout families."""

    STANDARD = "standard"
    LANDING = "landing"
    CONTACT = "contact"
    ABOUT = "about"
    FAQ = "faq"
    LEGAL = "legal"


class Page(ContentModel):
    """Static page; navigation pages carry only the navigation fields."""

    id: int
    title: str = ""
    slug: str = ""
    page_type: PageType | str = PageType.STANDARD
    content: str | None = None
    blocks: list[Any] = Field(default_factory=list)
    featured_image: Media | None = None
    seo: SEO | None = None
    template: str | None = None
    show_in_navigation: bool = False
    navigation_order: int = 0
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    published_at: datetime | None = Field(default=None, alias="publishedAt")


# ============================================
# Envelopes
# ============================================

EntityT = TypeVar("EntityT", bound=BaseModel)


class PaginationMeta(BaseModel):
    """Pagination block of collection responses."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    page: int = 1
    page_size: int = Field(default=25, alias="pageSize")
    page_count: int = Field(default=0, alias="pageCount")
    total: int = 0


class ResponseMeta(BaseModel):
    """``meta`` block of content responses."""

    model_config = ConfigDict(frozen=True, extra="allow")

    pagination: PaginationMeta | None = None


class SingleResponse(BaseModel, Generic[EntityT]):
    """Single-resource envelope: ``{"data": entity, "meta"?: {...}}``."""

    model_config = ConfigDict(frozen=True, extra="allow")

    data: EntityT | None = None
    meta: ResponseMeta | None = None


class ListResponse(BaseModel, Generic[EntityT]):
    """Collection envelope: ``{"data": [...], "meta": {"pagination": ...}}``."""

    model_config = ConfigDict(frozen=True, extra="allow")

    data: list[EntityT] = Field(default_factory=list)
    meta: ResponseMeta = Field(default_factory=ResponseMeta)

    @property
    def pagination(self) -> PaginationMeta | None:
        """Pagination metadata, if the backend sent it."""
        return self.meta.pagination

    def first(self) -> EntityT | None:
        """First entity or None for an empty collection."""
        return self.data[0] if self.data else None


class BlogsByCategory(BaseModel):
    """Blogs filed under one category, with the category itself."""

    model_config = ConfigDict(frozen=True)

    blogs: list[Blog]
    category: Category | None = None


class SiteWithStats(BaseModel):
    """Site configuration plus computed content counts."""

    model_config = ConfigDict(frozen=True)

    site: Site
    stats: SiteStats
