"""Typed, per-site content API.

``SiteClient`` is what application code depends on: one async method per
content operation, each composing endpoint defaults, a transport call and
DTO validation.
"""

from collections.abc import Mapping
from types import TracebackType
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from sitecms.content.constants import (
    DEFAULT_FEATURED_BLOGS_LIMIT,
    DEFAULT_RELATED_BLOGS_LIMIT,
    ENDPOINT_BLOGS,
    ENDPOINT_BLOGS_BY_CATEGORY,
    ENDPOINT_BLOGS_FEATURED,
    ENDPOINT_BLOGS_RELATED,
    ENDPOINT_CATEGORIES,
    ENDPOINT_CATEGORY_TREE,
    ENDPOINT_CREATE_CAMPAIGN,
    ENDPOINT_PAGE_BY_SLUG,
    ENDPOINT_PAGES,
    ENDPOINT_PAGES_NAVIGATION,
    ENDPOINT_PRODUCT_SYNC_STRIPE,
    ENDPOINT_PRODUCTS,
    ENDPOINT_PRODUCTS_BY_STATUS,
    ENDPOINT_PRODUCTS_FEATURED,
    ENDPOINT_SITE_CURRENT,
    ENDPOINT_SITE_STATS,
    ENDPOINT_TAGS,
    POPULATE_BLOG_DETAIL,
    POPULATE_BLOG_LIST,
    POPULATE_CATEGORY_DETAIL,
    POPULATE_CATEGORY_LIST,
    POPULATE_PAGE_DETAIL,
    POPULATE_PAGE_LIST,
    POPULATE_PRODUCT_DETAIL,
    POPULATE_PRODUCT_LIST,
    POPULATE_PRODUCTS_BY_CATEGORY,
    POPULATE_SITE_CURRENT,
    POPULATE_SITE_STATS,
    SORT_BLOGS_DEFAULT,
    ContentCollection,
)
from sitecms.content.models import (
    Blog,
    BlogsByCategory,
    Category,
    ContentModel,
    ListResponse,
    Page,
    Product,
    SingleResponse,
    Site,
    SiteWithStats,
    Tag,
)
from sitecms.query.filters import where
from sitecms.query.params import QueryParams, merge_params
from sitecms.transport.client import SiteTransport
from sitecms.transport.config import ClientConfig
from sitecms.transport.errors import CmsClientError
from sitecms.transport.models import ClientErrorClass


logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)

ParamsArg = QueryParams | Mapping[str, Any] | None

COLLECTION_MODELS: dict[ContentCollection, type[ContentModel]] = {
    ContentCollection.BLOGS: Blog,
    ContentCollection.PRODUCTS: Product,
    ContentCollection.PAGES: Page,
    ContentCollection.CATEGORIES: Category,
    ContentCollection.TAGS: Tag,
}


def _is_entry_id(slug_or_id: int | str) -> bool:
    return isinstance(slug_or_id, int) and not isinstance(slug_or_id, bool)


def _segment(value: int | str) -> str:
    """Percent-encode one URL path segment, slashes included."""
    return quote(str(value), safe="")


class SiteClient:
    """Content API for one tenant site.

    Lookup methods taking ``slug_or_id`` dispatch on the argument type: an
    ``int`` hits the single-resource endpoint, a ``str`` filters the
    collection by slug. Both return None when the entry does not exist.
    """

    def __init__(self, transport: SiteTransport) -> None:
        """Initialize the client.

        Args:
            transport: Transport bound to the tenant site.
        """
        self._transport = transport
        self._log = logger.bind(component="content", site_id=transport.site_id)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> "SiteClient":
        """Build a client and its transport from configuration."""
        return cls(SiteTransport(config, http_client=http_client))

    @classmethod
    def from_settings(cls) -> "SiteClient":
        """Build a client from ``CMS_*`` environment settings."""
        from sitecms.settings import get_settings  # noqa: PLC0415

        return cls.from_config(get_settings().to_client_config())

    @property
    def transport(self) -> SiteTransport:
        """Underlying transport."""
        return self._transport

    @property
    def site_id(self) -> str:
        """Tenant scope of this client."""
        return self._transport.site_id

    # ============================================
    # Helpers
    # ============================================

    def _parse(
        self,
        model: type[ModelT],
        payload: Any,
        endpoint: str,
        method: str = "GET",
    ) -> ModelT:
        """Validate a payload into a DTO.

        Raises:
            CmsClientError: If the payload does not match the expected shape.
        """
        try:
            return model.model_validate(payload if payload is not None else {})
        except ValidationError as exc:
            self._log.warning(
                "response_shape_invalid",
                endpoint=endpoint,
                model=model.__name__,
                errors=exc.error_count(),
            )
            msg = f"Unexpected response shape from {endpoint}"
            raise CmsClientError(
                msg,
                details={"errors": exc.errors(include_url=False)},
                error_class=ClientErrorClass.INVALID_RESPONSE,
                method=method,
                endpoint=endpoint,
            ) from exc

    async def _read_list(
        self,
        model: type[ModelT],
        endpoint: str,
        defaults: ParamsArg = None,
        params: ParamsArg = None,
        *,
        use_cache: bool = True,
    ) -> ListResponse[ModelT]:
        query = merge_params(defaults, params)
        payload = await self._transport.read(endpoint, query, use_cache=use_cache)
        envelope_model = ListResponse[model]  # type: ignore[valid-type]
        return self._parse(envelope_model, payload, endpoint)

    async def _read_single(
        self,
        model: type[ModelT],
        endpoint: str,
        params: ParamsArg = None,
        *,
        use_cache: bool = True,
    ) -> ModelT | None:
        payload = await self._transport.read(endpoint, params, use_cache=use_cache)
        envelope_model = SingleResponse[model]  # type: ignore[valid-type]
        return self._parse(envelope_model, payload, endpoint).data

    async def _lookup(
        self,
        model: type[ModelT],
        collection_endpoint: str,
        slug_or_id: int | str,
        populate: list[str],
        *,
        use_cache: bool = True,
    ) -> ModelT | None:
        """Find one entry by numeric id or slug.

        Returns:
            The entry, or None when the backend has no match (404 or an
            empty collection).

        Raises:
            CmsClientError: For any failure other than 404.
        """
        try:
            if _is_entry_id(slug_or_id):
                return await self._read_single(
                    model,
                    f"{collection_endpoint}/{slug_or_id}",
                    QueryParams(populate=populate),
                    use_cache=use_cache,
                )

            listing = await self._read_list(
                model,
                collection_endpoint,
                QueryParams(
                    filters=where("slug").eq(slug_or_id),
                    populate=populate,
                ),
                use_cache=use_cache,
            )
            return listing.first()
        except CmsClientError as exc:
            if exc.is_not_found:
                self._log.debug(
                    "entry_not_found",
                    endpoint=collection_endpoint,
                    slug_or_id=slug_or_id,
                )
                return None
            raise

    # ============================================
    # Site Methods
    # ============================================

    async def get_site_config(self) -> Site | None:
        """Fetch the current site's configuration."""
        return await self._read_single(
            Site, ENDPOINT_SITE_CURRENT, QueryParams(populate=POPULATE_SITE_CURRENT)
        )

    async def get_site_with_stats(self) -> SiteWithStats:
        """Fetch the current site together with its content counts."""
        payload = await self._transport.read(
            ENDPOINT_SITE_STATS, QueryParams(populate=POPULATE_SITE_STATS)
        )
        payload = payload if isinstance(payload, dict) else {}
        return self._parse(
            SiteWithStats,
            {"site": payload.get("data"), "stats": payload.get("stats") or {}},
            ENDPOINT_SITE_STATS,
        )

    # ============================================
    # Product Methods
    # ============================================

    async def get_products(self, params: ParamsArg = None) -> ListResponse[Product]:
        """List products; caller params override the default population."""
        return await self._read_list(
            Product,
            ENDPOINT_PRODUCTS,
            QueryParams(populate=POPULATE_PRODUCT_LIST),
            params,
        )

    async def get_product(
        self, slug_or_id: int | str, *, use_cache: bool = True
    ) -> Product | None:
        """Fetch one product by id or slug, or None if it does not exist.

        Pass ``use_cache=False`` for always-fresh data such as stock checks.
        """
        return await self._lookup(
            Product,
            ENDPOINT_PRODUCTS,
            slug_or_id,
            POPULATE_PRODUCT_DETAIL,
            use_cache=use_cache,
        )

    async def get_featured_products(self) -> list[Product]:
        """List products flagged as featured."""
        listing = await self._read_list(Product, ENDPOINT_PRODUCTS_FEATURED)
        return listing.data

    async def get_products_by_category(
        self, category_slug: str, params: ParamsArg = None
    ) -> ListResponse[Product]:
        """List products filed under a category slug."""
        return await self._read_list(
            Product,
            ENDPOINT_PRODUCTS,
            QueryParams(
                filters=where("categories.slug").eq(category_slug),
                populate=POPULATE_PRODUCTS_BY_CATEGORY,
            ),
            params,
        )

    async def get_products_by_status(self, status: str) -> list[Product]:
        """List products in a lifecycle status (draft, active, archived)."""
        listing = await self._read_list(
            Product, ENDPOINT_PRODUCTS_BY_STATUS.format(status=_segment(status))
        )
        return listing.data

    async def sync_product_with_stripe(self, product_id: int) -> Any:
        """Ask the backend to push a product to the payment provider."""
        return await self._transport.mutate(
            ENDPOINT_PRODUCT_SYNC_STRIPE.format(id=_segment(product_id)), "POST"
        )

    # ============================================
    # Blog Methods
    # ============================================

    async def get_blogs(self, params: ParamsArg = None) -> ListResponse[Blog]:
        """List blogs, newest first unless the caller sorts otherwise."""
        return await self._read_list(
            Blog,
            ENDPOINT_BLOGS,
            QueryParams(populate=POPULATE_BLOG_LIST, sort=SORT_BLOGS_DEFAULT),
            params,
        )

    async def get_blog(
        self, slug_or_id: int | str, *, use_cache: bool = True
    ) -> Blog | None:
        """Fetch one blog by id or slug, or None if it does not exist."""
        return await self._lookup(
            Blog, ENDPOINT_BLOGS, slug_or_id, POPULATE_BLOG_DETAIL, use_cache=use_cache
        )

    async def get_featured_blogs(
        self, limit: int = DEFAULT_FEATURED_BLOGS_LIMIT
    ) -> list[Blog]:
        """List featured blogs, at most ``limit``."""
        listing = await self._read_list(
            Blog, ENDPOINT_BLOGS_FEATURED, QueryParams(limit=limit)
        )
        return listing.data

    async def get_blogs_by_category(self, category_slug: str) -> BlogsByCategory:
        """List blogs in a category together with the category record."""
        endpoint = ENDPOINT_BLOGS_BY_CATEGORY.format(slug=_segment(category_slug))
        payload = await self._transport.read(endpoint)
        payload = payload if isinstance(payload, dict) else {}
        return self._parse(
            BlogsByCategory,
            {"blogs": payload.get("data") or [], "category": payload.get("category")},
            endpoint,
        )

    async def get_related_blogs(
        self, blog_id: int, limit: int = DEFAULT_RELATED_BLOGS_LIMIT
    ) -> list[Blog]:
        """List blogs sharing categories or tags with ``blog_id``."""
        listing = await self._read_list(
            Blog,
            ENDPOINT_BLOGS_RELATED.format(id=_segment(blog_id)),
            QueryParams(limit=limit),
        )
        return listing.data

    # ============================================
    # Page Methods
    # ============================================

    async def get_pages(self, params: ParamsArg = None) -> ListResponse[Page]:
        """List pages."""
        return await self._read_list(
            Page, ENDPOINT_PAGES, QueryParams(populate=POPULATE_PAGE_LIST), params
        )

    async def get_page(
        self, slug_or_id: int | str, *, use_cache: bool = True
    ) -> Page | None:
        """Fetch one page by id or slug, or None if it does not exist.

        Slugs use the dedicated ``/pages/slug/{slug}`` endpoint.
        """
        if _is_entry_id(slug_or_id):
            return await self._lookup(
                Page,
                ENDPOINT_PAGES,
                slug_or_id,
                POPULATE_PAGE_DETAIL,
                use_cache=use_cache,
            )

        try:
            return await self._read_single(
                Page,
                ENDPOINT_PAGE_BY_SLUG.format(slug=_segment(slug_or_id)),
                use_cache=use_cache,
            )
        except CmsClientError as exc:
            if exc.is_not_found:
                return None
            raise

    async def get_navigation_pages(self) -> list[Page]:
        """List pages shown in site navigation, in navigation order."""
        listing = await self._read_list(Page, ENDPOINT_PAGES_NAVIGATION)
        return listing.data

    # ============================================
    # Category Methods
    # ============================================

    async def get_categories(self, params: ParamsArg = None) -> ListResponse[Category]:
        """List categories."""
        return await self._read_list(
            Category,
            ENDPOINT_CATEGORIES,
            QueryParams(populate=POPULATE_CATEGORY_LIST),
            params,
        )

    async def get_category_tree(self) -> list[Category]:
        """List root categories with nested children."""
        listing = await self._read_list(Category, ENDPOINT_CATEGORY_TREE)
        return listing.data

    async def get_category(
        self, slug_or_id: int | str, *, use_cache: bool = True
    ) -> Category | None:
        """Fetch one category by id or slug, or None if it does not exist."""
        return await self._lookup(
            Category,
            ENDPOINT_CATEGORIES,
            slug_or_id,
            POPULATE_CATEGORY_DETAIL,
            use_cache=use_cache,
        )

    # ============================================
    # Tag Methods
    # ============================================

    async def get_tags(self, params: ParamsArg = None) -> ListResponse[Tag]:
        """List tags."""
        return await self._read_list(Tag, ENDPOINT_TAGS, None, params)

    # ============================================
    # Write Methods
    # ============================================

    async def create_entry(
        self, collection: ContentCollection | str, data: Mapping[str, Any]
    ) -> ContentModel | None:
        """Create an entry; the backend attaches it to this site."""
        target = ContentCollection(collection)
        payload = await self._transport.mutate(target.endpoint, "POST", dict(data))
        return self._parse_written(target, payload, "POST")

    async def update_entry(
        self,
        collection: ContentCollection | str,
        entry_id: int | str,
        data: Mapping[str, Any],
    ) -> ContentModel | None:
        """Update fields of an existing entry."""
        target = ContentCollection(collection)
        payload = await self._transport.mutate(
            target.item_endpoint(entry_id), "PUT", dict(data)
        )
        return self._parse_written(target, payload, "PUT")

    async def delete_entry(
        self, collection: ContentCollection | str, entry_id: int | str
    ) -> ContentModel | None:
        """Delete an entry, returning the deleted record when echoed back."""
        target = ContentCollection(collection)
        payload = await self._transport.mutate(
            target.item_endpoint(entry_id), "DELETE"
        )
        return self._parse_written(target, payload, "DELETE")

    def _parse_written(
        self, collection: ContentCollection, payload: Any, method: str
    ) -> ContentModel | None:
        if not isinstance(payload, dict) or not payload.get("data"):
            return None
        entity_model = COLLECTION_MODELS[collection]
        envelope_model = SingleResponse[entity_model]  # type: ignore[valid-type]
        envelope = self._parse(envelope_model, payload, collection.endpoint, method)
        return envelope.data

    async def create_campaign(self, data: Mapping[str, Any]) -> Any:
        """Start a marketing campaign through the backend automation hub."""
        return await self._transport.mutate(
            ENDPOINT_CREATE_CAMPAIGN, "POST", dict(data)
        )

    # ============================================
    # Cache Control
    # ============================================

    def clear_cache(self) -> None:
        """Drop every cached response of this client."""
        self._transport.clear_cache()

    def invalidate_cache(self, pattern: str | None = None) -> int:
        """Drop cached responses matching an endpoint glob (all if omitted)."""
        return self._transport.invalidate_cache(pattern)

    async def aclose(self) -> None:
        """Release the underlying HTTP client."""
        await self._transport.aclose()

    async def __aenter__(self) -> "SiteClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_site_client(
    config: ClientConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> SiteClient:
    """Create a client for one tenant site."""
    return SiteClient.from_config(config, http_client=http_client)
