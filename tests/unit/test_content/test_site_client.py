"""Unit tests for the per-site content facade."""

import json
from pathlib import Path

import httpx
import pytest

from sitecms.content.constants import ContentCollection
from sitecms.content.facade import SiteClient
from sitecms.content.models import Blog, Product
from sitecms.transport.errors import CmsClientError
from sitecms.transport.models import ClientErrorClass
from tests.helpers.backend import (
    FakeBackend,
    api_error,
    make_config,
    make_transport,
    ok,
)


def _client(backend: FakeBackend, **config: object) -> SiteClient:
    return SiteClient(make_transport(backend, **config))


def _params(request: httpx.Request) -> dict[str, str]:
    return dict(request.url.params)


class TestProducts:
    """Tests for product operations."""

    async def test_list_default_population(self) -> None:
        """Test that product listings populate relations by default."""
        backend = FakeBackend()
        backend.add("GET", "/api/products", ok({"data": [{"id": 1, "name": "Mug"}]}))
        client = _client(backend)

        result = await client.get_products()

        assert result.data[0].name == "Mug"
        assert _params(backend.requests[0]) == {
            "populate": "images,categories,tags,seo"
        }

    async def test_caller_params_override_defaults(self) -> None:
        """Test that caller keys replace the default population."""
        backend = FakeBackend()
        backend.add("GET", "/api/products", ok({"data": []}))
        client = _client(backend)

        await client.get_products({"populate": ["images"], "sort": "price:asc"})

        assert _params(backend.requests[0]) == {
            "sort": "price:asc",
            "populate": "images",
        }

    async def test_list_with_count_flag(self) -> None:
        """Test that extra pagination sub-keys reach the backend."""
        backend = FakeBackend()
        backend.add("GET", "/api/products", ok({"data": []}))
        client = _client(backend)

        await client.get_products({"pagination": {"page": 1, "withCount": True}})

        params = _params(backend.requests[0])
        assert params["pagination[page]"] == "1"
        assert params["pagination[withCount]"] == "true"

    async def test_get_by_id(self) -> None:
        """Test that integers hit the single-resource endpoint."""
        backend = FakeBackend()
        backend.add("GET", "/api/products/42", ok({"data": {"id": 42, "name": "Cap"}}))
        client = _client(backend)

        product = await client.get_product(42)

        assert isinstance(product, Product)
        assert product.id == 42
        assert _params(backend.requests[0])["populate"] == (
            "images,categories,tags,variants,shipping,seo"
        )

    async def test_get_by_slug(self) -> None:
        """Test that strings filter the collection by slug."""
        backend = FakeBackend()
        backend.add("GET", "/api/products", ok({"data": [{"id": 3, "slug": "cap"}]}))
        client = _client(backend)

        product = await client.get_product("cap")

        assert product is not None
        assert product.id == 3
        params = _params(backend.requests[0])
        assert json.loads(params["filters"]) == {"slug": {"$eq": "cap"}}

    async def test_numeric_string_is_a_slug(self) -> None:
        """Test that "42" is looked up as a slug, not an id."""
        backend = FakeBackend()
        backend.add("GET", "/api/products", ok({"data": []}))
        client = _client(backend)

        assert await client.get_product("42") is None
        assert backend.requests[0].url.path == "/api/products"

    async def test_missing_id_returns_none(self) -> None:
        """Test that 404 becomes None."""
        backend = FakeBackend()
        client = _client(backend)

        assert await client.get_product(999) is None
        assert len(backend.requests) == 1

    async def test_other_errors_propagate(self) -> None:
        """Test that non-404 failures still raise."""
        backend = FakeBackend()
        backend.add("GET", "/api/products/1", api_error(403, "Forbidden"))
        client = _client(backend)

        with pytest.raises(CmsClientError) as exc_info:
            await client.get_product(1)

        assert exc_info.value.status == 403

    async def test_stock_check_bypasses_cache(self) -> None:
        """Test use_cache=False on lookups."""
        backend = FakeBackend()
        backend.add("GET", "/api/products/1", ok({"data": {"id": 1}}))
        client = _client(backend)

        await client.get_product(1, use_cache=False)
        await client.get_product(1, use_cache=False)

        assert len(backend.requests) == 2

    async def test_by_category(self) -> None:
        """Test the category relation filter."""
        backend = FakeBackend()
        backend.add("GET", "/api/products", ok({"data": []}))
        client = _client(backend)

        await client.get_products_by_category("mugs")

        params = _params(backend.requests[0])
        assert json.loads(params["filters"]) == {
            "categories": {"slug": {"$eq": "mugs"}}
        }
        assert params["populate"] == "images,categories"

    async def test_by_status_and_featured(self) -> None:
        """Test the dedicated product endpoints."""
        backend = FakeBackend()
        backend.add("GET", "/api/products/status/draft", ok({"data": [{"id": 1}]}))
        backend.add("GET", "/api/products/featured", ok({"data": [{"id": 2}]}))
        client = _client(backend)

        drafts = await client.get_products_by_status("draft")
        featured = await client.get_featured_products()

        assert [p.id for p in drafts] == [1]
        assert [p.id for p in featured] == [2]

    async def test_sync_with_stripe(self) -> None:
        """Test the payment provider sync trigger."""
        backend = FakeBackend()
        backend.add(
            "POST", "/api/products/9/sync-stripe", ok({"data": {"synced": True}})
        )
        client = _client(backend)

        result = await client.sync_product_with_stripe(9)

        assert result == {"data": {"synced": True}}
        assert backend.requests[0].content == b""


class TestBlogs:
    """Tests for blog operations."""

    async def test_default_sort(self) -> None:
        """Test newest-first ordering."""
        backend = FakeBackend()
        backend.add("GET", "/api/blogs", ok({"data": []}))
        client = _client(backend)

        await client.get_blogs()

        params = _params(backend.requests[0])
        assert params["sort"] == "publishedAt:desc"
        assert params["populate"] == "featured_image,author,categories,tags"

    async def test_featured_limit(self) -> None:
        """Test the featured limit parameter."""
        backend = FakeBackend()
        backend.add("GET", "/api/blogs/featured", ok({"data": [{"id": 1}]}))
        client = _client(backend)

        blogs = await client.get_featured_blogs()
        await client.get_featured_blogs(limit=2)

        assert isinstance(blogs[0], Blog)
        assert _params(backend.requests[0]) == {"limit": "5"}
        assert _params(backend.requests[1]) == {"limit": "2"}

    async def test_by_category_keeps_category(self) -> None:
        """Test that the category record is returned alongside blogs."""
        backend = FakeBackend()
        backend.add(
            "GET",
            "/api/blogs/category/news",
            ok({"data": [{"id": 1}], "category": {"id": 7, "slug": "news"}}),
        )
        client = _client(backend)

        result = await client.get_blogs_by_category("news")

        assert [blog.id for blog in result.blogs] == [1]
        assert result.category is not None
        assert result.category.id == 7

    async def test_related(self) -> None:
        """Test the related blogs endpoint and default limit."""
        backend = FakeBackend()
        backend.add("GET", "/api/blogs/4/related", ok({"data": []}))
        client = _client(backend)

        assert await client.get_related_blogs(4) == []
        assert _params(backend.requests[0]) == {"limit": "3"}

    async def test_missing_slug_returns_none(self) -> None:
        """Test that an empty slug match becomes None."""
        backend = FakeBackend()
        backend.add("GET", "/api/blogs", ok({"data": [], "meta": {}}))
        client = _client(backend)

        assert await client.get_blog("nope") is None


class TestPagesAndCategories:
    """Tests for pages, categories and tags."""

    async def test_page_by_slug_endpoint(self) -> None:
        """Test that page slugs use the dedicated endpoint."""
        backend = FakeBackend()
        backend.add(
            "GET", "/api/pages/slug/about", ok({"data": {"id": 1, "slug": "about"}})
        )
        client = _client(backend)

        page = await client.get_page("about")

        assert page is not None
        assert page.slug == "about"

    async def test_page_slug_missing(self) -> None:
        """Test 404 on the slug endpoint."""
        client = _client(FakeBackend())

        assert await client.get_page("missing") is None

    async def test_page_slug_is_path_encoded(self) -> None:
        """Test that reserved characters in a slug stay inside the path."""
        backend = FakeBackend()
        backend.add(
            "GET", "/api/pages/slug/faq", ok({"data": {"id": 99, "slug": "faq"}})
        )
        client = _client(backend)

        assert await client.get_page("faq?x=1") is None

        request = backend.requests[0]
        assert request.url.raw_path == b"/api/pages/slug/faq%3Fx%3D1"
        assert dict(request.url.params) == {}
        assert client.transport.cached_keys() == []

    async def test_category_slug_slash_encoded(self) -> None:
        """Test that a slash in a category slug does not add a path level."""
        backend = FakeBackend()
        client = _client(backend)

        with pytest.raises(CmsClientError):
            await client.get_blogs_by_category("news/related")

        assert backend.requests[0].url.raw_path == (
            b"/api/blogs/category/news%2Frelated"
        )

    async def test_page_by_id(self) -> None:
        """Test id lookups for pages."""
        backend = FakeBackend()
        backend.add("GET", "/api/pages/2", ok({"data": {"id": 2}}))
        client = _client(backend)

        page = await client.get_page(2)

        assert page is not None
        assert _params(backend.requests[0])["populate"] == "blocks,featured_image,seo"

    async def test_navigation(self) -> None:
        """Test navigation pages."""
        backend = FakeBackend()
        backend.add(
            "GET",
            "/api/pages/navigation",
            ok({"data": [{"id": 1, "title": "Home", "navigation_order": 0}]}),
        )
        client = _client(backend)

        pages = await client.get_navigation_pages()

        assert pages[0].title == "Home"

    async def test_category_tree(self) -> None:
        """Test nested categories."""
        backend = FakeBackend()
        backend.add(
            "GET",
            "/api/categories/tree",
            ok({"data": [{"id": 1, "children": [{"id": 2}]}]}),
        )
        client = _client(backend)

        tree = await client.get_category_tree()

        assert tree[0].children[0].id == 2

    async def test_tags_without_defaults(self) -> None:
        """Test that tag listings send no params by default."""
        backend = FakeBackend()
        backend.add("GET", "/api/tags", ok({"data": [{"id": 1, "name": "ml"}]}))
        client = _client(backend)

        tags = await client.get_tags()

        assert tags.data[0].name == "ml"
        assert backend.requests[0].url.query == b""


class TestSite:
    """Tests for site operations."""

    async def test_site_config(self) -> None:
        """Test the current site lookup."""
        backend = FakeBackend()
        backend.add(
            "GET", "/api/sites/current", ok({"data": {"id": 1, "name": "Demo"}})
        )
        client = _client(backend)

        site = await client.get_site_config()

        assert site is not None
        assert site.name == "Demo"
        assert _params(backend.requests[0])["populate"] == (
            "logo,favicon,seo,analytics,social_links,email_config"
        )

    async def test_site_with_stats(self) -> None:
        """Test that site data and counts are combined."""
        backend = FakeBackend()
        backend.add(
            "GET",
            "/api/sites/stats",
            ok({"data": {"id": 1}, "stats": {"blogs": 4, "products": 2, "pages": 1}}),
        )
        client = _client(backend)

        result = await client.get_site_with_stats()

        assert result.site.id == 1
        assert result.stats.blogs == 4


class TestWrites:
    """Tests for write operations."""

    async def test_create_entry(self) -> None:
        """Test creation through the data envelope."""
        backend = FakeBackend()
        backend.add("POST", "/api/blogs", ok({"data": {"id": 11, "title": "New"}}))
        client = _client(backend)

        entry = await client.create_entry(ContentCollection.BLOGS, {"title": "New"})

        assert isinstance(entry, Blog)
        assert entry.id == 11
        assert json.loads(backend.requests[0].content) == {"data": {"title": "New"}}

    async def test_update_and_delete(self) -> None:
        """Test update (PUT) and delete by collection name."""
        backend = FakeBackend()
        backend.add("PUT", "/api/tags/3", ok({"data": {"id": 3, "name": "ai"}}))
        backend.add("DELETE", "/api/tags/3", httpx.Response(204))
        client = _client(backend)

        updated = await client.update_entry("tags", 3, {"name": "ai"})
        deleted = await client.delete_entry("tags", 3)

        assert updated is not None
        assert updated.name == "ai"
        assert deleted is None

    async def test_unknown_collection(self) -> None:
        """Test that unknown collection names are rejected."""
        client = _client(FakeBackend())

        with pytest.raises(ValueError):
            await client.create_entry("widgets", {})

    async def test_create_campaign_clears_cache(self) -> None:
        """Test that campaign creation invalidates cached reads."""
        backend = FakeBackend()
        backend.add("GET", "/api/tags", ok({"data": []}))
        backend.add(
            "POST", "/api/marketing/create-campaign", ok({"campaign_id": "c1"})
        )
        client = _client(backend)
        await client.get_tags()

        result = await client.create_campaign({"product_id": 1})

        assert result == {"campaign_id": "c1"}
        assert client.transport.cached_keys() == []


class TestShapeValidation:
    """Tests for unexpected payloads."""

    async def test_invalid_shape_raises(self) -> None:
        """Test that malformed payloads become INVALID_RESPONSE errors."""
        backend = FakeBackend()
        backend.add("GET", "/api/blogs", ok({"data": [{"title": "no id"}]}))
        client = _client(backend)

        with pytest.raises(CmsClientError) as exc_info:
            await client.get_blogs()

        assert exc_info.value.error_class == ClientErrorClass.INVALID_RESPONSE
        assert exc_info.value.endpoint == "/api/blogs"


class TestCacheControl:
    """Tests for facade cache helpers."""

    async def test_clear_and_invalidate(self) -> None:
        """Test manual cache control."""
        backend = FakeBackend()
        backend.add("GET", "/api/blogs", ok({"data": []}))
        backend.add("GET", "/api/tags", ok({"data": []}))
        client = _client(backend)
        await client.get_tags()
        await client.get_blogs()

        assert client.invalidate_cache("/api/tags*") == 1
        client.clear_cache()

        assert client.transport.cached_keys() == []

    async def test_context_manager_keeps_injected_client_open(self) -> None:
        """Test that an injected HTTP client is owned by the caller."""
        backend = FakeBackend()
        http_client = backend.client()
        client = SiteClient.from_config(
            make_config(), http_client=http_client
        )

        async with client:
            pass

        assert http_client.is_closed is False
        await http_client.aclose()


class TestFromSettings:
    """Tests for environment-driven construction."""

    async def test_reads_cms_environment(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Test that CMS_* variables select the tenant and backend."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CMS_BASE_URL", "https://cms.test")
        monkeypatch.setenv("CMS_SITE_ID", "env-site")
        monkeypatch.setenv("CMS_MAX_RETRIES", "1")

        async with SiteClient.from_settings() as client:
            assert client.site_id == "env-site"
            assert client.transport.config.max_retries == 1
