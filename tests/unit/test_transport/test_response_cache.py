"""Unit tests for the response cache."""

from sitecms.transport.cache import ResponseCache, make_cache_key
from tests.helpers.time import FakeClock


class TestMakeCacheKey:
    """Tests for cache key composition."""

    def test_layout(self) -> None:
        """Test the site:endpoint:params layout."""
        key = make_cache_key("demo-site", "/api/blogs/featured", '{"limit":5}')

        assert key == 'demo-site:/api/blogs/featured:{"limit":5}'


class TestResponseCache:
    """Tests for ResponseCache."""

    def test_get_missing(self) -> None:
        """Test that unknown keys return None."""
        cache = ResponseCache(clock=FakeClock())

        assert cache.get("nope") is None

    def test_set_and_get(self) -> None:
        """Test that a fresh entry is returned."""
        cache = ResponseCache(clock=FakeClock())
        cache.set("k", {"data": []})

        assert cache.get("k") == {"data": []}
        assert "k" in cache
        assert len(cache) == 1

    def test_entry_valid_just_before_ttl(self) -> None:
        """Test that an entry survives until the TTL elapses."""
        clock = FakeClock()
        cache = ResponseCache(ttl_seconds=60, clock=clock)
        cache.set("k", 1)

        clock.advance(59.9)

        assert cache.get("k") == 1

    def test_entry_expires_at_ttl(self) -> None:
        """Test lazy eviction once age reaches the TTL."""
        clock = FakeClock()
        cache = ResponseCache(ttl_seconds=60, clock=clock)
        cache.set("k", 1)

        clock.advance(60)

        assert cache.get("k") is None
        assert len(cache) == 0

    def test_expired_entries_stay_until_looked_up(self) -> None:
        """Test that there is no background sweep."""
        clock = FakeClock()
        cache = ResponseCache(ttl_seconds=1, clock=clock)
        cache.set("k", 1)

        clock.advance(5)

        assert cache.keys() == ["k"]

    def test_set_refreshes_timestamp(self) -> None:
        """Test that overwriting resets the entry age."""
        clock = FakeClock()
        cache = ResponseCache(ttl_seconds=10, clock=clock)
        cache.set("k", 1)
        clock.advance(8)
        cache.set("k", 2)
        clock.advance(8)

        assert cache.get("k") == 2

    def test_clear(self) -> None:
        """Test that clear drops everything."""
        cache = ResponseCache(clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)

        cache.clear()

        assert len(cache) == 0

    def test_evict(self) -> None:
        """Test single-key eviction, including absent keys."""
        cache = ResponseCache(clock=FakeClock())
        cache.set("a", 1)

        cache.evict("a")
        cache.evict("missing")

        assert cache.get("a") is None

    def test_evict_matching(self) -> None:
        """Test glob eviction."""
        cache = ResponseCache(clock=FakeClock())
        cache.set("s:/api/blogs:{}", 1)
        cache.set('s:/api/blogs/featured:{"limit":5}', 2)
        cache.set("s:/api/products:{}", 3)

        removed = cache.evict_matching("s:/api/blogs*")

        assert removed == 2
        assert cache.keys() == ["s:/api/products:{}"]
