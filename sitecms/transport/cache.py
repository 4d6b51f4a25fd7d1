"""Time-bounded response cache.

Entries live for a fixed TTL and are evicted lazily on lookup; there is
no background sweep. Writes through the transport clear the whole cache.
"""

import fnmatch
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sitecms.transport.constants import DEFAULT_CACHE_TTL_SECONDS


@dataclass(frozen=True)
class CacheEntry:
    """Cached payload with its insertion time (monotonic seconds)."""

    payload: Any
    inserted_at: float


def make_cache_key(site_id: str, endpoint: str, serialized_params: str) -> str:
    """Compose a cache key from tenant scope, endpoint and parameters.

    Args:
        site_id: Tenant scope of the client.
        endpoint: Endpoint path, e.g. ``/api/blogs``.
        serialized_params: Deterministic parameter serialization.

    Returns:
        Key of the form ``site:endpoint:params``.
    """
    return f"{site_id}:{endpoint}:{serialized_params}"


class ResponseCache:
    """In-memory key/payload store with a fixed TTL.

    An entry is valid while ``now - inserted_at < ttl``.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Lifetime of every entry.
            clock: Monotonic time source, injectable for tests.
        """
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        """Lifetime of every entry."""
        return self._ttl

    def get(self, key: str) -> Any | None:
        """Return the cached payload, or None if absent or expired.

        Expired entries are removed as a side effect.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at >= self._ttl:
                del self._entries[key]
                return None
            return entry.payload

    def set(self, key: str, payload: Any) -> None:
        """Store a payload, replacing any previous entry for the key."""
        with self._lock:
            self._entries[key] = CacheEntry(payload=payload, inserted_at=self._clock())

    def evict(self, key: str) -> None:
        """Remove one entry if present."""
        with self._lock:
            self._entries.pop(key, None)

    def evict_matching(self, pattern: str) -> int:
        """Remove entries whose key matches a glob pattern.

        Args:
            pattern: ``fnmatch`` pattern, e.g. ``"site:/api/blogs*"``.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            matched = [
                key for key in self._entries if fnmatch.fnmatchcase(key, pattern)
            ]
            for key in matched:
                del self._entries[key]
            return len(matched)

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        """Snapshot of stored keys, expired ones included."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None
