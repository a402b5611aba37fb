"""Result cache with TTL support for analysis passes.

Keys identify a buffer snapshot (buffer identity plus full content), values
are the findings of the pass that analyzed it. Entries expire after a short
TTL and the oldest-inserted entry is evicted once capacity is exceeded.
"""

import hashlib
import logging
import threading
import time
from typing import Any

from ..constants import RESULT_CACHE_MAX_ENTRIES, RESULT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


class ResultCache:
    """Thread-safe findings cache with TTL expiration.

    Eviction is by insertion order, not recency of use. Stored and returned
    lists are independent copies, so callers may mutate what they get back.
    """

    def __init__(
        self,
        max_entries: int = RESULT_CACHE_MAX_ENTRIES,
        ttl_seconds: float = RESULT_CACHE_TTL_SECONDS,
    ):
        """Initialize the result cache.

        Args:
            max_entries: Maximum number of snapshots to keep
            ttl_seconds: Time-to-live in seconds for cache entries
        """
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._cache: dict[str, tuple[list[Any], float]] = {}  # key -> (findings, stored_at)
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(identity: str, content: str) -> str:
        """Build a stable key from a buffer identity and its full content."""
        digest = hashlib.sha256()
        digest.update(identity.encode("utf-8"))
        digest.update(b"\x00")
        digest.update(content.encode("utf-8"))
        return digest.hexdigest()

    def get(self, key: str) -> tuple[bool, list[Any]]:
        """Get cached findings.

        Args:
            key: Cache key

        Returns:
            Tuple of (found, findings). If found is False, findings is empty.
        """
        with self._lock:
            if key in self._cache:
                findings, stored_at = self._cache[key]
                if time.time() - stored_at < self.ttl_seconds:
                    self._hits += 1
                    return True, list(findings)
                # Expired
                del self._cache[key]
                logger.debug(f"Cache entry {key[:12]} expired")

            self._misses += 1
            return False, []

    def set(self, key: str, findings: list[Any]) -> None:
        """Store findings for a key.

        Args:
            key: Cache key
            findings: Findings to cache (copied)
        """
        with self._lock:
            # Re-setting a key moves it to the back of the insertion order
            self._cache.pop(key, None)
            self._cache[key] = (list(findings), time.time())

            if len(self._cache) > self.max_entries:
                self._evict_oldest()

    def _evict_oldest(self) -> None:
        """Remove the oldest-inserted entry."""
        if not self._cache:
            return

        oldest_key = next(iter(self._cache))
        del self._cache[oldest_key]
        logger.debug(f"Evicted cache entry {oldest_key[:12]}")

    def clear(self) -> None:
        """Clear all entries from the cache."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int | float]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, size, and hit rate
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._cache),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hit_rate_percent": round(hit_rate, 2),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._cache
