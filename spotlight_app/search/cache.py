"""
Query cache for suggestion results.

Design:
  - In-memory OrderedDict (short-lived, never persisted)
  - Keyed by "<trimmed query>:<mode>"
  - TTL-based expiration (30 seconds)
  - Thread-safe with a lock
  - LRU eviction when cache size exceeds limit

Usage:
    cache = SearchCache(ttl=30, max_size=500)

    cache.set("gith", "current-tab", results)
    cached = cache.get("gith ", "current-tab")   # same key after trim

    stats = cache.stats()
"""

import time
import threading
from typing import Optional, Dict, Any, List, Callable
from collections import OrderedDict

from ..models import Result


class SearchCache:
    """Thread-safe TTL + LRU cache for suggestion lists."""

    def __init__(self, ttl: float = 30, max_size: int = 500, clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache.

        Args:
            ttl: Time-to-live in seconds (default: 30)
            max_size: Maximum cache entries
            clock: Time source, injectable for tests
        """
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._cache: OrderedDict = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(query: str, mode: str) -> str:
        mode = getattr(mode, 'value', mode)
        return f"{(query or '').strip()}:{mode}"

    def get(self, query: str, mode: str) -> Optional[List[Result]]:
        """
        Get cached results if not expired.

        Returns:
            Cached results or None if not found/expired
        """
        key = self.make_key(query, mode)

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            if self._clock() - entry['timestamp'] > self.ttl:
                del self._cache[key]
                self._misses += 1
                return None

            self._cache.move_to_end(key)
            self._hits += 1
            return [result.copy() for result in entry['results']]

    def set(self, query: str, mode: str, results: List[Result]):
        key = self.make_key(query, mode)

        with self._lock:
            if len(self._cache) >= self.max_size and key not in self._cache:
                self._cache.popitem(last=False)

            self._cache[key] = {
                'results': [result.copy() for result in results],
                'timestamp': self._clock()
            }
            self._cache.move_to_end(key)

    def clear(self):
        """Clear all cache entries and reset statistics."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with size, max_size, ttl, hits, misses and hit_rate (percent)
        """
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                'size': len(self._cache),
                'max_size': self.max_size,
                'ttl': self.ttl,
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': round(hit_rate, 2)
            }

    def evict_expired(self) -> int:
        """
        Evict all expired entries.

        Returns:
            Number of entries evicted
        """
        now = self._clock()

        with self._lock:
            expired_keys = [
                key for key, entry in self._cache.items()
                if now - entry['timestamp'] > self.ttl
            ]
            for key in expired_keys:
                del self._cache[key]

        return len(expired_keys)
