"""Small in-process cache and debounce helpers for real-time search.

Streamlit reruns the whole page on every widget change, so the search pages
keep one `CachedSearch` per endpoint in ``st.session_state`` and only go to
the backend when the query changed, the entry is older than the TTL, or the
user pressed refresh.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def make_key(params: Dict[str, Any]) -> Tuple:
    """Hashable, order-independent key for a set of search params.

    Strings are normalised (stripped, lower-cased) and empty values dropped,
    so "Food " and "food" share one cache entry.
    """
    items = []
    for k, v in sorted(params.items()):
        if v is None or v == '' or v == [] or v == ():
            continue
        if isinstance(v, str):
            v = v.strip().lower()
        elif isinstance(v, (list, set, tuple)):
            v = tuple(sorted(str(x) for x in v))
        items.append((k, v))
    return tuple(items)


class TTLCache:
    """TTL cache bounded by ``max_size``.

    Expired entries are kept for ``stale_for`` more seconds so a failed
    refresh can still fall back to them; after that ``set`` purges them.
    When full, the oldest tenth of the entries is evicted.
    """

    def __init__(self, ttl: float, clock: Clock = time.monotonic,
                 max_size: int = 100, stale_for: Optional[float] = None):
        self.ttl = ttl
        self.max_size = max_size
        self.stale_for = ttl * 10 if stale_for is None else stale_for
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def get(self, key: Hashable, allow_stale: bool = False) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        age = self._clock() - stored_at
        if age > self.ttl + self.stale_for:
            del self._entries[key]
            return None
        if not allow_stale and age > self.ttl:
            return None
        return value

    def set(self, key: Hashable, value: Any):
        self._purge_expired()
        self._entries.pop(key, None)
        if len(self._entries) >= self.max_size:
            self._evict_oldest()
        self._entries[key] = (self._clock(), value)

    def invalidate(self, key: Optional[Hashable] = None):
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def _purge_expired(self):
        cutoff = self._clock() - self.ttl - self.stale_for
        expired = [k for k, (stored_at, _) in self._entries.items() if stored_at < cutoff]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Purged %d expired search cache entries", len(expired))

    def _evict_oldest(self):
        oldest = sorted(self._entries, key=lambda k: self._entries[k][0])
        evict_count = max(1, len(oldest) // 10)
        for key in oldest[:evict_count]:
            del self._entries[key]
        logger.debug("Evicted %d oldest search cache entries", evict_count)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


class Debouncer:
    """Tracks the latest input per key and reports when it has settled."""

    def __init__(self, wait: float, clock: Clock = time.monotonic):
        self.wait = wait
        self._clock = clock
        self._latest: Dict[Hashable, Tuple[float, Any]] = {}

    def submit(self, key: Hashable, value: Any) -> bool:
        """Record ``value``; returns True if it differs from the previous input."""
        previous = self._latest.get(key)
        if previous is not None and previous[1] == value:
            return False
        self._latest[key] = (self._clock(), value)
        return True

    def ready(self, key: Hashable) -> bool:
        entry = self._latest.get(key)
        if entry is None:
            return False
        return self._clock() - entry[0] >= self.wait

    def remaining(self, key: Hashable) -> float:
        """Seconds until the latest input for ``key`` counts as settled."""
        entry = self._latest.get(key)
        if entry is None:
            return 0.0
        return max(0.0, self.wait - (self._clock() - entry[0]))

    def value(self, key: Hashable) -> Any:
        entry = self._latest.get(key)
        return entry[1] if entry else None


class CachedSearch:
    """Wrap a search function with a TTL cache and stale-on-error fallback."""

    def __init__(self, fetch: Callable[..., Any], ttl: float, clock: Clock = time.monotonic,
                 max_size: int = 100):
        self._fetch = fetch
        self.cache = TTLCache(ttl, clock, max_size=max_size)
        self.last_error: Optional[Exception] = None
        self.last_from_cache = False

    def __call__(self, force_refresh: bool = False, **params) -> Any:
        key = make_key(params)
        if not force_refresh:
            hit = self.cache.get(key)
            if hit is not None:
                self.last_from_cache = True
                return hit
        self.last_from_cache = False
        try:
            value = self._fetch(force_refresh=force_refresh, **params)
        except Exception as e:
            stale = self.cache.get(key, allow_stale=True)
            if stale is None:
                raise
            logger.warning("Search failed (%s); serving cached results", e)
            self.last_error = e
            self.last_from_cache = True
            return stale
        self.last_error = None
        self.cache.set(key, value)
        return value

    def invalidate(self):
        self.cache.invalidate()
