"""Match result cache — TTL-bounded, capacity-bounded memoization.

Entries are keyed by a SHA-256 digest of the canonical JSON form of the
inputs, so materially different inputs never share a key.

Key rules:
- An entry older than the TTL is never served; it is dropped on access.
- Above capacity, expired entries go first, then the least recently
  used 20% of the remainder.
- clear() drops everything; the taxonomy and the learning weights call
  it whenever they change.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

from skillmatch.models.match import MatchResult
from skillmatch.policy.resolver import PolicyResolver

logger = logging.getLogger(__name__)


def make_key(payload: Any) -> str:
    """Return a deterministic digest of a JSON-serializable payload."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    key: str
    result: MatchResult
    timestamp: float


class MatchResultCache:
    """Memoizes MatchResult values.

    Usage:
        cache = MatchResultCache(resolver)
        key = make_key(payload)
        result = cache.get(key)
        if result is None:
            result = compute()
            cache.put(key, result)
    """

    def __init__(
        self,
        resolver: Optional[PolicyResolver] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        params = self._cache_config(resolver or PolicyResolver.defaults())
        self.ttl_seconds: float = float(params.get("ttl_seconds", 300))
        self.max_entries: int = int(params.get("max_entries", 1000))
        self.evict_fraction: float = float(params.get("evict_fraction", 0.2))
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {self.ttl_seconds}")
        if self.max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {self.max_entries}")
        if not (0.0 < self.evict_fraction <= 1.0):
            raise ValueError(
                f"evict_fraction must be in (0.0, 1.0], got {self.evict_fraction}"
            )
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[MatchResult]:
        """Return the cached result, or None on a miss or an expired entry."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if self._clock() - entry.timestamp > self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return entry.result

    def put(self, key: str, result: MatchResult) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(key=key, result=result, timestamp=self._clock())
            self._entries.move_to_end(key)
            if len(self._entries) > self.max_entries:
                self._evict()

    def _evict(self) -> None:
        now = self._clock()
        expired = [
            k for k, e in self._entries.items()
            if now - e.timestamp > self.ttl_seconds
        ]
        for k in expired:
            del self._entries[k]
        if len(self._entries) <= self.max_entries:
            logger.debug("Cache evicted %d expired entries", len(expired))
            return
        to_remove = max(1, int(len(self._entries) * self.evict_fraction))
        for _ in range(to_remove):
            self._entries.popitem(last=False)
        logger.debug(
            "Cache evicted %d expired and %d oldest entries",
            len(expired), to_remove,
        )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    @staticmethod
    def _cache_config(resolver: PolicyResolver) -> dict:
        if resolver.has_cache_config():
            return resolver.cache_params()
        return {"ttl_seconds": 300, "max_entries": 1000, "evict_fraction": 0.2}
