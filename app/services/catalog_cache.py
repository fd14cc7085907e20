"""
In-memory TTL cache for Google Books responses.

Purely advisory: a miss or an eviction only costs an extra HTTP request.
"""
import hashlib
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


def make_cache_key(prefix: str, params: Dict[str, Any]) -> str:
    """Stable fingerprint of a request: same parameters -> same key."""
    payload = json.dumps(params, sort_keys=True, default=str, ensure_ascii=False)
    digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()
    return f"google-books:{prefix}:{digest}"


class CatalogCache:
    def __init__(self, max_entries: int = 1000, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, tuple[Any, float]] = {}
        self._lock = threading.RLock()
        self.stats = {"hits": 0, "misses": 0, "evictions": 0}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                value, expires_at = entry
                if self._clock() < expires_at:
                    self.stats["hits"] += 1
                    return value
                del self._entries[key]
            self.stats["misses"] += 1
            return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)
            if len(self._entries) > self.max_entries:
                self._evict()

    def _evict(self) -> None:
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        # Still full: drop the entries closest to expiry (10% of the capacity)
        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            batch = max(overflow, self.max_entries // 10)
            oldest = sorted(self._entries.items(), key=lambda item: item[1][1])[:batch]
            for k, _ in oldest:
                del self._entries[k]
            self.stats["evictions"] += len(oldest)
        logger.debug(f"🧹 Catalog cache trimmed to {len(self._entries)} entries")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
