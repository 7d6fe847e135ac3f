"""In-memory TTL caches, one per logical namespace."""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

from core.config import Settings

logger = logging.getLogger(__name__)

EVICTION_FRACTION = 0.2

NAMESPACES = ("repo", "github-api", "github-raw", "schema", "docs", "examples")


@dataclass(frozen=True)
class CacheEntry:
    key: str
    data: Any
    timestamp: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class TTLCache:
    """Bounded key/value store with per-entry TTL.

    Expired entries are dropped lazily on read and in periodic sweeps. When an
    insert would exceed ``max_size`` the oldest 20% of entries (by insertion
    time) are evicted. Entries are replaced wholesale, never mutated.
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: float = 3600.0,
        cleanup_interval: float = 600.0,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ):
        self.max_size = max(1, max_size)
        self.default_ttl = default_ttl
        self.cleanup_interval = cleanup_interval
        self.enabled = enabled
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._last_cleanup = clock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        if not self.enabled:
            return default
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return default
            if entry.expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug(f"[{self.name}] expired: {key}")
                return default
            self._hits += 1
            return entry.data

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        if not self.enabled:
            return
        now = self._clock()
        with self._lock:
            if now - self._last_cleanup >= self.cleanup_interval:
                self._cleanup_locked(now)
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict_oldest_locked()
            self._entries[key] = CacheEntry(
                key=key,
                data=value,
                timestamp=now,
                ttl=self.default_ttl if ttl is None else ttl,
            )

    def has(self, key: str) -> bool:
        if not self.enabled:
            return False
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if entry.expired(self._clock()):
                del self._entries[key]
                return False
            return True

    def get_or_fetch(self, key: str, fetcher: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        marker = object()
        cached = self.get(key, marker)
        if cached is not marker:
            return cached
        value = fetcher()
        self.set(key, value, ttl)
        return value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        logger.debug(f"[{self.name}] cleared {removed} entries")

    def cleanup(self) -> int:
        """Remove every expired entry now; returns how many were dropped."""
        with self._lock:
            return self._cleanup_locked(self._clock())

    def _cleanup_locked(self, now: float) -> int:
        self._last_cleanup = now
        expired = [key for key, entry in self._entries.items() if entry.expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"[{self.name}] cleanup removed {len(expired)} expired entries")
        return len(expired)

    def _evict_oldest_locked(self) -> None:
        ordered = sorted(self._entries.values(), key=lambda entry: entry.timestamp)
        to_remove = max(1, math.ceil(len(ordered) * EVICTION_FRACTION))
        for entry in ordered[:to_remove]:
            del self._entries[entry.key]
        logger.debug(f"[{self.name}] eviction removed {to_remove} oldest entries")

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        now = self._clock()
        with self._lock:
            total = len(self._entries)
            valid = sum(1 for entry in self._entries.values() if not entry.expired(now))
            lookups = self._hits + self._misses
            return {
                "total_entries": total,
                "valid_entries": valid,
                "expired_entries": total - valid,
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": (self._hits / lookups) if lookups else 0.0,
            }


class CacheService:
    """Owns one TTLCache per namespace so eviction in one cannot starve another."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        namespaces: Iterable[str] = NAMESPACES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or Settings()
        self.ttl = self.settings.cache_ttl
        self._caches: Dict[str, TTLCache] = {
            name: TTLCache(
                max_size=self.settings.cache_max_size,
                default_ttl=self.settings.cache_default_ttl,
                cleanup_interval=self.settings.cache_cleanup_interval,
                enabled=self.settings.cache_enabled,
                clock=clock,
                name=name,
            )
            for name in namespaces
        }

    def namespace(self, name: str) -> TTLCache:
        try:
            return self._caches[name]
        except KeyError:
            raise KeyError(f"Unknown cache namespace: {name}") from None

    @staticmethod
    def generate_key(prefix: str, *parts: str) -> str:
        return ":".join([prefix, *parts])

    def clear(self) -> None:
        for cache in self._caches.values():
            cache.clear()

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        return {name: cache.get_stats() for name, cache in self._caches.items()}
