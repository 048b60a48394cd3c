# src/cache/memory_cache.py — v1
"""Process-local TTL cache with single-flight fetches.

Entries live in a plain dict owned by one event loop. A per-key
asyncio.Lock serializes misses so concurrent callers for the same key
share one fetch: the first caller fetches and stores, the others wake up
to a live entry. Expired entries are evicted lazily when touched, or in
bulk by purge_expired().
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

from linkrepair.cache.base_cache_store import BaseCacheStore
from linkrepair.cache.models import CacheEntry, CacheStatistics

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 1800.0


class MemoryCache(BaseCacheStore):
    """In-memory TTL cache.

    Args:
        name: Label used in logs and statistics.
        default_ttl_s: TTL applied when a call passes none. None = no expiry.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        name: str = "cache",
        default_ttl_s: float | None = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._name = name
        self._default_ttl_s = default_ttl_s
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._hits = 0
        self._misses = 0
        self._fetches = 0

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

    def contains(self, key: str) -> bool:
        return bool(key) and self._live_entry(key) is not None

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        ttl_s: float | None = None,
    ) -> Any:
        """Return the live value for key or await fetch_fn() once and store it.

        Fetch errors are not cached; they propagate to the caller that ran
        the fetch, and the next waiter gets its own attempt.
        """
        _check_key(key)
        entry = self._live_entry(key)
        if entry is not None:
            self._hits += 1
            logger.debug("Cache '%s' hit for key: %s", self._name, key)
            return entry.value

        lock = self._acquire_lock_slot(key)
        try:
            async with lock:
                entry = self._live_entry(key)
                if entry is not None:
                    self._hits += 1
                    logger.debug(
                        "Cache '%s' hit for key after in-flight fetch: %s",
                        self._name, key,
                    )
                    return entry.value

                self._misses += 1
                self._fetches += 1
                logger.debug("Cache '%s' miss for key: %s", self._name, key)
                value = await fetch_fn()
                self._store(key, value, ttl_s)
                return value
        finally:
            self._release_lock_slot(key)

    async def get(self, key: str) -> Any | None:
        if not key:
            return None
        entry = self._live_entry(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    async def set(self, key: str, value: Any, ttl_s: float | None = None) -> None:
        _check_key(key)
        self._store(key, value, ttl_s)
        logger.debug("Cache '%s' stored key: %s", self._name, key)

    async def remove(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            logger.debug("Cache '%s' removed key: %s", self._name, key)

    async def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        self._fetches = 0
        logger.info("Cache '%s' cleared", self._name)

    def purge_expired(self) -> int:
        """Evict every expired entry. Returns the number evicted."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(
                "Cache '%s' purged %d expired entries", self._name, len(expired),
            )
        return len(expired)

    def statistics(self) -> CacheStatistics:
        return CacheStatistics(
            name=self._name,
            total_entries=len(self._entries),
            hit_count=self._hits,
            miss_count=self._misses,
            fetch_count=self._fetches,
        )

    # --- internals ---

    def _live_entry(self, key: str) -> CacheEntry[Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug("Cache '%s' evicted expired key: %s", self._name, key)
            return None
        return entry

    def _store(self, key: str, value: Any, ttl_s: float | None) -> None:
        ttl = self._default_ttl_s if ttl_s is None else ttl_s
        now = self._clock()
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            created_at=now,
            expires_at=None if ttl is None else now + ttl,
        )

    def _acquire_lock_slot(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        return lock

    def _release_lock_slot(self, key: str) -> None:
        users = self._lock_users.get(key, 1) - 1
        if users <= 0:
            self._lock_users.pop(key, None)
            self._locks.pop(key, None)
        else:
            self._lock_users[key] = users


def _check_key(key: str) -> None:
    if not key:
        raise ValueError("Cache key cannot be empty")
