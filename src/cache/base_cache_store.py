# src/cache/base_cache_store.py — v1
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from linkrepair.cache.models import CacheStatistics


class BaseCacheStore(ABC):
    """Unified interface for TTL cache backends."""

    @abstractmethod
    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        ttl_s: float | None = None,
    ) -> Any:
        """Return the live value for key, fetching and storing it on a miss."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve a live value, or None."""

    @abstractmethod
    def contains(self, key: str) -> bool:
        """True if key holds a live value. Does not touch the hit/miss counters."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_s: float | None = None) -> None:
        """Store a value."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove a value if present."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry and reset counters."""

    @abstractmethod
    def statistics(self) -> CacheStatistics:
        """Current counters."""
