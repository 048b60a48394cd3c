# src/cache/models.py — v1
"""Cache domain models: CacheEntry, CacheStatistics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """Single cached value with its creation time and optional expiry.

    Times are readings of the owning cache's clock (monotonic seconds).
    """

    key: str
    value: V
    created_at: float
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class CacheStatistics(BaseModel):
    """Counters reported by a cache instance."""

    name: str
    total_entries: int = 0
    hit_count: int = 0
    miss_count: int = 0
    fetch_count: int = 0

    @property
    def hit_ratio(self) -> float:
        lookups = self.hit_count + self.miss_count
        return self.hit_count / lookups if lookups else 0.0
