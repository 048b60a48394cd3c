# src/network/base_client.py — v1
"""Abstract network boundary used by the checker and the lookup service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseLinkClient(ABC):
    """Reachability checks, content fetches and JSON posts.

    Implementations own their retry behaviour; callers treat every method
    as a single suspension point.
    """

    @abstractmethod
    async def probe(self, url: str) -> bool:
        """Lightweight (HEAD) reachability check. True on a success status."""

    @abstractmethod
    async def fetch_status(self, url: str) -> int | None:
        """Status code of a HEAD request, or None if no response was received."""

    @abstractmethod
    async def fetch_content(self, url: str) -> str:
        """GET the page body as text. Raises on a non-success status."""

    @abstractmethod
    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the decoded JSON response."""

    async def aclose(self) -> None:
        """Release underlying connections."""
