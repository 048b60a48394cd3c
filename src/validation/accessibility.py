# src/validation/accessibility.py — v1
"""Reachability and expiration checks for a single URL.

Decision flow:
  1. Host in skip list → Valid, no network
  2. HEAD request fails → second request checks for 404 → NotFound, else Invalid
  3. HEAD request succeeds → GET body, scan for expiration phrases
     → Expired on any match, else Valid
Reachability exceptions count as "not accessible"; content fetch exceptions
count as "not expired".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable
from urllib.parse import urlparse

from linkrepair.core.models import HyperlinkStatus

if TYPE_CHECKING:
    from linkrepair.network.base_client import BaseLinkClient

logger = logging.getLogger(__name__)

EXPIRATION_PHRASES: tuple[str, ...] = (
    "expired",
    "no longer available",
    "content removed",
    "page not found",
    "document expired",
    "access denied",
    "content unavailable",
)

MSG_NOT_FOUND = "URL returns 404 Not Found"
MSG_NOT_ACCESSIBLE = "URL is not accessible"
MSG_EXPIRED = "Content indicates this link has expired"


@dataclass(frozen=True)
class AccessibilityResult:
    """Outcome of checking one URL."""

    status: HyperlinkStatus
    error_message: str = ""

    @property
    def is_expired(self) -> bool:
        return self.status is HyperlinkStatus.EXPIRED

    @property
    def requires_update(self) -> bool:
        return self.status is not HyperlinkStatus.VALID


def contains_expiration_phrase(content: str) -> bool:
    if not content:
        return False
    lowered = content.lower()
    return any(phrase in lowered for phrase in EXPIRATION_PHRASES)


class AccessibilityChecker:
    """Classify a URL as Valid, Invalid, NotFound or Expired.

    Args:
        client: Network client (its calls are already retry-wrapped).
        check_expired_content: Scan page bodies for expiration phrases.
        skip_domains: Hosts reported Valid without probing.
    """

    def __init__(
        self,
        client: BaseLinkClient,
        check_expired_content: bool = True,
        skip_domains: Iterable[str] = (),
    ) -> None:
        self._client = client
        self._check_expired_content = check_expired_content
        self._skip_domains = {d.lower() for d in skip_domains}

    async def check(self, url: str) -> AccessibilityResult:
        if self._is_skipped(url):
            logger.debug("Skipping accessibility check for %s (skip list)", url)
            return AccessibilityResult(HyperlinkStatus.VALID)

        if await self.is_accessible(url):
            if await self.is_expired(url):
                return AccessibilityResult(HyperlinkStatus.EXPIRED, MSG_EXPIRED)
            return AccessibilityResult(HyperlinkStatus.VALID)

        if await self.is_not_found(url):
            return AccessibilityResult(HyperlinkStatus.NOT_FOUND, MSG_NOT_FOUND)
        return AccessibilityResult(HyperlinkStatus.INVALID, MSG_NOT_ACCESSIBLE)

    async def is_accessible(self, url: str) -> bool:
        try:
            return await self._client.probe(url)
        except Exception as e:
            logger.warning("URL accessibility check failed for %s: %s", url, e)
            return False

    async def is_not_found(self, url: str) -> bool:
        try:
            return await self._client.fetch_status(url) == 404
        except Exception as e:
            logger.warning("URL status check failed for %s: %s", url, e)
            return False

    async def is_expired(self, url: str) -> bool:
        if not self._check_expired_content:
            return False
        try:
            content = await self._client.fetch_content(url)
        except Exception as e:
            logger.warning("Error checking URL expiration for %s: %s", url, e)
            return False
        expired = contains_expiration_phrase(content)
        logger.debug("URL expiration check for %s: %s", url, expired)
        return expired

    def _is_skipped(self, url: str) -> bool:
        if not self._skip_domains:
            return False
        host = (urlparse(url).hostname or "").lower()
        return any(host == d or host.endswith("." + d) for d in self._skip_domains)
