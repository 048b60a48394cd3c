# src/network/httpx_client.py — v1
"""httpx implementation of BaseLinkClient.

Every request runs under the HTTP retry policy. file:// URLs are answered
from the local filesystem, and posting to the endpoint "test" returns a
canned lookup payload without touching the network.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

import httpx

from linkrepair.network.base_client import BaseLinkClient
from linkrepair.retry.engine import RetryExhaustedError, RetryObserver, execute_with_retry
from linkrepair.retry.models import RetryPolicy
from linkrepair.retry.policies import create_http_policy, is_retryable_status

logger = logging.getLogger(__name__)

TEST_ENDPOINT = "test"

TEST_API_PAYLOAD: dict[str, Any] = {
    "version": "2.1",
    "changes": "Test mode - mock data response",
    "results": [
        {
            "documentId": "test-doc-001",
            "contentId": "TEST-CONTENT-123456",
            "title": "UPDATED API Title for Testing - V2.0",
            "status": "Released",
            "lookupId": "TSRC-TEST-123456",
        },
        {
            "documentId": "test-doc-002",
            "contentId": "TEST-CONTENT-789012",
            "title": "UPDATED Expired Document Title - V2.0",
            "status": "Expired",
            "lookupId": "TSRC-TEST-789012",
        },
        {
            "documentId": "test-doc-003",
            "contentId": "TEST-CONTENT-345678",
            "title": "UPDATED Released Document Title - V2.0",
            "status": "Released",
            "lookupId": "TSRC-TEST-345678",
        },
    ],
}


class HttpxLinkClient(BaseLinkClient):
    """Network client backed by httpx.AsyncClient.

    Args:
        client: Pre-built AsyncClient (tests pass one with a MockTransport).
            When omitted, one is created and closed by aclose().
        timeout_s: Request timeout for a self-created client.
        user_agent: User-Agent header for a self-created client.
        api_key: Sent as a Bearer token on post_json().
        api_timeout_s: Timeout for post_json(); the client timeout when None.
        policy: Retry policy; defaults to the HTTP policy.
        retry_observer: Optional observer handed to the retry engine.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 30.0,
        user_agent: str = "linkrepair",
        follow_redirects: bool = True,
        api_key: str = "",
        api_timeout_s: float | None = None,
        policy: RetryPolicy | None = None,
        retry_observer: RetryObserver | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_s,
            follow_redirects=follow_redirects,
            headers={"User-Agent": user_agent},
        )
        self._api_key = api_key
        self._api_timeout_s = api_timeout_s
        self._policy = policy or create_http_policy()
        self._retry_observer = retry_observer

    async def probe(self, url: str) -> bool:
        local = _local_path(url)
        if local is not None:
            exists = local.exists()
            logger.debug("File URL %s accessibility check: %s", url, exists)
            return exists

        response = await self._head(url)
        accessible = response.is_success
        logger.debug(
            "URL %s accessibility check: %s (status %d)",
            url, accessible, response.status_code,
        )
        return accessible

    async def fetch_status(self, url: str) -> int | None:
        local = _local_path(url)
        if local is not None:
            return 200 if local.exists() else 404
        try:
            response = await self._head(url)
        except (httpx.HTTPError, RetryExhaustedError) as e:
            logger.warning("URL status check failed for %s: %s", url, e)
            return None
        return response.status_code

    async def fetch_content(self, url: str) -> str:
        local = _local_path(url)
        if local is not None:
            return local.read_text(encoding="utf-8", errors="replace")

        async def _get() -> httpx.Response:
            response = await self._client.get(url)
            response.raise_for_status()
            return response

        response = await execute_with_retry(_get, self._policy, self._retry_observer)
        logger.debug("Retrieved %d characters from %s", len(response.text), url)
        return response.text

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        if url.strip().lower() == TEST_ENDPOINT:
            logger.info(
                "Test endpoint: returning canned payload with %d results",
                len(TEST_API_PAYLOAD["results"]),
            )
            return TEST_API_PAYLOAD

        correlation_id = uuid.uuid4().hex
        headers = {"Content-Type": "application/json", "X-Correlation-ID": correlation_id}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        async def _post() -> httpx.Response:
            t0 = time.monotonic()
            response = await self._client.post(
                url, json=payload, headers=headers,
                timeout=self._api_timeout_s or httpx.USE_CLIENT_DEFAULT,
            )
            logger.debug(
                "POST %s -> %d in %dms (correlation_id=%s)",
                url, response.status_code,
                int((time.monotonic() - t0) * 1000), correlation_id,
            )
            response.raise_for_status()
            return response

        response = await execute_with_retry(_post, self._policy, self._retry_observer)
        return response.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _head(self, url: str) -> httpx.Response:
        """HEAD url under the retry policy.

        Transient statuses (408, 429, 5xx) are raised so the policy can retry
        them; once retries run out the last such response is returned.
        Other statuses are returned as-is.
        """
        async def _send() -> httpx.Response:
            logger.debug("Sending HEAD request to %s", url)
            response = await self._client.head(url)
            if is_retryable_status(response.status_code):
                response.raise_for_status()
            return response

        try:
            return await execute_with_retry(_send, self._policy, self._retry_observer)
        except httpx.HTTPStatusError as e:
            return e.response
        except RetryExhaustedError as e:
            if isinstance(e.last_error, httpx.HTTPStatusError):
                logger.warning("HEAD %s still failing after retries: %s", url, e.last_error)
                return e.last_error.response
            raise


def _local_path(url: str) -> Path | None:
    if not url.lower().startswith("file://"):
        return None
    parsed = urlparse(url)
    return Path(unquote(parsed.path))
