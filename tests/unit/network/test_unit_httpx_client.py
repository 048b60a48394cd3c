# tests/unit/network/test_unit_httpx_client.py — v1
"""Tests for network/httpx_client.py — driven through httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from linkrepair.network.httpx_client import TEST_API_PAYLOAD, HttpxLinkClient
from linkrepair.retry.engine import RetryExhaustedError
from linkrepair.retry.models import BackoffType
from linkrepair.retry.policies import create_custom_policy, is_retryable_http_error

FAST_HTTP_POLICY = create_custom_policy(
    2, 0.0, BackoffType.FIXED, should_retry=is_retryable_http_error, policy_name="HTTP",
)


def _client(handler, **kwargs) -> tuple[HttpxLinkClient, httpx.AsyncClient]:
    inner = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxLinkClient(client=inner, policy=FAST_HTTP_POLICY, **kwargs), inner


class TestReachability:
    @pytest.mark.asyncio
    async def test_success(self):
        client, _ = _client(lambda request: httpx.Response(200))
        assert await client.probe("https://example.com/") is True

    @pytest.mark.asyncio
    async def test_uses_head(self):
        methods: list[str] = []

        def handler(request):
            methods.append(request.method)
            return httpx.Response(204)

        client, _ = _client(handler)
        await client.probe("https://example.com/")
        assert methods == ["HEAD"]

    @pytest.mark.asyncio
    async def test_not_found(self):
        client, _ = _client(lambda request: httpx.Response(404))
        assert await client.probe("https://example.com/missing") is False

    @pytest.mark.asyncio
    async def test_retries_transient_status(self):
        responses = iter([httpx.Response(503), httpx.Response(200)])
        methods: list[str] = []

        def handler(request):
            methods.append(request.method)
            return next(responses)

        client, _ = _client(handler)
        assert await client.probe("https://example.com/") is True
        assert methods == ["HEAD", "HEAD"]

    @pytest.mark.asyncio
    async def test_persistent_server_error_is_not_accessible(self):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(502)

        client, _ = _client(handler)
        assert await client.probe("https://example.com/") is False
        assert calls == 3

    @pytest.mark.asyncio
    async def test_client_error_status_not_retried(self):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(403)

        client, _ = _client(handler)
        assert await client.probe("https://example.com/") is False
        assert calls == 1

    @pytest.mark.asyncio
    async def test_transport_error_exhausts_retries(self):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("Connection refused", request=request)

        client, _ = _client(handler)
        with pytest.raises(RetryExhaustedError):
            await client.probe("https://example.com/")
        assert calls == 3


class TestFetchStatus:
    @pytest.mark.asyncio
    async def test_returns_code(self):
        client, _ = _client(lambda request: httpx.Response(404))
        assert await client.fetch_status("https://example.com/") == 404

    @pytest.mark.asyncio
    async def test_retries_rate_limit_then_returns_code(self):
        responses = iter([httpx.Response(429), httpx.Response(404)])
        client, _ = _client(lambda request: next(responses))
        assert await client.fetch_status("https://example.com/") == 404

    @pytest.mark.asyncio
    async def test_none_when_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client, _ = _client(handler)
        assert await client.fetch_status("https://example.com/") is None


class TestFetchContent:
    @pytest.mark.asyncio
    async def test_body(self):
        client, _ = _client(lambda request: httpx.Response(200, text="<p>hello</p>"))
        assert await client.fetch_content("https://example.com/") == "<p>hello</p>"

    @pytest.mark.asyncio
    async def test_retries_server_error(self):
        responses = iter([httpx.Response(503), httpx.Response(200, text="ok")])
        client, _ = _client(lambda request: next(responses))
        assert await client.fetch_content("https://example.com/") == "ok"

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(404)

        client, _ = _client(handler)
        with pytest.raises(httpx.HTTPStatusError):
            await client.fetch_content("https://example.com/")
        assert calls == 1


class TestPostJson:
    @pytest.mark.asyncio
    async def test_sends_json_and_headers(self):
        seen: dict = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("Authorization")
            seen["correlation"] = request.headers.get("X-Correlation-ID")
            return httpx.Response(200, json={"results": []})

        client, _ = _client(handler, api_key="secret")
        result = await client.post_json("https://api.example.com/lookup", {"lookupIds": ["A"]})
        assert result == {"results": []}
        assert seen["body"] == {"lookupIds": ["A"]}
        assert seen["auth"] == "Bearer secret"
        assert seen["correlation"]

    @pytest.mark.asyncio
    async def test_no_auth_without_key(self):
        seen: dict = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={})

        client, _ = _client(handler)
        await client.post_json("https://api.example.com/lookup", {})
        assert seen["auth"] is None

    @pytest.mark.asyncio
    async def test_test_endpoint_never_hits_network(self):
        def handler(request):
            raise AssertionError("network used")

        client, _ = _client(handler)
        result = await client.post_json("test", {"lookupIds": ["TSRC-TEST-123456"]})
        assert result == TEST_API_PAYLOAD
        assert len(result["results"]) == 3


class TestFileUrls:
    @pytest.mark.asyncio
    async def test_existing_file(self, tmp_path):
        page = tmp_path / "page.html"
        page.write_text("This document expired", encoding="utf-8")
        client, _ = _client(lambda request: httpx.Response(500))
        url = page.as_uri()
        assert await client.probe(url) is True
        assert await client.fetch_status(url) == 200
        assert await client.fetch_content(url) == "This document expired"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        client, _ = _client(lambda request: httpx.Response(200))
        url = (tmp_path / "gone.html").as_uri()
        assert await client.probe(url) is False
        assert await client.fetch_status(url) == 404


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        client, inner = _client(lambda request: httpx.Response(200))
        await client.aclose()
        assert not inner.is_closed
        await inner.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        client = HttpxLinkClient()
        await client.aclose()
        assert client._client.is_closed
