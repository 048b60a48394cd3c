# tests/unit/validation/test_unit_validator.py — v1
"""Tests for validation/validator.py — end-to-end single hyperlink validation."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from linkrepair.cache.memory_cache import MemoryCache
from linkrepair.core.models import Hyperlink, HyperlinkStatus
from linkrepair.lookup.content_id import generate_content_id
from linkrepair.lookup.service import MetadataLookupService
from linkrepair.validation.accessibility import AccessibilityChecker
from linkrepair.validation.validator import MSG_RECORD_EXPIRED, HyperlinkValidator

URL = "https://docs.example.com/view?docid=TSRC-ABC-123456"

PAYLOAD = {
    "results": [
        {
            "documentId": "doc-1",
            "contentId": "CONTENT-123456",
            "title": "Quarterly Report",
            "status": "Released",
            "lookupId": "TSRC-ABC-123456",
        },
        {
            "documentId": "doc-2",
            "contentId": "22222",
            "title": "Retired Policy",
            "status": "Expired",
            "lookupId": "TSRC-ABC-222222",
        },
    ],
}


@pytest.fixture
def build(make_client, clock):
    def _build(payload=PAYLOAD, api_base_url="https://api.example.com", **client_kwargs):
        client = make_client(payload=payload, **client_kwargs)
        lookup = MetadataLookupService(
            client=client,
            content_id_cache=MemoryCache(clock=clock),
            record_cache=MemoryCache(clock=clock),
            api_base_url=api_base_url,
        )
        return HyperlinkValidator(AccessibilityChecker(client), lookup), client, lookup

    return _build


class TestValidate:
    @pytest.mark.asyncio
    async def test_matching_title(self, build):
        validator, _, _ = build()
        link = Hyperlink(id="h1", original_url=URL, display_text="Quarterly Report (123456)")
        result = await validator.validate(link)
        assert result.hyperlink_id == "h1"
        assert result.status is HyperlinkStatus.VALID
        assert result.lookup_id == "TSRC-ABC-123456"
        assert result.content_id == "123456"
        assert result.document_id == "doc-1"
        assert result.has_record
        assert result.title_comparison is None
        assert not result.requires_update

    @pytest.mark.asyncio
    async def test_title_difference_attached(self, build):
        validator, _, _ = build()
        link = Hyperlink(original_url=URL, display_text="Old Report (123456)")
        result = await validator.validate(link)
        comparison = result.title_comparison
        assert comparison is not None
        assert comparison.titles_differ
        assert comparison.current_title == "Old Report"
        assert comparison.api_title == "Quarterly Report"
        assert comparison.content_id == "123456"

    @pytest.mark.asyncio
    async def test_expired_record(self, build):
        validator, _, _ = build()
        link = Hyperlink(
            original_url="https://docs.example.com/TSRC-ABC-222222",
            display_text="Retired Policy",
        )
        result = await validator.validate(link)
        assert result.status is HyperlinkStatus.EXPIRED
        assert result.is_expired and result.requires_update
        assert result.error_message == MSG_RECORD_EXPIRED
        assert result.content_id == "022222"

    @pytest.mark.asyncio
    async def test_not_found_keeps_lookup_data(self, build):
        validator, _, _ = build(statuses={URL: 404})
        link = Hyperlink(original_url=URL, display_text="Quarterly Report")
        result = await validator.validate(link)
        assert result.status is HyperlinkStatus.NOT_FOUND
        assert result.document_id == "doc-1"
        assert result.requires_update

    @pytest.mark.asyncio
    async def test_no_lookup_id(self, build):
        validator, client, _ = build()
        link = Hyperlink(original_url="https://example.com/", display_text="Home")
        result = await validator.validate(link)
        assert result.status is HyperlinkStatus.VALID
        assert result.lookup_id == ""
        assert result.content_id == ""
        assert client.posts == []

    @pytest.mark.asyncio
    async def test_offline_uses_generated_content_id(self, build):
        validator, _, _ = build(api_base_url="")
        link = Hyperlink(original_url=URL, display_text="Anything")
        result = await validator.validate(link)
        assert result.content_id == generate_content_id("TSRC-ABC-123456")
        assert not result.has_record
        assert result.title_comparison is None

    @pytest.mark.asyncio
    async def test_lookup_failure_falls_back(self, build):
        validator, client, _ = build()
        client.post_json = AsyncMock(side_effect=RuntimeError("service down"))
        link = Hyperlink(original_url=URL, display_text="Old Title")
        result = await validator.validate(link)
        assert result.status is HyperlinkStatus.VALID
        assert result.content_id == generate_content_id("TSRC-ABC-123456")
        assert result.document_id == ""
        assert result.title_comparison is None

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_error_result(self, build):
        validator, client, _ = build()
        validator._checker.check = AsyncMock(side_effect=RuntimeError("kaboom"))
        result = await validator.validate(Hyperlink(id="h9", original_url=URL))
        assert result.status is HyperlinkStatus.ERROR
        assert result.hyperlink_id == "h9"
        assert result.error_message == "kaboom"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, build):
        validator, _, _ = build()
        validator._checker.check = AsyncMock(side_effect=asyncio.CancelledError())
        with pytest.raises(asyncio.CancelledError):
            await validator.validate(Hyperlink(original_url=URL))


class TestPrefetch:
    @pytest.mark.asyncio
    async def test_prefetch_then_validate_single_post(self, build):
        validator, client, _ = build()
        links = [
            Hyperlink(original_url=URL, display_text="Quarterly Report"),
            Hyperlink(original_url="https://x/TSRC-ABC-222222"),
            Hyperlink(original_url="https://example.com/"),
        ]
        assert await validator.prefetch(links) == 2
        for link in links:
            await validator.validate(link)
        assert len(client.posts) == 1
