# src/api/facade.py — v1
"""Public API facade — single entry point for hyperlink validation and repair.

Usage:
    from linkrepair.api.facade import LinkRepairPipeline

    async with LinkRepairPipeline(settings) as pipeline:
        validation = await pipeline.validate_document(document)
        report = await pipeline.repair_document(document)
    document.save(path)

The pipeline owns both TTL caches and (unless one is passed in) the
network client; everything is released on exit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from linkrepair.api.models import DocumentValidation
from linkrepair.batch.runner import BatchValidationRunner
from linkrepair.cache.memory_cache import MemoryCache
from linkrepair.config.settings import Settings
from linkrepair.document.docx_hyperlinks import extract_hyperlinks
from linkrepair.document.repair import (
    RepairReport,
    remove_invisible_hyperlinks,
    repair_hyperlinks,
)
from linkrepair.lookup.service import MetadataLookupService
from linkrepair.network.httpx_client import HttpxLinkClient
from linkrepair.validation.accessibility import AccessibilityChecker
from linkrepair.validation.validator import HyperlinkValidator

if TYPE_CHECKING:
    from types import TracebackType

    from docx.document import Document

    from linkrepair.batch.models import ProgressObserver
    from linkrepair.cache.models import CacheStatistics
    from linkrepair.core.models import Hyperlink, ValidationResult
    from linkrepair.network.base_client import BaseLinkClient

logger = logging.getLogger(__name__)


class LinkRepairPipeline:
    """Wire settings, caches, client and services into one object.

    Args:
        settings: Global settings. Loaded from .env if None.
        client: Network client. An HttpxLinkClient is created (and closed
            by aclose()) when omitted.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: BaseLinkClient | None = None,
    ) -> None:
        self._settings = settings or Settings()
        s = self._settings

        self._owns_client = client is None
        self._client: BaseLinkClient = client or HttpxLinkClient(
            timeout_s=s.http_timeout_s,
            user_agent=s.user_agent,
            follow_redirects=s.follow_redirects,
            api_key=s.api_key,
            api_timeout_s=s.api_timeout_s,
        )

        self._content_id_cache = MemoryCache(
            name="content_ids", default_ttl_s=s.content_id_cache_ttl_s,
        )
        self._record_cache = MemoryCache(
            name="api_lookups", default_ttl_s=s.lookup_cache_ttl_s,
        )
        self._lookup = MetadataLookupService(
            client=self._client,
            content_id_cache=self._content_id_cache,
            record_cache=self._record_cache,
            api_base_url=s.api_base_url,
            content_id_ttl_s=s.content_id_cache_ttl_s,
            record_ttl_s=s.lookup_cache_ttl_s,
        )
        self._checker = AccessibilityChecker(
            self._client,
            check_expired_content=s.check_expired_content,
            skip_domains=s.skip_domains_list,
        )
        self._validator = HyperlinkValidator(self._checker, self._lookup)
        self._runner = BatchValidationRunner(
            self._validator, max_concurrency=s.max_concurrent_validations,
        )
        logger.debug(
            "Pipeline ready (offline=%s, max concurrency=%d)",
            s.offline, s.max_concurrent_validations,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def validator(self) -> HyperlinkValidator:
        return self._validator

    async def __aenter__(self) -> LinkRepairPipeline:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._content_id_cache.clear()
        await self._record_cache.clear()
        if self._owns_client:
            await self._client.aclose()

    async def validate(
        self,
        hyperlinks: Sequence[Hyperlink],
        on_progress: ProgressObserver | None = None,
    ) -> list[ValidationResult]:
        """Validate hyperlinks; one result per input, in input order."""
        return await self._runner.run(hyperlinks, on_progress=on_progress)

    async def validate_document(
        self,
        document: Document,
        on_progress: ProgressObserver | None = None,
    ) -> DocumentValidation:
        located = list(extract_hyperlinks(document))
        logger.info("Found %d hyperlinks in document", len(located))
        results = await self.validate(
            [item.hyperlink for item in located], on_progress=on_progress,
        )
        return DocumentValidation(located=located, results=results)

    async def repair_document(
        self,
        document: Document,
        on_progress: ProgressObserver | None = None,
        document_name: str = "document",
    ) -> RepairReport:
        """Remove invisible hyperlinks, validate the rest and repair them in place.

        The caller saves the document afterwards.
        """
        removed = (
            remove_invisible_hyperlinks(document)
            if self._settings.remove_invisible_hyperlinks
            else []
        )
        validation = await self.validate_document(document, on_progress=on_progress)
        report = repair_hyperlinks(
            document, validation.located, validation.results, self._settings,
        )
        report.add_removals(removed)
        logger.info(report.summary(document_name))
        return report

    def cache_statistics(self) -> list[CacheStatistics]:
        return [
            self._content_id_cache.statistics(),
            self._record_cache.statistics(),
        ]
