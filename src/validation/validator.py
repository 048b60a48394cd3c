# src/validation/validator.py — v1
"""Hyperlink validator: one hyperlink in, one ValidationResult out.

Per hyperlink:
  1. Extract the lookup id from the URL
  2. Classify reachability / expiration (AccessibilityChecker)
  3. If a lookup id exists: resolve the DocumentRecord (cached), pick the
     Content ID, and compare titles
validate() never raises except on cancellation; unexpected errors become
an Error-status result.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Iterable

from linkrepair.core.models import (
    DocumentRecord,
    Hyperlink,
    HyperlinkStatus,
    TitleComparisonResult,
    ValidationResult,
)
from linkrepair.logging.context import set_hyperlink_context
from linkrepair.lookup.content_id import format_content_id
from linkrepair.validation.extractor import extract_lookup_id
from linkrepair.validation.title import compare_titles

if TYPE_CHECKING:
    from linkrepair.lookup.service import MetadataLookupService
    from linkrepair.validation.accessibility import AccessibilityChecker

logger = logging.getLogger(__name__)

MSG_RECORD_EXPIRED = "Document record is marked as expired"


class HyperlinkValidator:
    """Validate hyperlinks against the network and the metadata service."""

    def __init__(
        self,
        checker: AccessibilityChecker,
        lookup_service: MetadataLookupService,
    ) -> None:
        self._checker = checker
        self._lookup = lookup_service

    async def validate(self, hyperlink: Hyperlink) -> ValidationResult:
        try:
            return await self._validate(hyperlink)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Error validating hyperlink %s", hyperlink.id, exc_info=True,
            )
            return ValidationResult(
                hyperlink_id=hyperlink.id,
                status=HyperlinkStatus.ERROR,
                error_message=str(e) or type(e).__name__,
            )

    async def prefetch(self, hyperlinks: Iterable[Hyperlink]) -> int:
        """Warm the record cache for every lookup id found in hyperlinks."""
        lookup_ids = [extract_lookup_id(h.original_url) for h in hyperlinks]
        return await self._lookup.prefetch(i for i in lookup_ids if i)

    async def _validate(self, hyperlink: Hyperlink) -> ValidationResult:
        set_hyperlink_context(hyperlink.id)
        logger.debug("Validating hyperlink %s: %s", hyperlink.id, hyperlink.original_url)

        lookup_id = extract_lookup_id(hyperlink.original_url)
        access = await self._checker.check(hyperlink.original_url)

        status = access.status
        error_message = access.error_message
        is_expired = access.is_expired
        requires_update = access.requires_update
        content_id = ""
        document_id = ""
        has_record = False
        comparison: TitleComparisonResult | None = None

        if lookup_id:
            record = await self._resolve_record(lookup_id)
            if record is not None and record.content_id:
                content_id = format_content_id(record.content_id)
            else:
                content_id = await self._lookup.generate_content_id(lookup_id)

            if record is not None:
                document_id = record.document_id
                has_record = not record.is_synthetic
                if record.is_expired:
                    is_expired = True
                    requires_update = True
                    if status is HyperlinkStatus.VALID:
                        status = HyperlinkStatus.EXPIRED
                        error_message = MSG_RECORD_EXPIRED
                if record.title:
                    candidate = compare_titles(
                        hyperlink.display_text, record.title, content_id,
                    )
                    if candidate.titles_differ:
                        comparison = candidate

        logger.debug("Hyperlink %s validated: %s", hyperlink.id, status.value)
        return ValidationResult(
            hyperlink_id=hyperlink.id,
            status=status,
            lookup_id=lookup_id,
            content_id=content_id,
            document_id=document_id,
            has_record=has_record,
            is_expired=is_expired,
            requires_update=requires_update,
            error_message=error_message,
            title_comparison=comparison,
        )

    async def _resolve_record(self, lookup_id: str) -> DocumentRecord | None:
        try:
            return await self._lookup.get_document_record(lookup_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Metadata lookup failed for %s: %s", lookup_id, e)
            return None
