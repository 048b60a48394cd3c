# src/batch/runner.py — v1
"""Bounded concurrent batch runner.

Workflow:
    1. Prefetch metadata for every distinct lookup id (one request, best effort)
    2. Launch one task per hyperlink; a semaphore admits at most
       max_concurrency validations at a time
    3. Collect exactly one ValidationResult per hyperlink, in input order

Cancelling run() cancels every in-flight and pending validation.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import TYPE_CHECKING, Sequence

from linkrepair.batch.models import BatchSummary, ProgressEvent, ProgressObserver
from linkrepair.core.models import Hyperlink, HyperlinkStatus, ValidationResult
from linkrepair.logging.context import set_batch_context

if TYPE_CHECKING:
    from linkrepair.validation.validator import HyperlinkValidator

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 10


class BatchValidationRunner:
    """Validate many hyperlinks with bounded concurrency.

    Args:
        validator: Single-hyperlink validator.
        max_concurrency: Maximum validations in flight (>= 1).
    """

    def __init__(
        self,
        validator: HyperlinkValidator,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            msg = f"max_concurrency must be >= 1, got {max_concurrency}"
            raise ValueError(msg)
        self._validator = validator
        self._max_concurrency = max_concurrency

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def run(
        self,
        hyperlinks: Sequence[Hyperlink],
        on_progress: ProgressObserver | None = None,
    ) -> list[ValidationResult]:
        if not hyperlinks:
            return []

        batch_id = uuid.uuid4().hex[:12]
        set_batch_context(batch_id)
        total = len(hyperlinks)
        start = time.monotonic()
        logger.info(
            "Validating %d hyperlinks (max concurrency %d)",
            total, self._max_concurrency,
        )

        await self._prefetch(hyperlinks)

        semaphore = asyncio.Semaphore(self._max_concurrency)
        completed = 0

        async def _one(hyperlink: Hyperlink) -> ValidationResult:
            nonlocal completed
            async with semaphore:
                result = await self._validate_one(hyperlink)
            completed += 1
            _notify(on_progress, ProgressEvent(
                completed=completed,
                total=total,
                hyperlink_id=hyperlink.id,
                status=result.status,
            ))
            return result

        results = await asyncio.gather(*(_one(h) for h in hyperlinks))

        summary = BatchSummary.from_results(results)
        logger.info(
            "Batch %s finished in %.2fs: %d valid, %d invalid, %d not found, "
            "%d expired, %d errors",
            batch_id, time.monotonic() - start,
            summary.count(HyperlinkStatus.VALID),
            summary.count(HyperlinkStatus.INVALID),
            summary.count(HyperlinkStatus.NOT_FOUND),
            summary.count(HyperlinkStatus.EXPIRED),
            summary.count(HyperlinkStatus.ERROR),
        )
        return list(results)

    async def _prefetch(self, hyperlinks: Sequence[Hyperlink]) -> None:
        try:
            warmed = await self._validator.prefetch(hyperlinks)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Metadata prefetch failed, falling back to per-link lookups: %s", e)
            return
        logger.debug("Prefetched %d metadata records", warmed)

    async def _validate_one(self, hyperlink: Hyperlink) -> ValidationResult:
        try:
            return await self._validator.validate(hyperlink)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Validation task failed for %s", hyperlink.id, exc_info=True)
            return ValidationResult(
                hyperlink_id=hyperlink.id,
                status=HyperlinkStatus.ERROR,
                error_message=str(e) or type(e).__name__,
            )


def _notify(observer: ProgressObserver | None, event: ProgressEvent) -> None:
    if observer is None:
        return
    try:
        observer(event)
    except Exception:
        logger.warning("Progress observer raised for %s", event.hyperlink_id, exc_info=True)
