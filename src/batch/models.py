# src/batch/models.py — v1
"""Batch validation models: ProgressEvent, BatchSummary."""

from __future__ import annotations

from collections import Counter
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from linkrepair.core.models import HyperlinkStatus, ValidationResult


class ProgressEvent(BaseModel):
    """Emitted once per hyperlink as soon as its validation finishes."""

    model_config = ConfigDict(frozen=True)

    completed: int
    total: int
    hyperlink_id: str
    status: HyperlinkStatus


ProgressObserver = Callable[[ProgressEvent], None]


class BatchSummary(BaseModel):
    """Per-status tally of a batch run."""

    total: int = 0
    counts: dict[HyperlinkStatus, int] = Field(default_factory=dict)

    @classmethod
    def from_results(cls, results: list[ValidationResult]) -> BatchSummary:
        return cls(total=len(results), counts=dict(Counter(r.status for r in results)))

    def count(self, status: HyperlinkStatus) -> int:
        return self.counts.get(status, 0)
