# src/api/models.py — v1
"""API-level models returned by the pipeline facade."""

from __future__ import annotations

from dataclasses import dataclass, field

from linkrepair.core.models import HyperlinkStatus, ValidationResult
from linkrepair.document.docx_hyperlinks import LocatedHyperlink


@dataclass
class DocumentValidation:
    """Hyperlinks found in a document and their validation results, index-aligned."""

    located: list[LocatedHyperlink] = field(default_factory=list)
    results: list[ValidationResult] = field(default_factory=list)

    def result_for(self, hyperlink_id: str) -> ValidationResult | None:
        return next((r for r in self.results if r.hyperlink_id == hyperlink_id), None)

    def with_status(self, status: HyperlinkStatus) -> list[ValidationResult]:
        return [r for r in self.results if r.status is status]

    @property
    def requires_update(self) -> list[ValidationResult]:
        return [r for r in self.results if r.requires_update]
