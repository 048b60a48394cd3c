# src/document/repair.py — v1
"""Hyperlink repair over an open python-docx Document.

remove_invisible_hyperlinks runs before extraction and deletes hyperlinks
that have a target but no visible text.

repair_hyperlinks then works through the validated hyperlinks:
  1. Title policy: replace the display title with the authoritative one
     (auto_replace_titles) or only report the difference.
  2. Content ID: append " (<6 digits>)" or upgrade a 5-digit suffix, unless
     the text already carries a status suffix.
  3. Status suffix: " - Expired" / " - Not Found", never duplicated.
  4. Target: point the relationship at the document view URL.
Steps 2-4 apply only to hyperlinks with a lookup id, and 2 and 4 only when
a real metadata record backs the result. The display text is written once
per hyperlink, so track-changes mode leaves a single revision. Errors are
recorded in the change log and do not stop the pass.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Iterable
from urllib.parse import quote

from docx.oxml.ns import qn
from pydantic import BaseModel, Field

from linkrepair.core.models import (
    ChangeEntry,
    Hyperlink,
    HyperlinkStatus,
    TitleComparisonResult,
    ValidationResult,
)
from linkrepair.document.mutator import (
    hyperlink_text,
    remove_hyperlink,
    retarget_hyperlink,
    update_display_text,
)
from linkrepair.validation.title import build_display_text

if TYPE_CHECKING:
    from docx.document import Document

    from linkrepair.config.settings import Settings
    from linkrepair.document.docx_hyperlinks import LocatedHyperlink

logger = logging.getLogger(__name__)

ACTION_REPLACED = "Title replaced with API response"
ACTION_REPORTED = "Title difference reported"

SUFFIX_EXPIRED = " - Expired"
SUFFIX_NOT_FOUND = " - Not Found"

DOCUMENT_ID_PLACEHOLDER = "{document_id}"

_SUMMARY_LABELS: tuple[tuple[str, str], ...] = (
    ("hyperlink_updated", "hyperlinks updated"),
    ("hyperlink_removed", "invisible hyperlinks deleted"),
    ("content_id_added", "content IDs added"),
    ("title_replaced", "titles replaced"),
    ("possible_title_change", "possible title changes"),
    ("hyperlink_status_added", "status suffixes added"),
    ("error", "errors"),
)

# hyperlinks around these carry no w:t but are not invisible
_NON_TEXT_CONTENT = ("w:drawing", "w:pict", "w:object")


class RepairReport(BaseModel):
    """Outcome of a repair pass over one document."""

    changes: list[ChangeEntry] = Field(default_factory=list)
    comparisons: dict[str, TitleComparisonResult] = Field(default_factory=dict)
    updated_hyperlinks: list[Hyperlink] = Field(default_factory=list)
    replaced_count: int = 0
    reported_count: int = 0
    updated_count: int = 0
    removed_count: int = 0
    error_count: int = 0

    def add_removals(self, removed: Iterable[ChangeEntry]) -> None:
        """Prepend the entries of a remove_invisible_hyperlinks pass."""
        removed = list(removed)
        self.changes[:0] = removed
        self.removed_count += len(removed)

    def count(self, change_type: str) -> int:
        return sum(1 for c in self.changes if c.type == change_type)

    def summary(self, document_name: str = "document") -> str:
        """One-line change-log summary, e.g. "Processed a.docx: 2 titles replaced"."""
        parts = []
        for change_type, label in _SUMMARY_LABELS:
            n = self.count(change_type)
            if n:
                parts.append(f"{n} {label}")
        return f"Processed {document_name}: " + (", ".join(parts) or "no changes required")


# === INVISIBLE HYPERLINKS ===


def remove_invisible_hyperlinks(document: Document) -> list[ChangeEntry]:
    """Delete body hyperlinks with an r:id but no visible text.

    Hyperlinks whose relationship does not resolve are deleted too.
    Hyperlinks around images or embedded objects are kept.
    """
    part = document.part
    changes: list[ChangeEntry] = []

    for element in list(document.element.body.iter(qn("w:hyperlink"))):
        rid = element.get(qn("r:id"))
        if not rid:
            continue
        if hyperlink_text(element).strip() or _has_non_text_content(element):
            continue

        rel = part.rels.get(rid)
        if rel is not None:
            old_value = rel.target_ref
            details = "Hyperlink had empty display text"
        else:
            old_value = "Broken hyperlink"
            details = "Hyperlink had invalid relationship ID and empty display text"

        remove_hyperlink(part, element)
        changes.append(ChangeEntry(
            type="hyperlink_removed",
            description="Deleted Invisible Hyperlink",
            element_id=uuid.uuid4().hex,
            old_value=old_value,
            details=details,
        ))
        logger.info("Deleted invisible hyperlink %s: %s", rid, old_value)

    if changes:
        logger.info("Removed %d invisible hyperlinks", len(changes))
    return changes


def _has_non_text_content(element) -> bool:
    return any(next(element.iter(qn(tag)), None) is not None for tag in _NON_TEXT_CONTENT)


# === HYPERLINK REPAIR ===


def repair_hyperlinks(
    document: Document,
    located: Iterable[LocatedHyperlink],
    results: Iterable[ValidationResult],
    settings: Settings,
) -> RepairReport:
    """Apply the title policy and the hyperlink updates to every validated hyperlink.

    Args:
        document: Open document owning the hyperlink elements.
        located: Hyperlinks paired with their document elements.
        results: Validation results, matched to hyperlinks by hyperlink_id.
        settings: Supplies the repair switches, document_url_template,
            track_changes and revision_author.
    """
    by_id = {r.hyperlink_id: r for r in results}
    report = RepairReport()

    for item in located:
        result = by_id.get(item.hyperlink.id)
        if result is None or result.status is HyperlinkStatus.ERROR:
            continue
        try:
            _repair_one(document, item, result, settings, report)
        except Exception as e:
            logger.error("Error repairing hyperlink %s", item.hyperlink.id, exc_info=True)
            report.changes.append(ChangeEntry(
                type="error",
                description="Error processing hyperlink",
                element_id=item.hyperlink.id,
                details=str(e),
            ))
            report.error_count += 1

    return report


def _repair_one(
    document: Document,
    item: LocatedHyperlink,
    result: ValidationResult,
    settings: Settings,
    report: RepairReport,
) -> None:
    link = item.hyperlink
    current = hyperlink_text(item.element)
    text = current
    changes: list[ChangeEntry] = []
    comparison: TitleComparisonResult | None = None

    tc = result.title_comparison
    if tc is not None and tc.titles_differ:
        details = f"Content ID: {tc.content_id}"
        if settings.auto_replace_titles:
            text = build_display_text(tc.api_title, tc.content_id)
            changes.append(ChangeEntry(
                type="title_replaced",
                description=ACTION_REPLACED,
                element_id=link.id,
                old_value=tc.current_title,
                new_value=tc.api_title,
                details=details,
            ))
            comparison = tc.model_copy(update={"action_taken": ACTION_REPLACED})
        elif settings.report_title_differences:
            changes.append(ChangeEntry(
                type="possible_title_change",
                description="Possible Title Change",
                element_id=link.id,
                old_value=tc.current_title,
                new_value=tc.api_title,
                details=details,
            ))
            comparison = tc.model_copy(update={"action_taken": ACTION_REPORTED})

    new_url = ""
    if settings.update_hyperlinks and result.lookup_id:
        text = _apply_content_id(text, link.id, result, settings, changes)
        text = _apply_status_suffix(text, link.id, result, changes)
        new_url = document_url(result, settings.document_url_template)
        if new_url == link.original_url:
            new_url = ""

    if new_url:
        retarget_hyperlink(document.part, item.element, new_url)
        changes.append(ChangeEntry(
            type="hyperlink_updated",
            description="Hyperlink URL updated",
            element_id=link.id,
            old_value=link.original_url,
            new_value=new_url,
            details=f"Document ID: {result.document_id or result.content_id}",
        ))
        logger.info("Hyperlink %s retargeted: %s -> %s", link.id, link.original_url, new_url)

    if text != current:
        update_display_text(
            item.element,
            text,
            track_changes=settings.track_changes,
            author=settings.revision_author,
        )
        logger.info("Hyperlink %s display text: %r -> %r", link.id, current, text)

    report.changes.extend(changes)
    if comparison is not None:
        report.comparisons[link.id] = comparison
        if comparison.action_taken == ACTION_REPLACED:
            report.replaced_count += 1
        else:
            report.reported_count += 1
    if new_url or text != current:
        report.updated_hyperlinks.append(
            link.model_copy(update={"display_text": text, "updated_url": new_url}),
        )
        report.updated_count += 1


def _apply_content_id(
    text: str,
    link_id: str,
    result: ValidationResult,
    settings: Settings,
    changes: list[ChangeEntry],
) -> str:
    if not (settings.add_content_ids and result.has_record and result.content_id):
        return text
    if not text.strip() or _has_status_suffix(text):
        return text

    candidate = build_display_text(text, result.content_id)
    if candidate == text.strip():
        return text
    changes.append(ChangeEntry(
        type="content_id_added",
        description="Content ID appended",
        element_id=link_id,
        old_value=text,
        new_value=candidate,
        details=f"Content ID: {result.content_id}",
    ))
    return candidate


def _apply_status_suffix(
    text: str,
    link_id: str,
    result: ValidationResult,
    changes: list[ChangeEntry],
) -> str:
    lowered = text.lower()
    has_expired = SUFFIX_EXPIRED.lower() in lowered
    has_not_found = SUFFIX_NOT_FOUND.lower() in lowered

    if result.status is HyperlinkStatus.EXPIRED and not has_expired:
        suffix, label = SUFFIX_EXPIRED, "Expired"
    elif result.status is HyperlinkStatus.NOT_FOUND and not (has_expired or has_not_found):
        suffix, label = SUFFIX_NOT_FOUND, "Not Found"
    else:
        return text

    new_text = text + suffix
    changes.append(ChangeEntry(
        type="hyperlink_status_added",
        description=f"Added {label} status",
        element_id=link_id,
        old_value=text,
        new_value=new_text,
    ))
    return new_text


def _has_status_suffix(text: str) -> bool:
    lowered = text.lower()
    return SUFFIX_EXPIRED.lower() in lowered or SUFFIX_NOT_FOUND.lower() in lowered


def document_url(result: ValidationResult, template: str) -> str:
    """View URL for the record behind result, or "" without a real record."""
    if not result.has_record:
        return ""
    doc_id = result.document_id or result.content_id
    if not doc_id:
        return ""
    return template.replace(DOCUMENT_ID_PLACEHOLDER, quote(doc_id, safe=""))
