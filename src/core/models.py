# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Hyperlink, ValidationResult, TitleComparisonResult and DocumentRecord are
the values that travel between the extractor, the lookup service, the
checker, the comparator and the document mutator.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# === HYPERLINK ===


class HyperlinkStatus(str, Enum):
    """Outcome classes of a hyperlink validation."""

    PENDING = "Pending"
    VALID = "Valid"
    INVALID = "Invalid"
    NOT_FOUND = "NotFound"
    EXPIRED = "Expired"
    ERROR = "Error"


class Hyperlink(BaseModel):
    """A hyperlink as found in a document.

    Instances are never mutated. The repair path produces a new instance
    via model_copy() carrying the new display_text and, when the target
    was rewritten, updated_url.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    original_url: str = ""
    display_text: str = ""
    updated_url: str = ""


# === VALIDATION ===


class TitleComparisonResult(BaseModel):
    """Current display title vs authoritative title for one hyperlink."""

    model_config = ConfigDict(frozen=True)

    content_id: str = ""
    current_title: str = ""
    api_title: str = ""
    titles_differ: bool = False
    action_taken: str = ""


class ValidationResult(BaseModel):
    """Result of validating a single hyperlink. Never mutated after return."""

    model_config = ConfigDict(frozen=True)

    hyperlink_id: str
    status: HyperlinkStatus
    lookup_id: str = ""
    content_id: str = ""
    document_id: str = ""
    # True when content_id/document_id come from a real (non-synthetic) record
    has_record: bool = False
    is_expired: bool = False
    requires_update: bool = False
    error_message: str = ""
    title_comparison: TitleComparisonResult | None = None


# === LOOKUP SERVICE ===


class DocumentRecord(BaseModel):
    """Authoritative metadata for a lookup id."""

    model_config = ConfigDict(frozen=True)

    document_id: str = ""
    content_id: str = ""
    title: str = ""
    status: str = "Unknown"
    lookup_id: str = ""
    is_synthetic: bool = False

    @property
    def is_expired(self) -> bool:
        return self.status.strip().lower() == "expired"


class LookupResponse(BaseModel):
    """Lookup ids partitioned by the outcome of one metadata request."""

    found: dict[str, DocumentRecord] = Field(default_factory=dict)
    expired: dict[str, DocumentRecord] = Field(default_factory=dict)
    missing: list[str] = Field(default_factory=list)

    def record_for(self, lookup_id: str) -> DocumentRecord | None:
        return self.found.get(lookup_id) or self.expired.get(lookup_id)


# === DOCUMENT CHANGES ===


ChangeType = Literal[
    "hyperlink_updated",
    "hyperlink_removed",
    "content_id_added",
    "hyperlink_status_added",
    "title_replaced",
    "possible_title_change",
    "error",
]


class ChangeEntry(BaseModel):
    """One entry of the change log produced while repairing a document."""

    type: ChangeType
    description: str
    element_id: str
    old_value: str = ""
    new_value: str = ""
    details: str = ""
