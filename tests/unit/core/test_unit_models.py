# tests/unit/core/test_unit_models.py — v1
"""Tests for core/models.py — shared domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from linkrepair.core.models import (
    ChangeEntry,
    DocumentRecord,
    Hyperlink,
    HyperlinkStatus,
    LookupResponse,
    ValidationResult,
)


class TestHyperlink:
    def test_generated_ids_unique(self):
        assert Hyperlink().id != Hyperlink().id

    def test_frozen(self):
        link = Hyperlink(display_text="a")
        with pytest.raises(ValidationError):
            link.display_text = "b"  # type: ignore[misc]

    def test_copy_with_new_text(self):
        link = Hyperlink(id="h1", original_url="https://x", display_text="a")
        updated = link.model_copy(update={"display_text": "b"})
        assert updated.id == "h1" and updated.display_text == "b"
        assert link.display_text == "a"


class TestValidationResult:
    def test_status_values(self):
        assert HyperlinkStatus.NOT_FOUND.value == "NotFound"
        result = ValidationResult(hyperlink_id="h", status="Expired")
        assert result.status is HyperlinkStatus.EXPIRED
        assert result.title_comparison is None


class TestDocumentRecord:
    @pytest.mark.parametrize(("status", "expired"), [("Expired", True), (" expired ", True), ("Released", False)])
    def test_is_expired(self, status, expired):
        assert DocumentRecord(status=status).is_expired is expired


class TestLookupResponse:
    def test_record_for(self):
        found = DocumentRecord(title="a")
        expired = DocumentRecord(title="b", status="Expired")
        response = LookupResponse(found={"A": found}, expired={"B": expired}, missing=["C"])
        assert response.record_for("A") is found
        assert response.record_for("B") is expired
        assert response.record_for("C") is None


class TestChangeEntry:
    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ChangeEntry(type="renamed", description="x", element_id="h")  # type: ignore[arg-type]
