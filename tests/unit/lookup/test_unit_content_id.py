# tests/unit/lookup/test_unit_content_id.py — v1
"""Tests for lookup/content_id.py."""

from __future__ import annotations

import pytest

from linkrepair.lookup.content_id import (
    content_id_from_lookup_id,
    format_content_id,
    generate_content_id,
    pad_content_id,
)


class TestGenerate:
    def test_deterministic_six_digits(self):
        first = generate_content_id("TSRC-ABC-123456")
        assert first == generate_content_id("TSRC-ABC-123456")
        assert len(first) == 6 and first.isdigit()

    def test_differs_between_ids(self):
        assert generate_content_id("TSRC-ABC-123456") != generate_content_id("TSRC-ABC-654321")

    def test_empty(self):
        assert generate_content_id("") == ""


class TestPad:
    def test_five_digits_padded(self):
        assert pad_content_id("12345") == "012345"

    @pytest.mark.parametrize("value", ["123456", "1234", "ABCDE", ""])
    def test_other_values_unchanged(self, value):
        assert pad_content_id(value) == value


class TestFormat:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("TEST-CONTENT-123456", "123456"),
            ("123456", "123456"),
            ("12345", "012345"),
            ("123", "000123"),
            ("  98765 ", "098765"),
            ("ABCDEFGH", "CDEFGH"),
            ("", ""),
        ],
    )
    def test_display_form(self, raw, expected):
        assert format_content_id(raw) == expected


class TestFromLookupId:
    def test_numeric_tail(self):
        assert content_id_from_lookup_id("CMS-XY-000042") == "000042"

    def test_no_match(self):
        assert content_id_from_lookup_id("random") == ""
