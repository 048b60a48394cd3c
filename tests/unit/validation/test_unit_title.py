# tests/unit/validation/test_unit_title.py — v1
"""Tests for validation/title.py — suffix stripping, comparison, repaired text."""

from __future__ import annotations

import pytest

from linkrepair.validation.title import (
    ACTION_DIFFERENCE_DETECTED,
    ACTION_TITLES_MATCH,
    build_display_text,
    compare_titles,
    extract_title,
)


class TestExtractTitle:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Report Title (123456)", "Report Title"),
            ("Report Title (12345)", "Report Title"),
            ("Report Title   (123456)  ", "Report Title"),
            ("Report (draft)", "Report (draft)"),
            ("Version (1234567)", "Version (1234567)"),
            ("", ""),
        ],
    )
    def test_strip_suffix(self, text, expected):
        assert extract_title(text) == expected


class TestCompareTitles:
    def test_same_title_with_suffix(self):
        result = compare_titles("Report Title (123456)", "Report Title", "123456")
        assert result.titles_differ is False
        assert result.action_taken == ACTION_TITLES_MATCH

    def test_different_title(self):
        result = compare_titles("Old Title (123456)", "New Title", "123456")
        assert result.titles_differ is True
        assert result.current_title == "Old Title"
        assert result.api_title == "New Title"
        assert result.content_id == "123456"
        assert result.action_taken == ACTION_DIFFERENCE_DETECTED

    def test_case_insensitive(self):
        assert not compare_titles("REPORT title", "report TITLE").titles_differ

    def test_trailing_whitespace_ignored(self):
        assert not compare_titles("Report ", "Report  ").titles_differ


class TestBuildDisplayText:
    def test_appends_suffix(self):
        assert build_display_text("New Title", "123456") == "New Title (123456)"

    def test_pads_five_digit_id(self):
        assert build_display_text("New Title", "12345") == "New Title (012345)"

    def test_upgrades_five_digit_suffix(self):
        assert build_display_text("Title (12345)", "012345") == "Title (012345)"

    def test_no_duplicate_suffix(self):
        assert build_display_text("Title (123456)", "123456") == "Title (123456)"

    def test_long_content_id(self):
        assert build_display_text("Title", "TEST-CONTENT-123456") == "Title (123456)"

    def test_no_content_id(self):
        assert build_display_text("  Title ", "") == "Title"
