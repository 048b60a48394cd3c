# src/validation/title.py — v1
"""Title comparison between a hyperlink's display text and the API title.

Display texts carry the Content ID as a trailing "(123456)" suffix (older
documents have 5-digit ones), which is stripped before comparing.
"""

from __future__ import annotations

import logging
import re

from linkrepair.core.models import TitleComparisonResult
from linkrepair.lookup.content_id import format_content_id

logger = logging.getLogger(__name__)

CONTENT_ID_SUFFIX = re.compile(r"\s*\([0-9]{5,6}\)\s*$")

ACTION_DIFFERENCE_DETECTED = "Title difference detected"
ACTION_TITLES_MATCH = "Titles match - no action needed"


def extract_title(display_text: str) -> str:
    """Display text without its Content ID suffix and trailing whitespace."""
    if not display_text:
        return ""
    return CONTENT_ID_SUFFIX.sub("", display_text).rstrip()


def compare_titles(
    display_text: str, api_title: str, content_id: str = "",
) -> TitleComparisonResult:
    """Compare case-insensitively; never decides what to do about it."""
    current = extract_title(display_text or "")
    authoritative = (api_title or "").strip()
    differ = current.casefold() != authoritative.casefold()
    if differ:
        logger.info(
            "Title difference detected: current=%r api=%r (content id %s)",
            current, authoritative, content_id,
        )
    return TitleComparisonResult(
        content_id=content_id,
        current_title=current,
        api_title=authoritative,
        titles_differ=differ,
        action_taken=ACTION_DIFFERENCE_DETECTED if differ else ACTION_TITLES_MATCH,
    )


def build_display_text(title: str, content_id: str) -> str:
    """Repaired display text "<title> (<6-digit id>)".

    A 5-digit suffix matching the id is upgraded to 6 digits; an existing
    6-digit suffix is not duplicated.
    """
    text = (title or "").strip()
    six = format_content_id(content_id)
    if not six:
        return text

    suffix6 = f" ({six})"
    suffix5 = f" ({six[1:]})"
    lowered = text.lower()
    if lowered.endswith(suffix5.lower()) and not lowered.endswith(suffix6.lower()):
        return text[: -len(suffix5)] + suffix6
    if suffix6.lower() in lowered:
        return text
    return text + suffix6
