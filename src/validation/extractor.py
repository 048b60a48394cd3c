# src/validation/extractor.py — v1
"""Lookup ID extraction from hyperlink addresses.

Order matters and matches the legacy macro: the TSRC-/CMS- pattern is
tried on "address#sub_address" first; only when it finds nothing is the
docid= query value used.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote

logger = logging.getLogger(__name__)

LOOKUP_ID_PATTERN = re.compile(
    r"\b(TSRC-[^-]+-\d{6}|CMS-[^-]+-\d{6})\b", re.IGNORECASE,
)

_DOCID_MARKER = "docid="


def extract_lookup_id(address: str, sub_address: str = "") -> str:
    """Return the canonical lookup id of a hyperlink, or "" if it has none.

    Never raises.
    """
    full = (address or "") + (f"#{sub_address}" if sub_address else "")
    try:
        if not full:
            return ""

        match = LOOKUP_ID_PATTERN.search(full)
        if match:
            lookup_id = match.group(0).upper()
            logger.debug("Extracted lookup id via pattern: %s from %s", lookup_id, full)
            return lookup_id

        pos = full.lower().find(_DOCID_MARKER)
        if pos >= 0:
            raw = full[pos + len(_DOCID_MARKER):].split("&", 1)[0]
            lookup_id = unquote(raw.strip()).strip()
            logger.debug("Extracted lookup id via docid: %s from %s", lookup_id, full)
            return lookup_id

        logger.debug("No lookup id found in: %s", full)
        return ""
    except Exception:
        logger.warning("Error extracting lookup id from: %s", full, exc_info=True)
        return ""
