# src/lookup/content_id.py — v1
"""Content ID helpers: deterministic generation, padding, display form.

A Content ID is the 6-digit code shown after a hyperlink title, e.g.
"Benefits Overview (012345)". Codes coming from older systems may carry
only 5 digits and are padded with a single leading zero.
"""

from __future__ import annotations

import hashlib
import re

_FIVE_DIGITS = re.compile(r"^[0-9]{5}$")
_TRAILING_SIX_DIGITS = re.compile(r"([0-9]{6})$")
_LOOKUP_ID_DIGITS = re.compile(r"\b(?:TSRC|CMS)-[^-]+-(\d{6})\b", re.IGNORECASE)


def generate_content_id(lookup_id: str) -> str:
    """Derive a stable 6-digit code from a lookup id.

    SHA-256 rather than hash() so the code survives interpreter restarts.
    """
    if not lookup_id:
        return ""
    digest = hashlib.sha256(lookup_id.encode("utf-8")).digest()
    value = int.from_bytes(digest[:8], "big") % 1_000_000
    return f"{value:06d}"


def pad_content_id(content_id: str) -> str:
    """Pad an exactly-5-digit code with one leading zero; leave others as-is."""
    if content_id and _FIVE_DIGITS.match(content_id):
        return "0" + content_id
    return content_id


def format_content_id(raw: str) -> str:
    """Display form of a Content ID: always 6 characters.

    Long ids (e.g. "TEST-CONTENT-123456") keep their last six characters,
    5-digit ids get one leading zero, shorter ones are zero-filled.
    """
    raw = (raw or "").strip()
    if not raw:
        return ""
    if len(raw) >= 6:
        match = _TRAILING_SIX_DIGITS.search(raw)
        return match.group(1) if match else raw[-6:]
    if len(raw) == 5:
        return pad_content_id(raw) if raw.isdigit() else raw.zfill(6)
    return raw.zfill(6)


def content_id_from_lookup_id(lookup_id: str) -> str:
    """The numeric tail of a TSRC-/CMS- lookup id, or "" if it has none."""
    match = _LOOKUP_ID_DIGITS.search(lookup_id or "")
    return match.group(1) if match else ""
