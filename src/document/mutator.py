# src/document/mutator.py — v1
"""In-place edits of w:hyperlink elements: display text, target, removal.

Plain mode replaces every child of the hyperlink with a single run that
keeps the first run's formatting. Track-changes mode keeps the old runs
inside a w:del revision (text converted to w:delText) and adds the new run
inside a w:ins revision, so Word shows the edit as a tracked change.
Earlier revisions survive repeated edits: existing w:del elements stay
where they are and runs of an earlier w:ins move into the new w:del.

update_display_text never touches hyperlink attributes (r:id, w:anchor,
w:tooltip, w:history, w:docLocation). retarget_hyperlink swaps r:id and
drops a w:anchor the new target makes stale. remove_hyperlink deletes the
element together with its relationship.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn

if TYPE_CHECKING:
    from docx.opc.part import Part
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

DEFAULT_REVISION_AUTHOR = "linkrepair"

# w:id values must stay below 10 digits
_REVISION_ID_MODULUS = 999_999_999

_revision_counter = itertools.count(2)
_revision_lock = threading.Lock()


def next_revision_id() -> str:
    """Process-wide sequential revision id, safe across threads."""
    with _revision_lock:
        value = next(_revision_counter)
    return str(value % _REVISION_ID_MODULUS)


def hyperlink_text(hyperlink_element: _Element) -> str:
    """Visible (non-deleted) text of a hyperlink element."""
    if hyperlink_element is None:
        return ""
    return "".join(t.text or "" for t in hyperlink_element.iter(qn("w:t")))


def update_display_text(
    hyperlink_element: _Element,
    new_text: str,
    track_changes: bool = False,
    author: str = DEFAULT_REVISION_AUTHOR,
    date: datetime | None = None,
) -> None:
    """Replace the display text of hyperlink_element with new_text.

    Raises:
        ValueError: If hyperlink_element is None.
    """
    if hyperlink_element is None:
        raise ValueError("hyperlink element is required")

    rpr = _first_run_properties(hyperlink_element)
    new_run = _make_run(new_text, rpr)

    if not track_changes:
        for child in list(hyperlink_element):
            hyperlink_element.remove(child)
        hyperlink_element.append(new_run)
        logger.debug("Hyperlink text replaced: %r", new_text)
        return

    when = date or datetime.now(timezone.utc)
    deletion = _make_revision("w:del", author, when)
    for child in list(hyperlink_element):
        if child.tag == qn("w:r"):
            hyperlink_element.remove(child)
            _convert_to_deleted_text(child)
            deletion.append(child)
        elif child.tag == qn("w:ins"):
            # text inserted by an earlier revision is deleted by this one
            for run in child.findall(qn("w:r")):
                _convert_to_deleted_text(run)
                deletion.append(run)
            hyperlink_element.remove(child)

    if len(deletion):
        hyperlink_element.append(deletion)
    insertion = _make_revision("w:ins", author, when)
    insertion.append(new_run)
    hyperlink_element.append(insertion)
    logger.debug("Hyperlink text replaced with tracked change by %s: %r", author, new_text)


def retarget_hyperlink(part: Part, hyperlink_element: _Element, new_url: str) -> str:
    """Point hyperlink_element at the external target new_url.

    The old relationship is dropped unless another element still uses it.
    A w:anchor is removed when new_url carries its own fragment.
    Returns the relationship id now referenced by the element.

    Raises:
        ValueError: If hyperlink_element is None.
    """
    if hyperlink_element is None:
        raise ValueError("hyperlink element is required")

    if "#" in new_url and hyperlink_element.get(qn("w:anchor")) is not None:
        del hyperlink_element.attrib[qn("w:anchor")]

    old_rid = hyperlink_element.get(qn("r:id"))
    new_rid = part.relate_to(new_url, RT.HYPERLINK, is_external=True)
    if new_rid == old_rid:
        return new_rid
    # drop_rel counts references, so it must run while the element still holds old_rid
    if old_rid and old_rid in part.rels:
        part.drop_rel(old_rid)
    hyperlink_element.set(qn("r:id"), new_rid)
    logger.debug("Hyperlink %s retargeted as %s: %s", old_rid, new_rid, new_url)
    return new_rid


def remove_hyperlink(part: Part, hyperlink_element: _Element) -> None:
    """Detach hyperlink_element from its parent and drop its unused relationship."""
    rid = hyperlink_element.get(qn("r:id"))
    if rid and rid in part.rels:
        part.drop_rel(rid)
    parent = hyperlink_element.getparent()
    if parent is not None:
        parent.remove(hyperlink_element)


def _first_run_properties(hyperlink_element: _Element) -> _Element | None:
    first_run = next(hyperlink_element.iter(qn("w:r")), None)
    if first_run is None:
        return None
    rpr = first_run.find(qn("w:rPr"))
    if rpr is None:
        return None
    return copy.deepcopy(rpr)


def _make_run(text: str, rpr: _Element | None) -> _Element:
    run = OxmlElement("w:r")
    if rpr is not None:
        run.append(rpr)
    t = OxmlElement("w:t")
    t.set(qn("xml:space"), "preserve")
    t.text = text
    run.append(t)
    return run


def _make_revision(tag: str, author: str, when: datetime) -> _Element:
    revision = OxmlElement(tag)
    revision.set(qn("w:id"), next_revision_id())
    revision.set(qn("w:author"), author)
    revision.set(qn("w:date"), when.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"))
    return revision


def _convert_to_deleted_text(run: _Element) -> None:
    for t in list(run.iter(qn("w:t"))):
        deleted = OxmlElement("w:delText")
        deleted.set(qn("xml:space"), "preserve")
        deleted.text = t.text
        t.getparent().replace(t, deleted)
