# src/document/docx_hyperlinks.py — v1
"""Hyperlink discovery in an open python-docx Document.

Walks every w:hyperlink in the document body (tables included), resolves
its r:id relationship to the target URL and pairs the resulting Hyperlink
with the lxml element it came from. The document is never opened, saved
or closed here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

from docx.oxml.ns import qn

from linkrepair.core.models import Hyperlink
from linkrepair.document.mutator import hyperlink_text

if TYPE_CHECKING:
    from docx.document import Document
    from lxml.etree import _Element

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocatedHyperlink:
    """A Hyperlink and the w:hyperlink element it was read from."""

    hyperlink: Hyperlink
    element: _Element


def extract_hyperlinks(document: Document) -> Iterator[LocatedHyperlink]:
    """Yield every external hyperlink of the document body in document order.

    Hyperlinks without an r:id (internal bookmarks) are skipped, as are
    those whose relationship id does not resolve.
    """
    rels = document.part.rels
    for element in document.element.body.iter(qn("w:hyperlink")):
        rid = element.get(qn("r:id"))
        if not rid:
            continue
        rel = rels.get(rid)
        if rel is None:
            logger.warning("Skipping hyperlink with unknown relationship id %s", rid)
            continue
        if not rel.is_external:
            logger.debug("Skipping hyperlink %s with internal target", rid)
            continue

        url = rel.target_ref
        anchor = element.get(qn("w:anchor"))
        if anchor:
            url = f"{url}#{anchor}"

        yield LocatedHyperlink(
            hyperlink=Hyperlink(original_url=url, display_text=hyperlink_text(element)),
            element=element,
        )
