# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a controllable clock, an in-memory network client, settings that
ignore any .env file, and small python-docx documents with hyperlinks.
No network access: all I/O is faked.
"""

from __future__ import annotations

from typing import Any

import docx
import pytest
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn

from linkrepair.config.settings import Settings
from linkrepair.core.models import Hyperlink
from linkrepair.network.base_client import BaseLinkClient


# === FAKES ===


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeLinkClient(BaseLinkClient):
    """BaseLinkClient answering from dictionaries.

    statuses: url -> HTTP status (missing url = 200)
    contents: url -> body text
    payload: JSON returned by post_json
    """

    def __init__(
        self,
        statuses: dict[str, int] | None = None,
        contents: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        self.statuses = statuses or {}
        self.contents = contents or {}
        self.payload = payload if payload is not None else {"results": []}
        self.posts: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def probe(self, url: str) -> bool:
        return 200 <= self.statuses.get(url, 200) < 400

    async def fetch_status(self, url: str) -> int | None:
        return self.statuses.get(url, 200)

    async def fetch_content(self, url: str) -> str:
        return self.contents.get(url, "<html>ok</html>")

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        self.posts.append((url, payload))
        return self.payload

    async def aclose(self) -> None:
        self.closed = True


def add_hyperlink(
    paragraph: Any,
    url: str,
    text: str,
    anchor: str | None = None,
    tooltip: str | None = None,
    bold: bool = False,
) -> Any:
    """Append an external w:hyperlink with one run to a python-docx paragraph."""
    rid = paragraph.part.relate_to(url, RT.HYPERLINK, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), rid)
    if anchor:
        hyperlink.set(qn("w:anchor"), anchor)
    if tooltip:
        hyperlink.set(qn("w:tooltip"), tooltip)
    hyperlink.set(qn("w:history"), "1")

    run = OxmlElement("w:r")
    rpr = OxmlElement("w:rPr")
    style = OxmlElement("w:rStyle")
    style.set(qn("w:val"), "Hyperlink")
    rpr.append(style)
    if bold:
        rpr.append(OxmlElement("w:b"))
    run.append(rpr)
    t = OxmlElement("w:t")
    t.text = text
    run.append(t)
    hyperlink.append(run)

    paragraph._p.append(hyperlink)
    return hyperlink


# === FIXTURES ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_client() -> FakeLinkClient:
    return FakeLinkClient()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def sample_hyperlink() -> Hyperlink:
    return Hyperlink(
        id="link-001",
        original_url="https://docs.example.com/view?docid=TSRC-ABC-123456",
        display_text="Quarterly Report (123456)",
    )


@pytest.fixture
def docx_document() -> Any:
    """In-memory document with two external hyperlinks and one plain paragraph."""
    document = docx.Document()
    p1 = document.add_paragraph("See ")
    add_hyperlink(
        p1,
        "https://docs.example.com/view?docid=TSRC-ABC-123456",
        "Old Title (123456)",
        tooltip="Open report",
    )
    p2 = document.add_paragraph("Also ")
    add_hyperlink(
        p2,
        "https://docs.example.com/page",
        "Section",
        anchor="part2",
    )
    document.add_paragraph("No links here.")
    return document


@pytest.fixture
def make_client():
    """Factory for FakeLinkClient instances with custom answers."""
    return FakeLinkClient


@pytest.fixture
def add_link():
    """The add_hyperlink helper, for tests that build their own documents."""
    return add_hyperlink
