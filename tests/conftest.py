"""Shared fixtures: a small outline document with two-level numbering."""

import pytest

from docx_builders import (
    abstract_num,
    document_xml,
    lvl,
    make_docx,
    num,
    numbering_xml,
    paragraph,
    style,
    styles_xml,
)

OUTLINE_NUMBERING = numbering_xml(
    abstract_num("0", lvl(0, "decimal", "%1."), lvl(1, "lowerLetter", "%1.%2.")),
    num("1", "0"),
)

OUTLINE_DOCUMENT = document_xml(
    paragraph("Terms of Service", style="Heading1"),
    paragraph("Scope", num_id="1", ilvl=0),
    paragraph("Definitions", num_id="1", ilvl=1),
    paragraph("Exclusions", num_id="1", ilvl=1),
    paragraph("Plain text between items"),
    paragraph("Liability", num_id="1", ilvl=0),
)

OUTLINE_STYLES = styles_xml(
    style("Normal", "Normal"),
    style("Heading1", "heading 1", based_on="Normal", outline_level=0),
)


@pytest.fixture
def outline_docx_bytes() -> bytes:
    return make_docx(OUTLINE_DOCUMENT, OUTLINE_NUMBERING, OUTLINE_STYLES)


@pytest.fixture
def outline_docx(tmp_path, outline_docx_bytes):
    path = tmp_path / "outline.docx"
    path.write_bytes(outline_docx_bytes)
    return path
