"""HTML builder - minimal markup for document.xml, one element per paragraph.

The builder walks the body in document order and creates exactly one element
for each paragraph of the shared :class:`ParagraphIndex`, recording it under
the paragraph's ordinal. Numbering is attached afterwards by ordinal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from lxml import etree

from wordnumbering.docx_parser.document import NAMESPACES, ParagraphIndex, find_body, paragraph_text
from wordnumbering.docx_parser.styles import get_heading_level, is_toc_style
from wordnumbering.emitter import ATTR_PARAGRAPH

logger = logging.getLogger(__name__)

_W = f"{{{NAMESPACES['w']}}}"

STYLE_ID = "docx-numbering"


@dataclass
class HtmlDocument:
    root: etree._Element
    elements: Dict[int, etree._Element] = field(default_factory=dict)

    @property
    def body(self) -> etree._Element:
        return self.root.find("body")

    def to_string(self, css: str = "") -> str:
        """Serialize as HTML, embedding ``css`` in a <style> element when given."""
        head = self.root.find("head")
        style = head.find(f"style[@id='{STYLE_ID}']")
        if css:
            if style is None:
                style = etree.SubElement(head, "style", id=STYLE_ID)
            style.text = "\n" + css
        elif style is not None:
            head.remove(style)
        return etree.tostring(
            self.root.getroottree(),
            method="html",
            encoding="unicode",
            pretty_print=True,
            doctype="<!DOCTYPE html>",
        )


class _Builder:
    def __init__(self, index: ParagraphIndex, styles_map: Dict[str, Dict]) -> None:
        self.index = index
        self.styles_map = styles_map
        self.elements: Dict[int, etree._Element] = {}

    def container(self, source: etree._Element, target: etree._Element) -> None:
        for child in source:
            if child.tag == f"{_W}p":
                self.paragraph(child, target)
            elif child.tag == f"{_W}tbl":
                self.table(child, target)
            elif child.tag in (f"{_W}sectPr", f"{_W}tblPr", f"{_W}tblGrid"):
                continue
            else:
                # content controls, custom XML, tracked insertions
                self.container(child, target)

    def paragraph(self, paragraph: etree._Element, target: etree._Element) -> None:
        ordinal = self.index.ordinal_of(paragraph)
        if ordinal is None:
            return

        style_id = _paragraph_style(paragraph)
        heading_level = get_heading_level(style_id, self.styles_map)
        if heading_level is not None:
            element = etree.SubElement(target, f"h{min(heading_level, 6)}")
        else:
            element = etree.SubElement(target, "p")
            if is_toc_style(style_id, self.styles_map):
                element.set("class", "docx-toc")

        element.set(ATTR_PARAGRAPH, str(ordinal))
        para_id = paragraph.get(f"{{{NAMESPACES['w14']}}}paraId")
        if para_id:
            element.set("id", f"para-{para_id}")
        element.text = paragraph_text(paragraph) or None
        self.elements[ordinal] = element

    def table(self, table: etree._Element, target: etree._Element) -> None:
        html_table = etree.SubElement(target, "table", {"class": "docx-table"})
        for row in table.findall("w:tr", NAMESPACES):
            html_row = etree.SubElement(html_table, "tr")
            for cell in row.findall("w:tc", NAMESPACES):
                self.container(cell, etree.SubElement(html_row, "td"))


def _paragraph_style(paragraph: etree._Element) -> Optional[str]:
    pStyle = paragraph.find("w:pPr/w:pStyle", NAMESPACES)
    return pStyle.get(f"{_W}val") if pStyle is not None else None


def build_html(
    index: ParagraphIndex,
    styles_map: Optional[Dict[str, Dict]] = None,
    title: str = "Document",
    body: Optional[etree._Element] = None,
) -> HtmlDocument:
    """Build the HTML skeleton for the indexed paragraphs.

    Args:
        index: Shared paragraph index of the document body.
        styles_map: Parsed styles (heading and TOC detection).
        title: Content of <title>.
        body: The w:body element; defaults to the body owning the indexed
            paragraphs.

    Returns:
        HtmlDocument with ``elements`` mapping each paragraph ordinal to its
        element.
    """
    root = etree.Element("html")
    head = etree.SubElement(root, "head")
    etree.SubElement(head, "meta", charset="utf-8")
    etree.SubElement(head, "title").text = title
    html_body = etree.SubElement(root, "body")

    builder = _Builder(index, styles_map or {})
    if body is None and len(index):
        body = find_body(index[0].getroottree().getroot())
    if body is not None:
        builder.container(body, html_body)

    missing = len(index) - len(builder.elements)
    if missing:
        logger.warning(f"{missing} paragraph(s) have no HTML element")
    return HtmlDocument(root=root, elements=builder.elements)
