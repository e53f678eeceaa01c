"""Paragraph context extraction from document.xml."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from lxml import etree

from wordnumbering.docx_parser.styles import get_heading_level, is_toc_style, style_numbering
from wordnumbering.ir import ParagraphNumberingContext

logger = logging.getLogger(__name__)

# OOXML namespaces
NAMESPACES = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "w14": "http://schemas.microsoft.com/office/word/2010/wordml",
}

_W = f"{{{NAMESPACES['w']}}}"


class ParagraphIndex(Sequence[etree._Element]):
    """Body paragraphs in document order; the position is the paragraph ordinal.

    Built by one traversal and shared by the context extractor and the markup
    builder, so both sides key paragraphs by the same ordinal.
    """

    def __init__(self, paragraphs: List[etree._Element]) -> None:
        self._paragraphs = paragraphs
        # lxml keeps one proxy per node while a reference exists, so identity is stable
        self._ordinals: Dict[etree._Element, int] = {p: i for i, p in enumerate(paragraphs)}

    def __getitem__(self, index):
        return self._paragraphs[index]

    def __len__(self) -> int:
        return len(self._paragraphs)

    def ordinal_of(self, paragraph: etree._Element) -> Optional[int]:
        return self._ordinals.get(paragraph)


def find_body(document_root: etree._Element) -> Optional[etree._Element]:
    if document_root.tag == f"{_W}body":
        return document_root
    return document_root.find(".//w:body", NAMESPACES)


def _is_nested_paragraph(paragraph: etree._Element, body: etree._Element) -> bool:
    """True for paragraphs inside another paragraph (text boxes, shapes)."""
    parent = paragraph.getparent()
    while parent is not None and parent is not body:
        if parent.tag == f"{_W}p":
            return True
        parent = parent.getparent()
    return False


def index_paragraphs(document_root: etree._Element) -> ParagraphIndex:
    """Collect paragraph-like nodes of the body in document order.

    Includes paragraphs in table cells and content controls; excludes
    paragraphs nested in text boxes.
    """
    body = find_body(document_root)
    if body is None:
        return ParagraphIndex([])
    paragraphs = [p for p in body.iter(f"{_W}p") if not _is_nested_paragraph(p, body)]
    return ParagraphIndex(paragraphs)


def paragraph_text(paragraph: etree._Element) -> str:
    """Plain text of a paragraph (w:t runs, excluding nested text boxes)."""
    parts = []
    for node in paragraph.iter(f"{_W}t", f"{_W}tab"):
        owner = node.getparent()
        while owner is not None and owner.tag != f"{_W}p":
            owner = owner.getparent()
        if owner is not paragraph:
            continue
        if node.tag == f"{_W}tab":
            # w:tab inside w:pPr/w:tabs is a tab stop, not content
            if node.getparent() is not None and node.getparent().tag == f"{_W}r":
                parts.append("\t")
            continue
        parts.append(node.text or "")
    return "".join(parts).strip()


def _direct_numbering(pPr: Optional[etree._Element]) -> Tuple[Optional[str], Optional[int], bool]:
    """(numId, ilvl, present) from w:pPr/w:numPr."""
    if pPr is None:
        return None, None, False
    numPr = pPr.find("w:numPr", NAMESPACES)
    if numPr is None:
        return None, None, False

    num_id = None
    num_id_elem = numPr.find("w:numId", NAMESPACES)
    if num_id_elem is not None:
        num_id = num_id_elem.get(f"{_W}val")

    ilvl = None
    ilvl_elem = numPr.find("w:ilvl", NAMESPACES)
    if ilvl_elem is not None:
        try:
            ilvl = int(ilvl_elem.get(f"{_W}val", "0"))
        except ValueError:
            ilvl = None
    return num_id, ilvl, True


def extract_context(
    paragraph: etree._Element,
    ordinal: int,
    styles_map: Dict[str, Dict],
) -> ParagraphNumberingContext:
    """Build the numbering context of one paragraph.

    Direct numbering wins over style numbering; numId 0 removes numbering.
    """
    pPr = paragraph.find("w:pPr", NAMESPACES)
    style_id = None
    if pPr is not None:
        pStyle = pPr.find("w:pStyle", NAMESPACES)
        if pStyle is not None:
            style_id = pStyle.get(f"{_W}val")

    num_id, ilvl, direct = _direct_numbering(pPr)
    inherited = style_numbering(style_id, styles_map)
    source = "direct" if direct else None

    if direct and num_id is None and inherited is not None:
        # numPr carrying only ilvl re-levels the style's list
        num_id = inherited[0]
    elif not direct and inherited is not None:
        num_id, ilvl = inherited
        source = "style"

    if num_id is None or num_id == "0":
        num_id, ilvl, source = None, None, None
    elif ilvl is None:
        ilvl = inherited[1] if inherited is not None and inherited[0] == num_id else 0

    return ParagraphNumberingContext(
        ordinal=ordinal,
        num_id=num_id,
        level=ilvl,
        text=paragraph_text(paragraph),
        style_id=style_id,
        paragraph_id=paragraph.get(f"{{{NAMESPACES['w14']}}}paraId"),
        heading_level=get_heading_level(style_id, styles_map),
        is_toc=is_toc_style(style_id, styles_map),
        source=source,
    )


def extract_contexts(
    source: Union[etree._Element, ParagraphIndex],
    styles_map: Optional[Dict[str, Dict]] = None,
) -> List[ParagraphNumberingContext]:
    """One context per body paragraph, in document order (ordinal = index).

    Unnumbered paragraphs still get a context with no numbering reference.
    Pure read: the XML tree is not modified.
    """
    index = source if isinstance(source, ParagraphIndex) else index_paragraphs(source)
    styles_map = styles_map or {}
    contexts = [extract_context(p, ordinal, styles_map) for ordinal, p in enumerate(index)]
    logger.debug(f"Extracted {len(contexts)} paragraph contexts, {sum(c.is_numbered for c in contexts)} numbered")
    return contexts
