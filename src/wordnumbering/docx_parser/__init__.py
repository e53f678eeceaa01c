"""DOCX Parser Package - OOXML extraction modules."""

from .package import DocxParts, load_parts
from .styles import parse_styles, get_heading_level, style_numbering, numbering_style_links
from .numbering import parse_numbering, parse_level, load_definitions
from .document import ParagraphIndex, index_paragraphs, extract_contexts

__all__ = [
    "DocxParts",
    "load_parts",
    "parse_styles",
    "get_heading_level",
    "style_numbering",
    "numbering_style_links",
    "parse_numbering",
    "parse_level",
    "load_definitions",
    "ParagraphIndex",
    "index_paragraphs",
    "extract_contexts",
]
