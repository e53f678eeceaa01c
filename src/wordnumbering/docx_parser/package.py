"""DOCX package access - read the XML parts the numbering engine needs."""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from lxml import etree

from wordnumbering.errors import DocumentPackageError

DOCUMENT_PART = "word/document.xml"
NUMBERING_PART = "word/numbering.xml"
STYLES_PART = "word/styles.xml"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True, remove_blank_text=False)


@dataclass
class DocxParts:
    """Parsed XML roots of one document."""

    document: etree._Element
    numbering: Optional[etree._Element] = None
    styles: Optional[etree._Element] = None


def parse_part(data: bytes) -> etree._Element:
    """Parse an XML part without resolving external entities."""
    return etree.fromstring(data, _PARSER)


def load_parts(source: Union[str, Path, bytes]) -> DocxParts:
    """Open a .docx (path or raw bytes) and parse document, numbering and styles.

    Raises:
        DocumentPackageError: not a zip archive, word/document.xml missing, or
            a part is not well-formed XML.
    """
    if isinstance(source, (bytes, bytearray)):
        handle = io.BytesIO(source)
        label = "<bytes>"
    else:
        handle = Path(source)
        label = handle.name

    try:
        with zipfile.ZipFile(handle, "r") as zf:
            names = set(zf.namelist())
            if DOCUMENT_PART not in names:
                raise DocumentPackageError(f"{label}: {DOCUMENT_PART} not found")
            document = parse_part(zf.read(DOCUMENT_PART))
            numbering = parse_part(zf.read(NUMBERING_PART)) if NUMBERING_PART in names else None
            styles = parse_part(zf.read(STYLES_PART)) if STYLES_PART in names else None
    except zipfile.BadZipFile as exc:
        raise DocumentPackageError(f"{label}: not a DOCX archive ({exc})") from exc
    except etree.XMLSyntaxError as exc:
        raise DocumentPackageError(f"{label}: malformed XML ({exc})") from exc

    return DocxParts(document=document, numbering=numbering, styles=styles)
