"""Styles parser - Parse styles.xml to build a style map."""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from lxml import etree

# OOXML namespaces
NAMESPACES = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
}

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def parse_styles(styles_root: Optional[etree._Element]) -> Dict[str, Dict]:
    """Parse styles.xml to build a style map.

    Args:
        styles_root: Parsed w:styles root element (None when the part is absent).

    Returns:
        Dict mapping style IDs to style information.
    """
    styles_map: Dict[str, Dict] = {}
    if styles_root is None:
        return styles_map

    for style in styles_root.findall(".//w:style", NAMESPACES):
        style_id = style.get(f"{{{NAMESPACES['w']}}}styleId")
        if not style_id:
            continue

        style_name_elem = style.find("w:name", NAMESPACES)
        based_on_elem = style.find("w:basedOn", NAMESPACES)

        style_info = {
            "name": style_name_elem.get(f"{{{NAMESPACES['w']}}}val") if style_name_elem is not None else style_id,
            "type": style.get(f"{{{NAMESPACES['w']}}}type"),
            "based_on": based_on_elem.get(f"{{{NAMESPACES['w']}}}val") if based_on_elem is not None else None,
        }

        pPr = style.find("w:pPr", NAMESPACES)
        if pPr is not None:
            outlineLvl = pPr.find("w:outlineLvl", NAMESPACES)
            if outlineLvl is not None:
                val = outlineLvl.get(f"{{{NAMESPACES['w']}}}val")
                if val and val.isdigit():
                    style_info["outline_level"] = int(val)

            numPr = pPr.find("w:numPr", NAMESPACES)
            if numPr is not None:
                num_id_elem = numPr.find("w:numId", NAMESPACES)
                ilvl_elem = numPr.find("w:ilvl", NAMESPACES)
                if num_id_elem is not None:
                    style_info["num_id"] = num_id_elem.get(f"{{{NAMESPACES['w']}}}val")
                if ilvl_elem is not None:
                    val = ilvl_elem.get(f"{{{NAMESPACES['w']}}}val")
                    if val and val.isdigit():
                        style_info["ilvl"] = int(val)

        styles_map[style_id] = style_info

    return styles_map


def style_numbering(style_id: Optional[str], styles_map: Dict[str, Dict]) -> Optional[Tuple[str, int]]:
    """Numbering (numId, ilvl) a paragraph inherits from its style.

    Follows the basedOn chain; the first style carrying a numId wins. An ilvl
    found further up the chain is used when the numbering style omits it.
    """
    num_id = None
    ilvl = None
    seen = set()
    while style_id and style_id not in seen:
        seen.add(style_id)
        style_info = styles_map.get(style_id)
        if style_info is None:
            break
        if num_id is None and style_info.get("num_id") is not None:
            num_id = style_info["num_id"]
        if ilvl is None and style_info.get("ilvl") is not None:
            ilvl = style_info["ilvl"]
        if num_id is not None and ilvl is not None:
            break
        style_id = style_info.get("based_on")

    if num_id is None:
        return None
    return num_id, ilvl if ilvl is not None else 0


def numbering_style_links(styles_map: Dict[str, Dict]) -> Dict[str, str]:
    """styleId -> numId for numbering (list) styles, used by w:numStyleLink."""
    return {
        style_id: info["num_id"]
        for style_id, info in styles_map.items()
        if info.get("type") == "numbering" and info.get("num_id")
    }


def get_heading_level(style_id: Optional[str], styles_map: Dict[str, Dict]) -> Optional[int]:
    """Determine heading level from style information.

    Args:
        style_id: The style ID to check.
        styles_map: The parsed styles map.

    Returns:
        Heading level (1-9) or None if not a heading.
    """
    if not style_id:
        return None

    style_info = styles_map.get(style_id, {})
    style_name = style_info.get("name", "")

    # Check for outline level (9 means body text)
    outline_level = style_info.get("outline_level")
    if outline_level is not None and outline_level < 9:
        return outline_level + 1

    name_lower = style_name.lower()
    if name_lower.startswith("heading"):
        match = _TRAILING_DIGITS.search(name_lower)
        return int(match.group(1)) if match else 1

    if name_lower == "title":
        return 1

    # Fallback: style_id pattern directly (when styles.xml is missing)
    style_id_lower = style_id.lower()
    if style_id_lower.startswith("heading"):
        match = _TRAILING_DIGITS.search(style_id_lower)
        return int(match.group(1)) if match else 1

    return None


def is_toc_style(style_id: Optional[str], styles_map: Dict[str, Dict]) -> bool:
    """TOC entry styles ("toc 1", "TOC1", ...)."""
    if not style_id:
        return False
    name = styles_map.get(style_id, {}).get("name", style_id)
    return bool(re.match(r"^toc\s*\d+$", name.lower()) or re.match(r"^toc\d+$", style_id.lower()))
