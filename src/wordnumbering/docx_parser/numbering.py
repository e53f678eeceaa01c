"""Numbering parser - Parse numbering.xml into numbering definitions."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Tuple

from lxml import etree

from wordnumbering.definitions import DefinitionStore
from wordnumbering.ir import (
    MAX_LEVELS,
    AbstractNumberingDefinition,
    ConcreteNumberingInstance,
    Indentation,
    LevelDefinition,
    LevelOverride,
    LevelTemplate,
    NumberFormat,
    RunProperties,
)

logger = logging.getLogger(__name__)

# OOXML namespaces
NAMESPACES = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
}

_SUFFIXES = ("tab", "space", "nothing")


def _attr(elem: Optional[etree._Element], name: str = "val") -> Optional[str]:
    if elem is None:
        return None
    return elem.get(f"{{{NAMESPACES['w']}}}{name}")


def _int_attr(elem: Optional[etree._Element], name: str = "val") -> Optional[int]:
    value = _attr(elem, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _on_off(elem: Optional[etree._Element]) -> bool:
    """Toggle properties (w:b, w:isLgl): present means on unless val says off."""
    if elem is None:
        return False
    return _attr(elem) not in ("0", "false", "off")


def _twips_to_points(value: Optional[int]) -> Optional[float]:
    return value / 20 if value is not None else None


def parse_numbering(numbering_root: etree._Element) -> Tuple[List[AbstractNumberingDefinition], List[ConcreteNumberingInstance]]:
    """Parse numbering.xml to build numbering definitions.

    Args:
        numbering_root: Parsed w:numbering root element.

    Returns:
        (abstract definitions, concrete instances). Validation happens in
        DefinitionStore.load.
    """
    abstracts: List[AbstractNumberingDefinition] = []
    for abstract in numbering_root.findall(".//w:abstractNum", NAMESPACES):
        abstract_id = _attr(abstract, "abstractNumId")
        if not abstract_id:
            continue

        levels: Dict[int, LevelDefinition] = {}
        for lvl in abstract.findall("w:lvl", NAMESPACES):
            level = parse_level(lvl)
            if level is None:
                continue
            levels[level.index] = level

        abstracts.append(AbstractNumberingDefinition(
            abstract_id=abstract_id,
            levels=levels,
            multi_level_type=_attr(abstract.find("w:multiLevelType", NAMESPACES)),
            name=_attr(abstract.find("w:name", NAMESPACES)),
            style_link=_attr(abstract.find("w:styleLink", NAMESPACES)),
            num_style_link=_attr(abstract.find("w:numStyleLink", NAMESPACES)),
        ))

    instances: List[ConcreteNumberingInstance] = []
    for num in numbering_root.findall(".//w:num", NAMESPACES):
        num_id = _attr(num, "numId")
        abstract_id = _attr(num.find("w:abstractNumId", NAMESPACES))
        if not num_id or abstract_id is None:
            continue

        overrides: Dict[int, LevelOverride] = {}
        for override in num.findall("w:lvlOverride", NAMESPACES):
            index = _int_attr(override, "ilvl")
            if index is None:
                continue
            level_elem = override.find("w:lvl", NAMESPACES)
            level = parse_level(level_elem, default_index=index) if level_elem is not None else None
            if level is not None and level.index != index:
                logger.warning(
                    f"numbering instance {num_id}: override of level {index} wraps w:lvl ilvl={level.index}; "
                    f"using level {index}"
                )
                level = replace(level, index=index)
            overrides[index] = LevelOverride(
                index=index,
                start_override=_int_attr(override.find("w:startOverride", NAMESPACES)),
                level=level,
            )

        instances.append(ConcreteNumberingInstance(num_id=num_id, abstract_id=abstract_id, overrides=overrides))

    return abstracts, instances


def parse_level(lvl: etree._Element, default_index: Optional[int] = None) -> Optional[LevelDefinition]:
    """Parse one w:lvl element. Returns None for levels outside 0..8."""
    index = _int_attr(lvl, "ilvl")
    if index is None:
        index = default_index
    if index is None or not 0 <= index < MAX_LEVELS:
        logger.warning(f"Skipping numbering level with ilvl={_attr(lvl, 'ilvl')!r}")
        return None

    lvl_text = lvl.find("w:lvlText", NAMESPACES)
    template = LevelTemplate.parse(_attr(lvl_text) or "") if lvl_text is not None else None

    suffix = _attr(lvl.find("w:suff", NAMESPACES)) or "tab"
    if suffix not in _SUFFIXES:
        suffix = "tab"

    start = _int_attr(lvl.find("w:start", NAMESPACES))

    return LevelDefinition(
        index=index,
        format=NumberFormat.from_ooxml(_attr(lvl.find("w:numFmt", NAMESPACES))),
        start=start if start is not None else 1,
        restart_after=_int_attr(lvl.find("w:lvlRestart", NAMESPACES)),
        template=template,
        alignment=_attr(lvl.find("w:lvlJc", NAMESPACES)) or "left",
        suffix=suffix,
        is_legal=_on_off(lvl.find("w:isLgl", NAMESPACES)),
        tentative=_attr(lvl, "tentative") in ("1", "true", "on"),
        indentation=_parse_indentation(lvl.find("w:pPr/w:ind", NAMESPACES)),
        run_properties=_parse_run_properties(lvl.find("w:rPr", NAMESPACES)),
    )


def _parse_indentation(ind: Optional[etree._Element]) -> Indentation:
    if ind is None:
        return Indentation()
    left = _int_attr(ind, "left")
    if left is None:
        left = _int_attr(ind, "start")
    return Indentation(
        left=_twips_to_points(left),
        hanging=_twips_to_points(_int_attr(ind, "hanging")),
        first_line=_twips_to_points(_int_attr(ind, "firstLine")),
    )


def _parse_run_properties(rpr: Optional[etree._Element]) -> RunProperties:
    if rpr is None:
        return RunProperties()

    font_family = None
    r_fonts = rpr.find("w:rFonts", NAMESPACES)
    if r_fonts is not None:
        # Prioritize ascii, then hAnsi
        font_family = _attr(r_fonts, "ascii") or _attr(r_fonts, "hAnsi")

    font_size = None
    size = _int_attr(rpr.find("w:sz", NAMESPACES))
    if size is not None:
        font_size = size / 2.0  # half-points

    color = _attr(rpr.find("w:color", NAMESPACES))
    if color and color.lower() != "auto":
        color = f"#{color}"
    else:
        color = None

    return RunProperties(
        bold=_on_off(rpr.find("w:b", NAMESPACES)),
        italic=_on_off(rpr.find("w:i", NAMESPACES)),
        font_family=font_family,
        font_size=font_size,
        color=color,
    )


def load_definitions(
    numbering_root: Optional[etree._Element],
    style_numbering: Optional[Mapping[str, str]] = None,
) -> DefinitionStore:
    """Parse numbering.xml and load a validated DefinitionStore.

    A document without numbering.xml yields an empty store.
    """
    if numbering_root is None:
        return DefinitionStore.empty()
    abstracts, instances = parse_numbering(numbering_root)
    return DefinitionStore.load(abstracts, instances, style_numbering=style_numbering)
