"""Attribute and CSS counter emitter.

Turns resolved numbering into the four ``data-*`` attributes carried by every
numbered element, plus a stylesheet whose counters reproduce the same numbers:

    [data-abstract-num="A"][data-num-level="L"]          counter-increment / counter-set
    [data-abstract-num="A"][data-num-level="L"]::before  content: counter(...)
    [data-abstract-num][data-num-level][data-paragraph-index="k"]  counter-set corrections

Counter keywords and ``::before`` content are derived from the same level
definitions and template segments the text renderer uses.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from wordnumbering.config import NumberingSettings, settings as default_settings
from wordnumbering.definitions import DefinitionStore
from wordnumbering.errors import UnresolvedNumberingReference
from wordnumbering.formatting import composed_format
from wordnumbering.ir import (
    MAX_LEVELS,
    LevelDefinition,
    NumberFormat,
    ParagraphNumberingContext,
    RunProperties,
)

logger = logging.getLogger(__name__)

ATTR_NUM_ID = "data-num-id"
ATTR_ABSTRACT = "data-abstract-num"
ATTR_LEVEL = "data-num-level"
ATTR_FORMAT = "data-format"
ATTR_PARAGRAPH = "data-paragraph-index"

NUMBER_CLASS = "docx-num"

_CSS_KEYWORDS: Dict[NumberFormat, str] = {
    NumberFormat.DECIMAL: "decimal",
    NumberFormat.DECIMAL_ZERO: "decimal-leading-zero",
    NumberFormat.LOWER_LETTER: "lower-alpha",
    NumberFormat.UPPER_LETTER: "upper-alpha",
    NumberFormat.LOWER_ROMAN: "lower-roman",
    NumberFormat.UPPER_ROMAN: "upper-roman",
    NumberFormat.BULLET: "disc",
    NumberFormat.NONE: "none",
}

_ALIGNMENTS = {"left": "left", "start": "left", "right": "right", "end": "right", "center": "center"}
_IDENT_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def css_keyword(fmt: NumberFormat) -> str:
    """CSS counter-style keyword for a number format."""
    return _CSS_KEYWORDS[fmt]


def emit_attributes(ctx: ParagraphNumberingContext) -> Dict[str, str]:
    """Attributes for one paragraph: all four, or none when it is unnumbered."""
    resolved = ctx.resolved
    if resolved is None:
        return {}
    return {
        ATTR_NUM_ID: resolved.num_id,
        ATTR_ABSTRACT: resolved.abstract_id,
        ATTR_LEVEL: str(resolved.level),
        ATTR_FORMAT: resolved.format.value,
    }


def counter_name(prefix: str, abstract_id: str, level: int) -> str:
    return f"{prefix}-{_IDENT_UNSAFE.sub('_', abstract_id)}-{level}"


def _css_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\A ")
    return f'"{escaped}"'


def _attr_selector(name: str, value: str) -> str:
    return f'[{name}={_css_string(value)}]'


def _number(value: float) -> str:
    return f"{value:g}"


@dataclass(frozen=True)
class CounterRule:
    """CSS for one (abstract, level) pair, or for one instance of it.

    Instance rules (``num_id`` set) only restyle the generated content; the
    counter bookkeeping always lives on the abstract-wide rule.

    Deeper levels restart through ``counter-set``. Only ``body`` resets
    counters, so a paragraph inside a table cell never opens a counter scope
    that ends with the cell.
    """

    abstract_id: str
    level: int
    keyword: str
    content: str
    num_id: Optional[str] = None
    increment: Optional[str] = None
    restarts: Tuple[Tuple[str, int], ...] = ()
    declarations: Tuple[Tuple[str, str], ...] = ()
    glyph_declarations: Tuple[Tuple[str, str], ...] = ()

    @property
    def selector(self) -> str:
        selector = _attr_selector(ATTR_ABSTRACT, self.abstract_id) + _attr_selector(ATTR_LEVEL, str(self.level))
        if self.num_id is not None:
            selector = _attr_selector(ATTR_NUM_ID, self.num_id) + selector
        return selector

    def to_css(self, include_content: bool = True) -> str:
        blocks = []
        body = list(self.declarations)
        if self.restarts:
            body.insert(0, ("counter-set", _counter_list(self.restarts)))
        if self.increment:
            body.insert(0, ("counter-increment", f"{self.increment} 1"))
        if body:
            blocks.append(_block(self.selector, body))

        if include_content:
            blocks.append(_block(f"{self.selector}::before", [("content", self.content)] + list(self.glyph_declarations)))
        elif self.glyph_declarations:
            blocks.append(_block(f"{self.selector} > .{NUMBER_CLASS}", list(self.glyph_declarations)))
        return "\n".join(blocks)


def _counter_list(values: Iterable[Tuple[str, int]]) -> str:
    return " ".join(f"{name} {value}" for name, value in values)


def _block(selector: str, declarations: Sequence[Tuple[str, str]]) -> str:
    lines = [f"{selector} {{"]
    lines.extend(f"  {prop}: {value};" for prop, value in declarations)
    lines.append("}")
    return "\n".join(lines)


def level_content(
    level_def: LevelDefinition,
    levels: Mapping[int, LevelDefinition],
    abstract_id: str,
    prefix: str,
) -> str:
    """``content`` value reproducing the renderer's text for one level."""
    own = counter_name(prefix, abstract_id, level_def.index)
    keyword = css_keyword(level_def.format)

    if level_def.format is NumberFormat.BULLET:
        return f"counter({own}, {keyword})"
    if level_def.template is None:
        if level_def.format is NumberFormat.NONE:
            return f"counter({own}, none)"
        return f'counter({own}, {keyword}) "."'

    parts = []
    for segment in level_def.template.segments(level_def.index):
        if isinstance(segment, str):
            parts.append(_css_string(segment))
        elif segment == level_def.index:
            parts.append(f"counter({own}, {keyword})")
        else:
            reference = levels.get(segment)
            parts.append(
                f"counter({counter_name(prefix, abstract_id, segment)}, "
                f"{css_keyword(composed_format(reference, level_def))})"
            )
    return " ".join(parts) if parts else '""'


def _layout_declarations(level_def: LevelDefinition) -> Tuple[Tuple[str, str], ...]:
    indentation = level_def.indentation
    declarations = []
    if indentation.left is not None:
        declarations.append(("margin-left", f"{_number(indentation.left)}pt"))
    if indentation.hanging is not None:
        declarations.append(("text-indent", f"-{_number(indentation.hanging)}pt"))
    elif indentation.first_line is not None:
        declarations.append(("text-indent", f"{_number(indentation.first_line)}pt"))
    return tuple(declarations)


def _glyph_declarations(level_def: LevelDefinition) -> Tuple[Tuple[str, str], ...]:
    declarations = []
    hanging = level_def.indentation.hanging
    if level_def.suffix == "tab":
        declarations.append(("display", "inline-block"))
        if hanging:
            declarations.append(("min-width", f"{_number(hanging)}pt"))
        else:
            declarations.append(("padding-right", "0.5em"))
        declarations.append(("text-align", _ALIGNMENTS.get(level_def.alignment, "left")))
    elif level_def.suffix == "space":
        declarations.append(("padding-right", "0.25em"))
    declarations.extend(_run_declarations(level_def.run_properties))
    return tuple(declarations)


def _run_declarations(run: RunProperties) -> List[Tuple[str, str]]:
    declarations = []
    if run.bold:
        declarations.append(("font-weight", "bold"))
    if run.italic:
        declarations.append(("font-style", "italic"))
    if run.font_family:
        declarations.append(("font-family", _css_string(run.font_family)))
    if run.font_size:
        declarations.append(("font-size", f"{_number(run.font_size)}pt"))
    if run.color:
        declarations.append(("color", run.color))
    return declarations


def _used_pairs(
    contexts: Sequence[ParagraphNumberingContext],
) -> Tuple[Dict[Tuple[str, int], List[str]], Dict[str, List[int]]]:
    """(abstract, level) -> instance ids in first-use order, and levels used per abstract."""
    pairs: Dict[Tuple[str, int], List[str]] = {}
    levels_used: Dict[str, List[int]] = {}
    for ctx in sorted(contexts, key=lambda c: c.ordinal):
        resolved = ctx.resolved
        if resolved is None:
            continue
        num_ids = pairs.setdefault((resolved.abstract_id, resolved.level), [])
        if resolved.num_id not in num_ids:
            num_ids.append(resolved.num_id)
        used = levels_used.setdefault(resolved.abstract_id, [])
        if resolved.level not in used:
            used.append(resolved.level)
    return pairs, levels_used


def _abstract_levels(store: DefinitionStore, abstract_id: str, num_ids: Sequence[str]) -> Dict[int, LevelDefinition]:
    """Abstract levels, completed by the first instance for levels only overrides define."""
    levels = dict(store.abstract(abstract_id).levels)
    for num_id in num_ids:
        for index, level_def in store.levels_for(num_id).items():
            levels.setdefault(index, level_def)
    return levels


def build_counter_rules(
    store: DefinitionStore,
    contexts: Sequence[ParagraphNumberingContext],
    settings: Optional[NumberingSettings] = None,
) -> List[CounterRule]:
    """One rule per used (abstract, level) pair, plus per-instance content rules.

    The abstract-wide rule increments the level's counter and sets deeper
    counters to ``start - 1`` wherever the level definition restarts them. An
    instance whose override changes what the level shows gets a more specific
    rule with its own content. Pairs without a level definition are skipped.
    """
    settings = settings or default_settings
    prefix = settings.counter_prefix
    pairs, _ = _used_pairs(contexts)

    instances_by_abstract: Dict[str, List[str]] = {}
    for (abstract_id, _level), num_ids in pairs.items():
        bucket = instances_by_abstract.setdefault(abstract_id, [])
        bucket.extend(n for n in num_ids if n not in bucket)

    rules: List[CounterRule] = []
    instance_rules: List[CounterRule] = []
    for (abstract_id, level), num_ids in pairs.items():
        levels = _abstract_levels(store, abstract_id, instances_by_abstract[abstract_id])
        level_def = levels.get(level)
        if level_def is None:
            logger.warning(f"No definition for level {level} of abstract {abstract_id}; no counter rule emitted")
            continue

        restarts = []
        for deeper in range(level + 1, MAX_LEVELS):
            deeper_def = levels.get(deeper)
            if deeper_def is None:
                continue
            if deeper_def.restarts_after(level):
                restarts.append((counter_name(prefix, abstract_id, deeper), deeper_def.start - 1))

        base = CounterRule(
            abstract_id=abstract_id,
            level=level,
            keyword=css_keyword(level_def.format),
            content=level_content(level_def, levels, abstract_id, prefix),
            increment=counter_name(prefix, abstract_id, level),
            restarts=tuple(restarts),
            declarations=_layout_declarations(level_def) if settings.level_layout else (),
            glyph_declarations=_glyph_declarations(level_def) if settings.level_layout else (),
        )
        rules.append(base)

        for num_id in num_ids:
            instance_levels = store.levels_for(num_id)
            instance_def = instance_levels.get(level)
            if instance_def is None:
                continue
            content = level_content(instance_def, instance_levels, abstract_id, prefix)
            declarations = _layout_declarations(instance_def) if settings.level_layout else ()
            glyph = _glyph_declarations(instance_def) if settings.level_layout else ()
            keyword = css_keyword(instance_def.format)
            if (content, keyword, declarations, glyph) == (base.content, base.keyword, base.declarations, base.glyph_declarations):
                continue
            logger.debug(f"Numbering instance {num_id} overrides level {level} of abstract {abstract_id}")
            instance_rules.append(CounterRule(
                abstract_id=abstract_id,
                level=level,
                keyword=keyword,
                content=content,
                num_id=num_id,
                declarations=declarations,
                glyph_declarations=glyph,
            ))

    return rules + instance_rules


def _initial_values(
    store: DefinitionStore,
    contexts: Sequence[ParagraphNumberingContext],
    prefix: str,
) -> Dict[str, int]:
    """Body-level counter-reset: every counter of every used abstract at ``start - 1``."""
    pairs, levels_used = _used_pairs(contexts)
    values: Dict[str, int] = {}
    for abstract_id in levels_used:
        num_ids = [n for (a, _l), ids in pairs.items() if a == abstract_id for n in ids]
        levels = _abstract_levels(store, abstract_id, num_ids)
        for index in range(MAX_LEVELS):
            level_def = levels.get(index)
            values[counter_name(prefix, abstract_id, index)] = (level_def.start if level_def is not None else 1) - 1
    return values


def counter_corrections(
    store: DefinitionStore,
    contexts: Sequence[ParagraphNumberingContext],
    settings: Optional[NumberingSettings] = None,
) -> Dict[int, Dict[str, int]]:
    """Per-paragraph ``counter-set`` values that make CSS agree with the resolver.

    Walks numbered paragraphs in document order, applying the rules' restarts,
    then any correction, then the increment, the way browsers do. Only the
    body resets counters, so a single scope per counter is exact. Wherever
    the counter the element shows (its own level or an ancestor its content
    references) would differ from the resolved value, the counter is set.

    Returns:
        ordinal -> {counter name: value set before the increment}.
    """
    settings = settings or default_settings
    prefix = settings.counter_prefix
    rules = {
        (rule.abstract_id, rule.level): rule
        for rule in build_counter_rules(store, contexts, settings)
        if rule.num_id is None
    }
    values = _initial_values(store, contexts, prefix)
    corrections: Dict[int, Dict[str, int]] = {}

    for ctx in sorted(contexts, key=lambda c: c.ordinal):
        resolved = ctx.resolved
        if resolved is None:
            continue
        rule = rules.get((resolved.abstract_id, resolved.level))
        if rule is None:
            continue
        for name, value in rule.restarts:
            values[name] = value

        try:
            level_def = store.level_for(resolved.num_id, resolved.level)
        except UnresolvedNumberingReference:
            continue
        referenced = set()
        if level_def.template is not None:
            referenced = {s for s in level_def.template.segments(resolved.level) if isinstance(s, int)}

        fixes: Dict[str, int] = {}
        for ancestor in sorted(referenced):
            if ancestor >= resolved.level or ancestor >= len(resolved.level_values):
                continue
            name = counter_name(prefix, resolved.abstract_id, ancestor)
            expected = resolved.level_values[ancestor]
            if values.get(name) != expected:
                fixes[name] = expected

        own = counter_name(prefix, resolved.abstract_id, resolved.level)
        if values.get(own, 0) + 1 != resolved.raw_number:
            fixes[own] = resolved.raw_number - 1

        values.update(fixes)
        values[own] = values.get(own, 0) + 1
        if fixes:
            corrections[ctx.ordinal] = fixes

    if corrections:
        logger.debug(f"Emitted counter-set corrections for {len(corrections)} paragraphs")
    return corrections


def emit_counter_css(
    store: DefinitionStore,
    contexts: Sequence[ParagraphNumberingContext],
    settings: Optional[NumberingSettings] = None,
    include_content: bool = True,
) -> str:
    """Complete counter stylesheet for a resolved document.

    With ``include_content`` off (text mode) counters are still maintained but
    no ``::before`` content is generated; the number glyph styling targets the
    inserted ``.docx-num`` span instead.

    A correction block replaces the level rule's ``counter-set`` for its
    paragraph, so it repeats the rule's restarts and outranks the rule's
    selector.
    """
    settings = settings or default_settings
    initial = _initial_values(store, contexts, settings.counter_prefix)
    if not initial:
        return ""

    rules = build_counter_rules(store, contexts, settings)
    restarts = {(rule.abstract_id, rule.level): rule.restarts for rule in rules if rule.num_id is None}
    resolved_by_ordinal = {ctx.ordinal: ctx.resolved for ctx in contexts if ctx.resolved is not None}

    chunks = ["/* DOCX numbering counters */"]
    chunks.append(_block("body", [("counter-reset", _counter_list(initial.items()))]))
    chunks.append(_block(f"[{ATTR_ABSTRACT}][{ATTR_LEVEL}]", [("box-sizing", "border-box")]))

    for rule in rules:
        chunks.append(rule.to_css(include_content=include_content))

    for ordinal, fixes in counter_corrections(store, contexts, settings).items():
        resolved = resolved_by_ordinal[ordinal]
        values = dict(restarts.get((resolved.abstract_id, resolved.level), ()))
        values.update(fixes)
        chunks.append(_block(
            f"[{ATTR_ABSTRACT}][{ATTR_LEVEL}]" + _attr_selector(ATTR_PARAGRAPH, str(ordinal)),
            [("counter-set", _counter_list(values.items()))],
        ))

    return "\n".join(chunks) + "\n"
