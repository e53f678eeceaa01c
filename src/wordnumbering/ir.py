"""Intermediate Representation (IR) for document numbering.

This module defines the canonical data structures used throughout the pipeline:
numbering.xml + document.xml → definitions + paragraph contexts → resolved numbering
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Literal, Mapping, Optional, Tuple, Union

# OOXML allows levels 0..8 (ilvl)
MAX_LEVELS = 9

_PLACEHOLDER = re.compile(r"%(\d)")


class NumberFormat(str, Enum):
    """Closed set of number formats understood by every component."""

    DECIMAL = "decimal"
    DECIMAL_ZERO = "decimalZero"
    LOWER_LETTER = "lowerLetter"
    UPPER_LETTER = "upperLetter"
    LOWER_ROMAN = "lowerRoman"
    UPPER_ROMAN = "upperRoman"
    BULLET = "bullet"
    NONE = "none"

    @classmethod
    def from_ooxml(cls, value: Optional[str]) -> "NumberFormat":
        """Map a w:numFmt value onto the closed set.

        Formats outside the set (ordinal, cardinalText, chicago, ...) render as
        decimal numbers.
        """
        if not value:
            return cls.DECIMAL
        try:
            return cls(value)
        except ValueError:
            return cls.DECIMAL

    @property
    def ordered(self) -> bool:
        return self not in (NumberFormat.BULLET, NumberFormat.NONE)


@dataclass(frozen=True)
class LevelTemplate:
    """Multi-level composition template parsed from w:lvlText.

    "%1.%2." becomes levels (0, 1) with literals ("", ".", "."): the literal in
    front of each placeholder, plus the trailing suffix.
    """

    pattern: str
    levels: Tuple[int, ...] = ()
    literals: Tuple[str, ...] = ("",)

    @classmethod
    def parse(cls, text: str) -> "LevelTemplate":
        levels = []
        literals = []
        cursor = 0
        for match in _PLACEHOLDER.finditer(text):
            literals.append(text[cursor:match.start()])
            levels.append(int(match.group(1)) - 1)
            cursor = match.end()
        literals.append(text[cursor:])
        return cls(pattern=text, levels=tuple(levels), literals=tuple(literals))

    @property
    def prefix(self) -> str:
        return self.literals[0]

    @property
    def suffix(self) -> str:
        return self.literals[-1] if self.levels else ""

    @property
    def separator(self) -> str:
        return self.literals[1] if len(self.levels) > 1 else ""

    def segments(self, current_level: int) -> Iterator[Union[str, int]]:
        """Yield literals and level indices for rendering at ``current_level``.

        References to levels deeper than ``current_level`` are dropped together
        with the literal that separates them from the previous reference.
        """
        if not self.levels:
            if self.pattern:
                yield self.pattern
            return

        if self.prefix:
            yield self.prefix
        emitted = 0
        for position, level in enumerate(self.levels):
            if level > current_level:
                continue
            if emitted and self.literals[position]:
                yield self.literals[position]
            yield level
            emitted += 1
        if self.suffix:
            yield self.suffix


@dataclass(frozen=True)
class Indentation:
    """Level indentation in points. Consumed by layout, not by resolution."""

    left: Optional[float] = None
    hanging: Optional[float] = None
    first_line: Optional[float] = None


@dataclass(frozen=True)
class RunProperties:
    """Run formatting applied to the number glyph."""

    bold: bool = False
    italic: bool = False
    font_family: Optional[str] = None
    font_size: Optional[float] = None  # in points
    color: Optional[str] = None  # "#RRGGBB"

    @property
    def is_empty(self) -> bool:
        return self == RunProperties()


@dataclass(frozen=True)
class LevelDefinition:
    """One level (0..8) of an abstract numbering definition."""

    index: int
    format: NumberFormat = NumberFormat.DECIMAL
    start: int = 1
    restart_after: Optional[int] = None  # w:lvlRestart, 1-based; 0 = never
    template: Optional[LevelTemplate] = None
    alignment: str = "left"
    suffix: Literal["tab", "space", "nothing"] = "tab"
    is_legal: bool = False
    tentative: bool = False
    indentation: Indentation = field(default_factory=Indentation)
    run_properties: RunProperties = field(default_factory=RunProperties)

    def restarts_after(self, level: int) -> bool:
        """Whether using ``level`` (shallower than this one) restarts this level."""
        if self.restart_after is None:
            return True
        if self.restart_after == 0:
            return False
        return level < self.restart_after


@dataclass(frozen=True)
class AbstractNumberingDefinition:
    """Reusable template describing up to nine levels of numbering."""

    abstract_id: str
    levels: Mapping[int, LevelDefinition] = field(default_factory=dict)
    multi_level_type: Optional[str] = None
    name: Optional[str] = None
    style_link: Optional[str] = None
    num_style_link: Optional[str] = None


@dataclass(frozen=True)
class LevelOverride:
    """Instance-specific replacement of one level."""

    index: int
    start_override: Optional[int] = None
    level: Optional[LevelDefinition] = None  # complete replacement


@dataclass(frozen=True)
class ConcreteNumberingInstance:
    """A w:num: a named usage of an abstract definition."""

    num_id: str
    abstract_id: str
    overrides: Mapping[int, LevelOverride] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedNumbering:
    """Numbering computed for one paragraph. Never mutated after creation."""

    num_id: str
    abstract_id: str
    level: int
    raw_number: int
    formatted: str  # token for this level only, e.g. "b"
    full_text: str  # composed string, e.g. "1.b."
    format: NumberFormat
    suffix: str = "tab"
    run_properties: RunProperties = field(default_factory=RunProperties)
    level_values: Tuple[int, ...] = ()  # actual value of levels 0..level at this position


@dataclass(frozen=True)
class ParagraphNumberingContext:
    """Numbering reference of one paragraph, in document order."""

    ordinal: int
    num_id: Optional[str] = None
    level: Optional[int] = None
    text: str = ""
    style_id: Optional[str] = None
    paragraph_id: Optional[str] = None  # w14:paraId
    heading_level: Optional[int] = None
    is_toc: bool = False
    source: Optional[Literal["direct", "style"]] = None
    resolved: Optional[ResolvedNumbering] = None

    def __post_init__(self):
        if self.num_id is not None and self.level is None:
            raise ValueError(f"paragraph {self.ordinal}: numbering id {self.num_id!r} without a level")

    @property
    def is_numbered(self) -> bool:
        return self.num_id is not None


@dataclass(frozen=True)
class TrackerSnapshot:
    """Counters of one sequence tracker at a given document position."""

    num_id: str
    abstract_id: str
    counters: Tuple[int, ...]
    levels: Mapping[int, LevelDefinition] = field(default_factory=dict)

    def value_of(self, level: int) -> int:
        """Actual number currently shown for ``level``."""
        level_def = self.levels.get(level)
        start = level_def.start if level_def is not None else 1
        return start + self.counters[level] - 1
