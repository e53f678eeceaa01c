"""Format renderer - turn resolved counters into numbering text."""

from __future__ import annotations

import logging
from typing import List, Optional

from wordnumbering.errors import Diagnostic, FormatRangeViolation
from wordnumbering.ir import LevelDefinition, NumberFormat, ResolvedNumbering, TrackerSnapshot

logger = logging.getLogger(__name__)

BULLET_GLYPH = "•"

_ROMAN_VALUES = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)
_ROMAN_DIGITS = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}


def to_roman(number: int) -> str:
    """Convert 1..3999 to an upper-case Roman numeral.

    Raises:
        FormatRangeViolation: for values outside 1..3999.
    """
    if not 1 <= number <= 3999:
        raise FormatRangeViolation(f"{number} cannot be written as a Roman numeral (1..3999)")
    result = []
    for value, numeral in _ROMAN_VALUES:
        count, number = divmod(number, value)
        result.append(numeral * count)
    return "".join(result)


def from_roman(numeral: str) -> int:
    """Convert a Roman numeral (any case) back to an integer."""
    total = 0
    previous = 0
    for char in reversed(numeral.upper()):
        try:
            value = _ROMAN_DIGITS[char]
        except KeyError:
            raise ValueError(f"invalid Roman numeral: {numeral!r}") from None
        if value < previous:
            total -= value
        else:
            total += value
            previous = value
    return total


def format_letter(number: int, upper: bool = False) -> str:
    """1 -> a, 26 -> z, 27 -> a. Single character only."""
    if number < 1:
        raise FormatRangeViolation(f"{number} cannot be written as a letter")
    base = ord("A") if upper else ord("a")
    return chr(base + (number - 1) % 26)


def format_number(number: int, fmt: NumberFormat) -> str:
    """Format a single value. Raises FormatRangeViolation for out-of-range values."""
    if fmt is NumberFormat.DECIMAL:
        return str(number)
    if fmt is NumberFormat.DECIMAL_ZERO:
        # two digits only; 100+ is left as-is
        return f"{number:02d}"
    if fmt is NumberFormat.LOWER_LETTER:
        return format_letter(number)
    if fmt is NumberFormat.UPPER_LETTER:
        return format_letter(number, upper=True)
    if fmt is NumberFormat.LOWER_ROMAN:
        return to_roman(number).lower()
    if fmt is NumberFormat.UPPER_ROMAN:
        return to_roman(number)
    if fmt is NumberFormat.BULLET:
        return BULLET_GLYPH
    if fmt is NumberFormat.NONE:
        return ""
    raise AssertionError(f"unhandled number format {fmt!r}")


def composed_format(reference: Optional[LevelDefinition], current: LevelDefinition) -> NumberFormat:
    """Format used for ``reference`` inside the composed string of ``current``.

    Legal numbering (w:isLgl) shows ancestor levels as decimal numbers.
    """
    if reference is None:
        return NumberFormat.DECIMAL
    if current.is_legal and reference.index < current.index:
        return NumberFormat.DECIMAL
    return reference.format


def render(
    actual_number: int,
    level_def: LevelDefinition,
    snapshot: TrackerSnapshot,
    diagnostics: Optional[List[Diagnostic]] = None,
    ordinal: Optional[int] = None,
) -> ResolvedNumbering:
    """Render the numbering of one paragraph.

    Ancestor levels referenced by the level's template are read from the
    snapshot, never recomputed. Out-of-range values fall back to the plain
    integer and are recorded in ``diagnostics``.
    """

    def safe_format(number: int, fmt: NumberFormat) -> str:
        try:
            return format_number(number, fmt)
        except FormatRangeViolation as exc:
            logger.warning(f"Paragraph {ordinal}: {exc}; using {number}")
            if diagnostics is not None:
                diagnostics.append(Diagnostic.from_error(exc, ordinal=ordinal))
            return str(number)

    formatted = safe_format(actual_number, level_def.format)

    if level_def.format is NumberFormat.BULLET:
        full_text = formatted
    elif level_def.template is None:
        full_text = f"{formatted}." if formatted else ""
    else:
        parts = []
        for segment in level_def.template.segments(level_def.index):
            if isinstance(segment, str):
                parts.append(segment)
            elif segment == level_def.index:
                parts.append(formatted)
            else:
                reference = snapshot.levels.get(segment)
                parts.append(safe_format(snapshot.value_of(segment), composed_format(reference, level_def)))
        full_text = "".join(parts)

    return ResolvedNumbering(
        num_id=snapshot.num_id,
        abstract_id=snapshot.abstract_id,
        level=level_def.index,
        raw_number=actual_number,
        formatted=formatted,
        full_text=full_text,
        format=level_def.format,
        suffix=level_def.suffix,
        run_properties=level_def.run_properties,
        level_values=tuple(snapshot.value_of(level) for level in range(level_def.index)) + (actual_number,),
    )
