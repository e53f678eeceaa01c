"""Tests for the format renderer."""

import pytest

from wordnumbering.errors import FormatRangeViolation
from wordnumbering.formatting import (
    BULLET_GLYPH,
    composed_format,
    format_letter,
    format_number,
    from_roman,
    render,
    to_roman,
)
from wordnumbering.ir import LevelDefinition, LevelTemplate, NumberFormat, TrackerSnapshot


def _snapshot(counters, levels):
    padded = tuple(counters) + (0,) * (9 - len(counters))
    return TrackerSnapshot(num_id="1", abstract_id="0", counters=padded, levels={l.index: l for l in levels})


class TestRomanNumerals:
    """Tests for Roman numeral conversion."""

    @pytest.mark.parametrize("number,expected", [
        (1, "I"), (4, "IV"), (9, "IX"), (14, "XIV"), (40, "XL"),
        (90, "XC"), (400, "CD"), (1994, "MCMXCIV"), (3999, "MMMCMXCIX"),
    ])
    def test_to_roman(self, number, expected):
        assert to_roman(number) == expected

    def test_roman_round_trip_over_full_range(self):
        """Every value 1..3999 converts back to itself."""
        for number in range(1, 4000):
            assert from_roman(to_roman(number)) == number

    @pytest.mark.parametrize("number", [0, -3, 4000])
    def test_out_of_range(self, number):
        with pytest.raises(FormatRangeViolation):
            to_roman(number)

    def test_from_roman_rejects_garbage(self):
        with pytest.raises(ValueError):
            from_roman("XQ")


class TestLetters:
    """Tests for letter numbering."""

    def test_first_and_last(self):
        assert format_letter(1) == "a"
        assert format_letter(26) == "z"
        assert format_letter(3, upper=True) == "C"

    def test_wraps_after_z(self):
        assert format_letter(27) == "a"
        assert format_letter(28, upper=True) == "B"

    def test_zero_is_out_of_range(self):
        with pytest.raises(FormatRangeViolation):
            format_letter(0)


class TestFormatNumber:
    """Tests for single-value formatting."""

    @pytest.mark.parametrize("fmt,expected", [
        (NumberFormat.DECIMAL, "7"),
        (NumberFormat.DECIMAL_ZERO, "07"),
        (NumberFormat.LOWER_LETTER, "g"),
        (NumberFormat.UPPER_LETTER, "G"),
        (NumberFormat.LOWER_ROMAN, "vii"),
        (NumberFormat.UPPER_ROMAN, "VII"),
        (NumberFormat.BULLET, BULLET_GLYPH),
        (NumberFormat.NONE, ""),
    ])
    def test_every_format(self, fmt, expected):
        assert format_number(7, fmt) == expected

    def test_decimal_zero_keeps_wide_values(self):
        assert format_number(123, NumberFormat.DECIMAL_ZERO) == "123"

    def test_unknown_ooxml_format_is_decimal(self):
        assert NumberFormat.from_ooxml("ordinalText") is NumberFormat.DECIMAL
        assert NumberFormat.from_ooxml(None) is NumberFormat.DECIMAL


class TestComposedFormat:
    """Tests for ancestor formats inside composed numbers."""

    def test_legal_numbering_makes_ancestors_decimal(self):
        parent = LevelDefinition(index=0, format=NumberFormat.UPPER_ROMAN)
        child = LevelDefinition(index=1, format=NumberFormat.LOWER_LETTER, is_legal=True)
        assert composed_format(parent, child) is NumberFormat.DECIMAL

    def test_ancestor_keeps_own_format(self):
        parent = LevelDefinition(index=0, format=NumberFormat.UPPER_ROMAN)
        child = LevelDefinition(index=1, format=NumberFormat.DECIMAL)
        assert composed_format(parent, child) is NumberFormat.UPPER_ROMAN

    def test_missing_reference_is_decimal(self):
        child = LevelDefinition(index=1)
        assert composed_format(None, child) is NumberFormat.DECIMAL


class TestRender:
    """Tests for rendering a paragraph's full numbering text."""

    def test_multi_level_template(self):
        level0 = LevelDefinition(index=0, template=LevelTemplate.parse("%1."))
        level1 = LevelDefinition(index=1, format=NumberFormat.LOWER_LETTER, template=LevelTemplate.parse("%1.%2."))
        resolved = render(2, level1, _snapshot([1, 2], [level0, level1]))

        assert resolved.formatted == "b"
        assert resolved.full_text == "1.b."
        assert resolved.level_values == (1, 2)

    def test_ancestor_value_uses_its_start(self):
        """The ancestor shows start + counter - 1, not the raw counter."""
        level0 = LevelDefinition(index=0, start=4, template=LevelTemplate.parse("%1."))
        level1 = LevelDefinition(index=1, template=LevelTemplate.parse("%1.%2"))
        resolved = render(1, level1, _snapshot([2, 1], [level0, level1]))

        assert resolved.full_text == "5.1"

    def test_mixed_separators_and_literals(self):
        level0 = LevelDefinition(index=0, template=LevelTemplate.parse("%1."))
        level1 = LevelDefinition(index=1, template=LevelTemplate.parse("%1-%2)"))
        level2 = LevelDefinition(index=2, format=NumberFormat.LOWER_ROMAN, template=LevelTemplate.parse("(%1-%2/%3)"))
        resolved = render(3, level2, _snapshot([2, 1, 3], [level0, level1, level2]))

        assert resolved.full_text == "(2-1/iii)"

    def test_legal_level(self):
        level0 = LevelDefinition(index=0, format=NumberFormat.UPPER_ROMAN, template=LevelTemplate.parse("%1."))
        level1 = LevelDefinition(index=1, is_legal=True, template=LevelTemplate.parse("%1.%2"))
        resolved = render(3, level1, _snapshot([2, 3], [level0, level1]))

        assert resolved.full_text == "2.3"

    def test_bullet_ignores_template(self):
        level0 = LevelDefinition(index=0, format=NumberFormat.BULLET, template=LevelTemplate.parse(""))
        resolved = render(5, level0, _snapshot([5], [level0]))

        assert resolved.full_text == BULLET_GLYPH
        assert resolved.raw_number == 5

    def test_no_template_adds_period(self):
        level0 = LevelDefinition(index=0, format=NumberFormat.UPPER_LETTER)
        assert render(2, level0, _snapshot([2], [level0])).full_text == "B."

    def test_literal_only_template(self):
        level0 = LevelDefinition(index=0, template=LevelTemplate.parse("Note"))
        assert render(1, level0, _snapshot([1], [level0])).full_text == "Note"

    def test_out_of_range_falls_back_to_integer(self):
        """Roman numerals beyond 3999 render as plain integers with a diagnostic."""
        level0 = LevelDefinition(index=0, format=NumberFormat.UPPER_ROMAN, template=LevelTemplate.parse("%1."))
        diagnostics = []
        resolved = render(4000, level0, _snapshot([4000], [level0]), diagnostics=diagnostics, ordinal=12)

        assert resolved.full_text == "4000."
        assert len(diagnostics) == 1
        assert diagnostics[0].code == "format-range-violation"
        assert diagnostics[0].ordinal == 12
