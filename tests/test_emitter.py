"""Tests for attribute and CSS counter emission."""

import pytest

from wordnumbering.config import NumberingSettings
from wordnumbering.definitions import DefinitionStore
from wordnumbering.emitter import (
    ATTR_ABSTRACT,
    ATTR_FORMAT,
    ATTR_LEVEL,
    ATTR_NUM_ID,
    build_counter_rules,
    counter_corrections,
    css_keyword,
    emit_attributes,
    emit_counter_css,
)
from wordnumbering.ir import (
    AbstractNumberingDefinition,
    ConcreteNumberingInstance,
    Indentation,
    LevelDefinition,
    LevelOverride,
    LevelTemplate,
    NumberFormat,
    ParagraphNumberingContext,
    ResolvedNumbering,
    RunProperties,
)
from wordnumbering.sequence import resolve_numbering

SETTINGS = NumberingSettings(counter_prefix="docx-counter", level_layout=True)


def _store(*instances, levels=None):
    levels = levels or {
        0: LevelDefinition(index=0, format=NumberFormat.DECIMAL, template=LevelTemplate.parse("%1.")),
        1: LevelDefinition(index=1, format=NumberFormat.LOWER_LETTER, template=LevelTemplate.parse("%1.%2.")),
    }
    abstract = AbstractNumberingDefinition(abstract_id="0", levels=levels)
    instances = instances or (ConcreteNumberingInstance(num_id="1", abstract_id="0"),)
    return DefinitionStore.load([abstract], list(instances))


def _resolve(store, *refs):
    contexts = [
        ParagraphNumberingContext(ordinal=i, num_id=ref[0], level=ref[1]) if ref else ParagraphNumberingContext(ordinal=i)
        for i, ref in enumerate(refs)
    ]
    return resolve_numbering(contexts, store).contexts


class TestAttributes:
    """Tests for data-* attribute emission."""

    def test_all_four_attributes(self):
        contexts = _resolve(_store(), ("1", 0), ("1", 1))
        assert emit_attributes(contexts[1]) == {
            ATTR_NUM_ID: "1",
            ATTR_ABSTRACT: "0",
            ATTR_LEVEL: "1",
            ATTR_FORMAT: "lowerLetter",
        }

    def test_unnumbered_gets_none(self):
        contexts = _resolve(_store(), None, ("9", 0))
        assert emit_attributes(contexts[0]) == {}
        # unresolved reference: no partial attribution
        assert emit_attributes(contexts[1]) == {}


class TestKeywords:
    """Tests for the format to counter-style mapping."""

    @pytest.mark.parametrize("fmt,keyword", [
        (NumberFormat.DECIMAL, "decimal"),
        (NumberFormat.DECIMAL_ZERO, "decimal-leading-zero"),
        (NumberFormat.LOWER_LETTER, "lower-alpha"),
        (NumberFormat.UPPER_LETTER, "upper-alpha"),
        (NumberFormat.LOWER_ROMAN, "lower-roman"),
        (NumberFormat.UPPER_ROMAN, "upper-roman"),
        (NumberFormat.BULLET, "disc"),
        (NumberFormat.NONE, "none"),
    ])
    def test_mapping(self, fmt, keyword):
        assert css_keyword(fmt) == keyword

    @pytest.mark.parametrize("fmt", list(NumberFormat))
    def test_every_format_has_a_keyword(self, fmt):
        assert css_keyword(fmt)

    def test_attributes_agree_with_rules(self):
        """The attribute format always maps to the keyword of the rule styling it."""
        override = LevelDefinition(index=1, format=NumberFormat.UPPER_ROMAN, template=LevelTemplate.parse("%2)"))
        store = _store(
            ConcreteNumberingInstance(num_id="1", abstract_id="0"),
            ConcreteNumberingInstance(num_id="2", abstract_id="0", overrides={1: LevelOverride(index=1, level=override)}),
        )
        contexts = _resolve(store, ("1", 0), ("1", 1), ("2", 0), ("2", 1), ("1", 1))
        rules = build_counter_rules(store, contexts, SETTINGS)

        for ctx in contexts:
            attrs = emit_attributes(ctx)
            matching = [
                r for r in rules
                if r.abstract_id == attrs[ATTR_ABSTRACT] and r.level == int(attrs[ATTR_LEVEL])
                and r.num_id in (None, attrs[ATTR_NUM_ID])
            ]
            most_specific = sorted(matching, key=lambda r: r.num_id is None)[0]
            assert most_specific.keyword == css_keyword(NumberFormat(attrs[ATTR_FORMAT]))


class TestCounterRules:
    """Tests for per-level counter rules."""

    def test_one_rule_per_used_pair(self):
        contexts = _resolve(_store(), ("1", 0), ("1", 1), ("1", 1))
        rules = build_counter_rules(_store(), contexts, SETTINGS)

        assert [(r.abstract_id, r.level, r.num_id) for r in rules] == [("0", 0, None), ("0", 1, None)]

    def test_shallower_level_restarts_deeper(self):
        contexts = _resolve(_store(), ("1", 0), ("1", 1))
        level0 = build_counter_rules(_store(), contexts, SETTINGS)[0]

        assert level0.increment == "docx-counter-0-0"
        assert level0.restarts == (("docx-counter-0-1", 0),)

    def test_restart_uses_deeper_start(self):
        levels = {
            0: LevelDefinition(index=0, template=LevelTemplate.parse("%1.")),
            1: LevelDefinition(index=1, start=3, template=LevelTemplate.parse("%1.%2")),
        }
        store = _store(levels=levels)
        contexts = _resolve(store, ("1", 0), ("1", 1))
        level0 = build_counter_rules(store, contexts, SETTINGS)[0]

        assert level0.restarts == (("docx-counter-0-1", 2),)

    def test_never_restart_level_is_not_set(self):
        levels = {
            0: LevelDefinition(index=0, template=LevelTemplate.parse("%1.")),
            1: LevelDefinition(index=1, restart_after=0, template=LevelTemplate.parse("%2.")),
        }
        store = _store(levels=levels)
        contexts = _resolve(store, ("1", 0), ("1", 1))

        assert build_counter_rules(store, contexts, SETTINGS)[0].restarts == ()

    def test_pair_without_level_definition_is_skipped(self):
        store = _store()
        stray = ParagraphNumberingContext(
            ordinal=1,
            num_id="1",
            level=5,
            resolved=ResolvedNumbering(
                num_id="1", abstract_id="0", level=5, raw_number=1, formatted="1", full_text="1.",
                format=NumberFormat.DECIMAL, level_values=(1, 0, 0, 0, 0, 1),
            ),
        )
        contexts = _resolve(store, ("1", 0)) + [stray]

        assert [r.level for r in build_counter_rules(store, contexts, SETTINGS)] == [0]
        assert counter_corrections(store, contexts, SETTINGS) == {}
        assert "counter-increment: docx-counter-0-0 1;" in emit_counter_css(store, contexts, SETTINGS)

    def test_composed_content(self):
        contexts = _resolve(_store(), ("1", 0), ("1", 1))
        level1 = build_counter_rules(_store(), contexts, SETTINGS)[1]

        assert level1.content == (
            'counter(docx-counter-0-0, decimal) "." counter(docx-counter-0-1, lower-alpha) "."'
        )

    def test_legal_content_uses_decimal_ancestors(self):
        levels = {
            0: LevelDefinition(index=0, format=NumberFormat.UPPER_ROMAN, template=LevelTemplate.parse("%1.")),
            1: LevelDefinition(index=1, is_legal=True, template=LevelTemplate.parse("%1.%2")),
        }
        store = _store(levels=levels)
        contexts = _resolve(store, ("1", 0), ("1", 1))
        level1 = build_counter_rules(store, contexts, SETTINGS)[1]

        assert level1.content == 'counter(docx-counter-0-0, decimal) "." counter(docx-counter-0-1, decimal)'

    def test_bullet_content(self):
        levels = {0: LevelDefinition(index=0, format=NumberFormat.BULLET, template=LevelTemplate.parse("•"))}
        store = _store(levels=levels)
        contexts = _resolve(store, ("1", 0))

        assert build_counter_rules(store, contexts, SETTINGS)[0].content == "counter(docx-counter-0-0, disc)"

    def test_instance_rule_for_format_override(self):
        override = LevelDefinition(index=0, format=NumberFormat.UPPER_LETTER, template=LevelTemplate.parse("%1)"))
        store = _store(
            ConcreteNumberingInstance(num_id="1", abstract_id="0"),
            ConcreteNumberingInstance(num_id="2", abstract_id="0", overrides={0: LevelOverride(index=0, level=override)}),
        )
        contexts = _resolve(store, ("1", 0), ("2", 0))
        rules = build_counter_rules(store, contexts, SETTINGS)
        instance_rules = [r for r in rules if r.num_id is not None]

        assert len(instance_rules) == 1
        assert instance_rules[0].num_id == "2"
        assert instance_rules[0].content == 'counter(docx-counter-0-0, upper-alpha) ")"'
        assert instance_rules[0].increment is None
        assert instance_rules[0].selector.startswith('[data-num-id="2"]')

    def test_start_override_needs_no_instance_rule(self):
        store = _store(
            ConcreteNumberingInstance(num_id="1", abstract_id="0"),
            ConcreteNumberingInstance(num_id="2", abstract_id="0", overrides={0: LevelOverride(index=0, start_override=5)}),
        )
        contexts = _resolve(store, ("2", 0))

        assert all(r.num_id is None for r in build_counter_rules(store, contexts, SETTINGS))

    def test_layout_declarations(self):
        levels = {
            0: LevelDefinition(
                index=0,
                template=LevelTemplate.parse("%1."),
                indentation=Indentation(left=36, hanging=18),
                run_properties=RunProperties(bold=True, color="#C00000"),
            ),
        }
        store = _store(levels=levels)
        rule = build_counter_rules(store, _resolve(store, ("1", 0)), SETTINGS)[0]

        assert ("margin-left", "36pt") in rule.declarations
        assert ("text-indent", "-18pt") in rule.declarations
        assert ("min-width", "18pt") in rule.glyph_declarations
        assert ("font-weight", "bold") in rule.glyph_declarations
        assert ("color", "#C00000") in rule.glyph_declarations

    def test_layout_can_be_disabled(self):
        levels = {0: LevelDefinition(index=0, indentation=Indentation(left=36))}
        store = _store(levels=levels)
        settings = NumberingSettings(level_layout=False)
        rule = build_counter_rules(store, _resolve(store, ("1", 0)), settings)[0]

        assert rule.declarations == ()
        assert rule.glyph_declarations == ()


class TestCorrections:
    """Tests for counter-set corrections."""

    def test_simple_outline_needs_none(self):
        contexts = _resolve(_store(), ("1", 0), ("1", 1), ("1", 1), None, ("1", 0))
        assert counter_corrections(_store(), contexts, SETTINGS) == {}

    def test_start_override(self):
        store = _store(
            ConcreteNumberingInstance(num_id="1", abstract_id="0"),
            ConcreteNumberingInstance(num_id="2", abstract_id="0", overrides={0: LevelOverride(index=0, start_override=5)}),
        )
        contexts = _resolve(store, ("2", 0), ("2", 0))

        assert counter_corrections(store, contexts, SETTINGS) == {0: {"docx-counter-0-0": 4}}

    def test_second_instance_restarts(self):
        store = _store(
            ConcreteNumberingInstance(num_id="1", abstract_id="0"),
            ConcreteNumberingInstance(num_id="2", abstract_id="0"),
        )
        contexts = _resolve(store, ("1", 0), ("1", 0), ("2", 0), ("2", 0), ("1", 0))

        assert [c.resolved.full_text for c in contexts] == ["1.", "2.", "1.", "2.", "3."]
        assert counter_corrections(store, contexts, SETTINGS) == {
            2: {"docx-counter-0-0": 0},
        }

    def test_ancestor_corrected_for_interleaved_instances(self):
        """A nested item shows its own instance's parent value."""
        store = _store(
            ConcreteNumberingInstance(num_id="1", abstract_id="0"),
            ConcreteNumberingInstance(num_id="2", abstract_id="0"),
        )
        contexts = _resolve(store, ("1", 0), ("1", 0), ("2", 0), ("1", 1))
        corrections = counter_corrections(store, contexts, SETTINGS)

        assert contexts[3].resolved.full_text == "2.a."
        assert corrections[3] == {"docx-counter-0-0": 2}


class TestStylesheet:
    """Tests for the complete stylesheet text."""

    def test_counter_mode(self):
        contexts = _resolve(_store(), ("1", 0), ("1", 1))
        css = emit_counter_css(_store(), contexts, SETTINGS)

        assert "body {" in css
        assert "docx-counter-0-0 0" in css
        assert '[data-abstract-num="0"][data-num-level="1"]::before {' in css
        assert "counter-increment: docx-counter-0-1 1;" in css
        assert "content: counter(docx-counter-0-0, decimal)" in css

    def test_text_mode_has_no_generated_content(self):
        contexts = _resolve(_store(), ("1", 0), ("1", 1))
        css = emit_counter_css(_store(), contexts, SETTINGS, include_content=False)

        assert "content:" not in css
        assert "counter-increment: docx-counter-0-0 1;" in css

    def test_corrections_are_emitted(self):
        store = _store(
            ConcreteNumberingInstance(num_id="1", abstract_id="0"),
            ConcreteNumberingInstance(num_id="2", abstract_id="0", overrides={0: LevelOverride(index=0, start_override=5)}),
        )
        css = emit_counter_css(store, _resolve(store, ("2", 0)), SETTINGS)

        assert '[data-abstract-num][data-num-level][data-paragraph-index="0"] {' in css
        # the correction replaces the level rule's counter-set, so it repeats the restart
        assert "counter-set: docx-counter-0-1 0 docx-counter-0-0 4;" in css

    def test_only_body_resets_counters(self):
        """A list that carries on past a table cell keeps one counter scope."""
        store = _store()
        contexts = _resolve(store, ("1", 0), ("1", 1), ("1", 1), ("1", 0), ("1", 1))
        css = emit_counter_css(store, contexts, SETTINGS)

        assert [c.resolved.full_text for c in contexts] == ["1.", "1.a.", "1.b.", "2.", "2.a."]
        assert css.count("counter-reset") == 1
        assert "body {\n  counter-reset: docx-counter-0-0 0 docx-counter-0-1 0" in css
        assert (
            '[data-abstract-num="0"][data-num-level="0"] {\n'
            "  counter-increment: docx-counter-0-0 1;\n"
            "  counter-set: docx-counter-0-1 0;"
        ) in css
        assert counter_corrections(store, contexts, SETTINGS) == {}

    def test_no_numbering_no_css(self):
        assert emit_counter_css(_store(), _resolve(_store(), None, None), SETTINGS) == ""
