"""Attachment layer - put resolved numbering onto output elements by ordinal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Mapping, Sequence

from lxml import etree

from wordnumbering.emitter import NUMBER_CLASS, emit_attributes
from wordnumbering.errors import UNATTACHED_NUMBERING, Diagnostic
from wordnumbering.ir import ParagraphNumberingContext

logger = logging.getLogger(__name__)

_NBSP = "\u00a0"


@dataclass
class AttachmentResult:
    attached: List[int] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def _existing_number(element: etree._Element):
    if len(element) and element[0].tag == "span" and element[0].get("class") == NUMBER_CLASS:
        return element[0]
    return None


def _insert_number(element: etree._Element, ctx: ParagraphNumberingContext) -> None:
    """Prepend the rendered number as a span, replacing one from an earlier pass."""
    resolved = ctx.resolved
    separator = "" if resolved.suffix == "nothing" else _NBSP

    span = _existing_number(element)
    if span is None:
        span = etree.Element("span")
        span.set("class", NUMBER_CLASS)
        span.set("aria-hidden", "true")
        span.tail = separator + (element.text or "")
        element.text = None
        element.insert(0, span)
    span.text = resolved.full_text


def attach(
    contexts: Sequence[ParagraphNumberingContext],
    elements: Mapping[int, etree._Element],
    mode: Literal["counter", "text"] = "counter",
) -> AttachmentResult:
    """Attach numbering attributes (and, in text mode, the number itself).

    Elements are looked up by paragraph ordinal only; text is never used to
    match. A numbered paragraph without an element is reported, not guessed.
    """
    if mode not in ("counter", "text"):
        raise ValueError(f"unknown numbering mode {mode!r}")

    result = AttachmentResult()
    for ctx in contexts:
        attributes = emit_attributes(ctx)
        if not attributes:
            continue

        element = elements.get(ctx.ordinal)
        if element is None:
            message = f"no output element for numbered paragraph {ctx.ordinal}"
            logger.warning(message)
            result.diagnostics.append(Diagnostic(code=UNATTACHED_NUMBERING, message=message, ordinal=ctx.ordinal))
            continue

        for name, value in attributes.items():
            element.set(name, value)
        if mode == "text":
            _insert_number(element, ctx)
        result.attached.append(ctx.ordinal)

    logger.debug(f"Attached numbering to {len(result.attached)} elements ({mode} mode)")
    return result
