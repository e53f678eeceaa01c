"""
Pipeline Integration - Connects the DOCX parser, the numbering resolver, the
HTML builder, the attachment layer and the counter emitter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from wordnumbering.attachment import attach
from wordnumbering.config import NumberingSettings, settings as default_settings
from wordnumbering.definitions import DefinitionStore
from wordnumbering.docx_parser import (
    DocxParts,
    ParagraphIndex,
    extract_contexts,
    index_paragraphs,
    load_definitions,
    load_parts,
    numbering_style_links,
    parse_styles,
)
from wordnumbering.docx_parser.document import find_body
from wordnumbering.emitter import counter_corrections, emit_counter_css
from wordnumbering.errors import Diagnostic, MalformedDefinition
from wordnumbering.html_builder import build_html
from wordnumbering.ir import ParagraphNumberingContext
from wordnumbering.report import NumberingReport, generate_report
from wordnumbering.sequence import resolve_numbering

logger = logging.getLogger(__name__)


@dataclass
class DocumentNumbering:
    """Resolved numbering of one document."""

    store: DefinitionStore
    contexts: List[ParagraphNumberingContext]
    diagnostics: List[Diagnostic] = field(default_factory=list)
    index: Optional[ParagraphIndex] = None
    styles: Dict[str, Dict] = field(default_factory=dict)


@dataclass
class ConversionResult:
    html: str
    css: str
    contexts: List[ParagraphNumberingContext]
    diagnostics: List[Diagnostic]
    report: NumberingReport


def resolve_document(parts: DocxParts, settings: Optional[NumberingSettings] = None) -> DocumentNumbering:
    """Load definitions, extract paragraph contexts and resolve their numbering.

    Raises:
        MalformedDefinition: numbering.xml is inconsistent and the policy is
            "abort". With "unnumbered" the document is returned without any
            numbering and an error diagnostic instead.
    """
    settings = settings or default_settings
    styles_map = parse_styles(parts.styles)
    index = index_paragraphs(parts.document)
    contexts = extract_contexts(index, styles_map)

    try:
        store = load_definitions(parts.numbering, numbering_style_links(styles_map))
    except MalformedDefinition as exc:
        if settings.malformed_policy == "abort":
            raise
        logger.warning(f"Numbering definitions are malformed ({exc}); rendering the document unnumbered")
        return DocumentNumbering(
            store=DefinitionStore.empty(),
            contexts=contexts,
            diagnostics=[Diagnostic.from_error(exc, severity="error")],
            index=index,
            styles=styles_map,
        )

    result = resolve_numbering(contexts, store)
    logger.info(f"Resolved {len(result.numbered)} of {len(contexts)} paragraphs against {len(store)} numbering instances")
    return DocumentNumbering(
        store=store,
        contexts=result.contexts,
        diagnostics=result.diagnostics,
        index=index,
        styles=styles_map,
    )


def convert_docx(
    source: Union[str, Path, bytes],
    settings: Optional[NumberingSettings] = None,
    output_path: Optional[Path] = None,
) -> ConversionResult:
    """Run the DOCX to HTML numbering pipeline.

    Args:
        source: Path to a .docx file or its raw bytes.
        settings: Numbering settings; defaults to the module-level settings.
        output_path: Recorded in the report only.

    Returns:
        ConversionResult with the HTML (stylesheet embedded), the stylesheet
        on its own, resolved contexts, diagnostics and a report.
    """
    settings = settings or default_settings
    mode = settings.numbering_mode

    # Stage A: read the package
    parts = load_parts(source)

    # Stage B: resolve numbering
    numbering = resolve_document(parts, settings)
    diagnostics = list(numbering.diagnostics)

    # Stage C: build markup and attach numbering by ordinal
    html_doc = build_html(numbering.index, numbering.styles, title=settings.html_title, body=find_body(parts.document))
    attachment = attach(numbering.contexts, html_doc.elements, mode=mode)
    diagnostics.extend(attachment.diagnostics)

    # Stage D: counter stylesheet
    css = emit_counter_css(numbering.store, numbering.contexts, settings, include_content=mode == "counter")
    corrections = counter_corrections(numbering.store, numbering.contexts, settings)

    report = generate_report(
        numbering.contexts,
        diagnostics,
        input_path=Path(source) if not isinstance(source, (bytes, bytearray)) else None,
        output_path=output_path,
        attached=len(attachment.attached),
        css_corrections=len(corrections),
        mode=mode,
    )
    logger.info(f"Attached numbering to {len(attachment.attached)} elements ({len(diagnostics)} diagnostics)")

    return ConversionResult(
        html=html_doc.to_string(css),
        css=css,
        contexts=numbering.contexts,
        diagnostics=diagnostics,
        report=report,
    )
