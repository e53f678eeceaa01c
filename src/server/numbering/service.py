"""Numbering service orchestration."""

from __future__ import annotations

import logging
from typing import List

from server.config import settings
from server.numbering.exceptions import InvalidDocument, MalformedNumbering
from server.numbering.schemas import NumberingOptions, NumberingResponse, ParagraphNumbering

from wordnumbering.config import settings as numbering_settings
from wordnumbering.errors import DocumentPackageError, MalformedDefinition
from wordnumbering.ir import ParagraphNumberingContext
from wordnumbering.pipeline import convert_docx

logger = logging.getLogger(__name__)


def _context_models(contexts: List[ParagraphNumberingContext]) -> List[ParagraphNumbering]:
    models = []
    for ctx in contexts:
        if not ctx.is_numbered:
            continue
        resolved = ctx.resolved
        models.append(ParagraphNumbering(
            ordinal=ctx.ordinal,
            num_id=ctx.num_id,
            level=ctx.level,
            abstract_id=resolved.abstract_id if resolved else None,
            text=resolved.full_text if resolved else None,
            format=resolved.format.value if resolved else None,
            paragraph_id=ctx.paragraph_id,
        ))
    return models


def number_document(docx_bytes: bytes, options: NumberingOptions) -> NumberingResponse:
    run_settings = numbering_settings.model_copy(update={
        "numbering_mode": options.mode,
        "malformed_policy": options.on_malformed,
    })

    try:
        result = convert_docx(docx_bytes, run_settings)
    except DocumentPackageError as exc:
        raise InvalidDocument(message=str(exc)) from exc
    except MalformedDefinition as exc:
        raise MalformedNumbering(message=str(exc)) from exc

    logger.info(f"Numbered {result.report.numbered_paragraphs} paragraphs ({len(result.diagnostics)} diagnostics)")
    return NumberingResponse(
        html=result.html,
        css=result.css,
        diagnostics=[d.to_dict() for d in result.diagnostics],
        report=result.report.to_dict(),
        contexts=_context_models(result.contexts) if settings.expose_contexts else None,
    )
