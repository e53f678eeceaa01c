"""Report Generator - Summarize numbering resolution for one document."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from wordnumbering.errors import Diagnostic
from wordnumbering.ir import ParagraphNumberingContext


@dataclass
class NumberingReport:
    """Report on numbering resolution and attachment."""

    # Metadata
    input_file: str = ""
    output_file: str = ""
    timestamp: str = ""
    mode: str = "counter"

    # Paragraphs
    total_paragraphs: int = 0
    numbered_paragraphs: int = 0
    unresolved_paragraphs: int = 0
    attached_paragraphs: int = 0
    headings: int = 0
    toc_entries: int = 0

    # Definitions
    instances_used: List[str] = field(default_factory=list)
    abstracts_used: List[str] = field(default_factory=list)
    formats: Dict[str, int] = field(default_factory=dict)
    css_corrections: int = 0

    # Problems
    warnings: List[str] = field(default_factory=list)
    diagnostics: List[Dict] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def generate_report(
    contexts: Sequence[ParagraphNumberingContext],
    diagnostics: Sequence[Diagnostic] = (),
    input_path: Optional[Path] = None,
    output_path: Optional[Path] = None,
    attached: Optional[int] = None,
    css_corrections: int = 0,
    mode: str = "counter",
) -> NumberingReport:
    """Generate a numbering report for a resolved document.

    Args:
        contexts: Resolved paragraph contexts.
        diagnostics: Diagnostics collected while resolving and attaching.
        input_path: Path to the input DOCX file.
        output_path: Path to the output HTML file.
        attached: Number of paragraphs whose numbering reached an element.
        css_corrections: Number of paragraphs needing a counter-set rule.
        mode: Numbering display mode.

    Returns:
        NumberingReport with stats and diagnostics.
    """
    report = NumberingReport(
        input_file=str(input_path) if input_path else "",
        output_file=str(output_path) if output_path else "",
        timestamp=datetime.now().isoformat(),
        mode=mode,
        total_paragraphs=len(contexts),
        attached_paragraphs=attached or 0,
        css_corrections=css_corrections,
    )

    formats: Counter = Counter()
    for ctx in contexts:
        if ctx.heading_level is not None:
            report.headings += 1
        if ctx.is_toc:
            report.toc_entries += 1
        if not ctx.is_numbered:
            continue

        resolved = ctx.resolved
        if resolved is None:
            report.unresolved_paragraphs += 1
            continue
        report.numbered_paragraphs += 1
        formats[resolved.format.value] += 1
        if resolved.num_id not in report.instances_used:
            report.instances_used.append(resolved.num_id)
        if resolved.abstract_id not in report.abstracts_used:
            report.abstracts_used.append(resolved.abstract_id)

    report.formats = dict(formats)
    report.diagnostics = [d.to_dict() for d in diagnostics]

    # Add warnings
    if report.unresolved_paragraphs > 0:
        report.warnings.append(f"{report.unresolved_paragraphs} paragraph(s) reference missing numbering")

    unattached = report.numbered_paragraphs - report.attached_paragraphs
    if attached is not None and unattached > 0:
        report.warnings.append(f"{unattached} numbered paragraph(s) have no output element")

    return report


def save_report(report: NumberingReport, output_path: Path) -> None:
    """Save report to JSON file.

    Args:
        report: The numbering report.
        output_path: Path to save the report (should end with .json).
    """
    Path(output_path).write_text(report.to_json(), encoding="utf-8")
