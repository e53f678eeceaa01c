"""DOCX Numbering - CLI Entry Point."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from wordnumbering.config import settings as default_settings
from wordnumbering.errors import NumberingError
from wordnumbering.pipeline import convert_docx
from wordnumbering.report import save_report


@click.command()
@click.argument("input_docx", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_html", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--css", "css_path", type=click.Path(dir_okay=False, path_type=Path), help="Also write the counter stylesheet to a file")
@click.option(
    "--mode",
    type=click.Choice(["counter", "text"]),
    default=None,
    help="Show numbers through CSS counters or as inserted text (default: from settings)",
)
@click.option(
    "--on-malformed",
    "malformed_policy",
    type=click.Choice(["abort", "unnumbered"]),
    default=None,
    help="What to do when numbering.xml is inconsistent (default: from settings)",
)
@click.option("--report", "report_path", type=click.Path(dir_okay=False, path_type=Path), help="Generate report.json")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(input_docx: Path, output_html: Path, css_path: Optional[Path] = None, mode: Optional[str] = None,
        malformed_policy: Optional[str] = None, report_path: Optional[Path] = None, verbose: bool = False):
    """Convert a Word document to HTML with resolved list numbering.

    INPUT_DOCX: Path to the input .docx file.
    OUTPUT_HTML: Path where the output .html file will be written.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else default_settings.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    updates = {}
    if mode:
        updates["numbering_mode"] = mode
    if malformed_policy:
        updates["malformed_policy"] = malformed_policy
    run_settings = default_settings.model_copy(update=updates)

    if verbose:
        click.echo(f"Parsing: {input_docx}")

    try:
        result = convert_docx(input_docx, run_settings, output_path=output_html)
    except NumberingError as e:
        click.echo(f"Error converting DOCX ({e.code}): {e}", err=True)
        sys.exit(1)

    output_html.parent.mkdir(parents=True, exist_ok=True)
    output_html.write_text(result.html, encoding="utf-8")

    if css_path:
        css_path.write_text(result.css, encoding="utf-8")
        if verbose:
            click.echo(f"  Stylesheet: {css_path}")

    if report_path:
        save_report(result.report, report_path)
        if verbose:
            click.echo(f"  Report: {report_path}")

    report = result.report
    if verbose:
        click.echo(f"  Paragraphs: {report.total_paragraphs}, numbered: {report.numbered_paragraphs}")
        click.echo(f"  Formats: {report.formats}")

    for diagnostic in result.diagnostics:
        location = f"paragraph {diagnostic.ordinal}: " if diagnostic.ordinal is not None else ""
        click.echo(f"⚠ {diagnostic.code}: {location}{diagnostic.message}", err=True)

    click.echo(f"✓ Converted {input_docx.name} → {output_html.name}")


if __name__ == "__main__":
    cli()
