"""
Command-line interface for the invoice-to-rows converter.

Provides three commands:
- convert: Convert an invoice PDF to an Excel workbook
- convert-text: Convert pasted invoice text (from a file) to an Excel workbook
- version: Show version information
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from .config import DEFAULT_LAYOUT, EXCLUDE_DRAFT_DEFAULT, NORMALIZE_CURRENCY_TO, LayoutVariant, logger
from .layouts import get_layout
from .pipeline import extract_rows_from_pdf, extract_rows_from_text
from .schemas import ExtractionOptions, ExtractionResult, ExtractionStatus
from .sources import PdfSourceError
from .writer import default_output_name, write_workbook


# Create Typer app
app = typer.Typer(
    name="invoice-rows",
    help="Convert invoice PDFs or text into one spreadsheet row per line item",
    add_completion=False,
)


def _finish(result: ExtractionResult, output: Path, save_json: Optional[Path]) -> None:
    """Write the workbook (and optional JSON) for a finished run, or exit 1 if it is empty."""
    if save_json:
        with open(save_json, 'w', encoding='utf-8') as f:
            json.dump(result.model_dump(mode='json'), f, indent=2)
        typer.echo(f"      Saved extraction result to: {save_json}")

    if result.status == ExtractionStatus.NO_LINE_ITEMS:
        typer.echo(result.message, err=True)
        raise typer.Exit(code=1)

    layout = get_layout(result.layout)
    write_workbook(result.headers, result.rows, output, layout.column_widths)

    typer.echo(f"\n[OK] {result.message}")
    typer.echo(f"Workbook saved to: {output}")
    for invoice in result.invoices[:10]:  # Show first 10
        typer.echo(
            f"  - {invoice.invoice_no} | {len(invoice.line_items)} item(s) | "
            f"{invoice.totals.subtotal} {invoice.totals.currency}"
        )
    if len(result.invoices) > 10:
        typer.echo(f"  ... and {len(result.invoices) - 10} more")


@app.command()
def convert(
    pdf: Path = typer.Option(
        ...,
        "--pdf",
        "-p",
        help="Invoice PDF file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output .xlsx path (default: <pdf name>_invoice_lines.xlsx)",
    ),
    force_ocr: bool = typer.Option(
        False,
        "--force-ocr",
        help="OCR every page even when a digital text layer exists",
    ),
    exclude_draft: bool = typer.Option(
        EXCLUDE_DRAFT_DEFAULT,
        "--exclude-draft/--include-draft",
        help="Skip invoices whose status is Draft",
    ),
    layout: LayoutVariant = typer.Option(
        DEFAULT_LAYOUT,
        "--layout",
        "-l",
        help="Line-item layout variant",
    ),
    currency_code: Optional[str] = typer.Option(
        NORMALIZE_CURRENCY_TO,
        "--currency-code",
        help="Write this code (e.g. SGD) in place of every extracted currency",
    ),
    save_json: Optional[Path] = typer.Option(
        None,
        "--save-json",
        "-s",
        help="Also save the extraction result to this JSON file",
    ),
) -> None:
    """
    Convert an invoice PDF into an Excel workbook.

    Pages are read in order; pages without usable digital text are OCR'd.
    """
    typer.echo(f"Converting: {pdf}")
    output = output or pdf.with_name(default_output_name(pdf.name))
    options = ExtractionOptions(
        exclude_draft_invoices=exclude_draft,
        force_ocr=force_ocr,
        layout=layout,
        normalize_currency_to=currency_code,
    )

    try:
        result = asyncio.run(extract_rows_from_pdf(pdf, options))
    except PdfSourceError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error during conversion: {e}", err=True)
        logger.exception("Conversion failed")
        raise typer.Exit(code=1)

    typer.echo(f"      Read {result.page_count} page(s)")
    _finish(result, output, save_json)


@app.command("convert-text")
def convert_text(
    input_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="Text file holding one or more pasted invoices",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output .xlsx path (default: pasted_text_invoice_lines.xlsx)",
    ),
    exclude_draft: bool = typer.Option(
        EXCLUDE_DRAFT_DEFAULT,
        "--exclude-draft/--include-draft",
        help="Skip invoices whose status is Draft",
    ),
    layout: LayoutVariant = typer.Option(
        DEFAULT_LAYOUT,
        "--layout",
        "-l",
        help="Line-item layout variant",
    ),
    currency_code: Optional[str] = typer.Option(
        NORMALIZE_CURRENCY_TO,
        "--currency-code",
        help="Write this code (e.g. SGD) in place of every extracted currency",
    ),
    save_json: Optional[Path] = typer.Option(
        None,
        "--save-json",
        "-s",
        help="Also save the extraction result to this JSON file",
    ),
) -> None:
    """
    Convert pasted invoice text into an Excel workbook.

    Several invoices may be concatenated; they are split at "Tax Invoice"
    and "Invoice Amount Summary".
    """
    typer.echo(f"Converting text from: {input_file}")
    output = output or Path(default_output_name())
    options = ExtractionOptions(
        exclude_draft_invoices=exclude_draft,
        layout=layout,
        normalize_currency_to=currency_code,
    )

    try:
        text = input_file.read_text(encoding='utf-8')
        result = extract_rows_from_text(text, options)
    except Exception as e:
        typer.echo(f"Error during conversion: {e}", err=True)
        logger.exception("Conversion failed")
        raise typer.Exit(code=1)

    _finish(result, output, save_json)


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    typer.echo(f"invoice-rows v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
