"""
Excel export of invoice rows using openpyxl.
"""

import io
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Any, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .config import EXCEL_DATE_FORMAT, WORKSHEET_TITLE, logger

_DEFAULT_WIDTH = 14


def default_output_name(source_name: Optional[str] = None) -> str:
    """Workbook file name derived from the input file, or "pasted_text"."""
    stem = Path(source_name).stem if source_name else "pasted_text"
    return f"{stem}_invoice_lines.xlsx"


def build_workbook(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    column_widths: Optional[Sequence[int]] = None,
) -> Workbook:
    """
    Build a single-sheet workbook with a bold, frozen header row.

    None cells are left blank; date cells are shown as dd/mm/yyyy.
    """
    workbook = Workbook()
    ws = workbook.active
    ws.title = WORKSHEET_TITLE

    ws.append(list(headers))
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for row in rows:
        ws.append(list(row))
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, date):
                cell.number_format = EXCEL_DATE_FORMAT

    for index in range(1, len(headers) + 1):
        width = _DEFAULT_WIDTH
        if column_widths and index <= len(column_widths):
            width = column_widths[index - 1]
        ws.column_dimensions[get_column_letter(index)].width = width

    ws.freeze_panes = "A2"
    return workbook


def write_workbook(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    output_path: Path,
    column_widths: Optional[Sequence[int]] = None,
) -> Path:
    """
    Write rows to an .xlsx file.

    Args:
        headers: Column headers
        rows: Data rows, one list of cell values each
        output_path: Destination file
        column_widths: Optional width per column

    Returns:
        The path that was written
    """
    output_path = Path(output_path)
    workbook = build_workbook(headers, rows, column_widths)
    workbook.save(output_path)
    logger.info(f"Wrote {len(rows)} row(s) to: {output_path}")
    return output_path


def workbook_bytes(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    column_widths: Optional[Sequence[int]] = None,
) -> bytes:
    """Render rows to .xlsx content in memory."""
    buffer = io.BytesIO()
    build_workbook(headers, rows, column_widths).save(buffer)
    return buffer.getvalue()
