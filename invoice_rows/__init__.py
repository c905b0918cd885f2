"""
Invoice Rows

Converts invoice PDFs (digital or scanned) and pasted invoice text into
spreadsheet rows, one row per line item, by regex extraction over
whitespace-normalized text.
"""

__version__ = "0.1.0"
__author__ = "Invoice Rows Team"

from .schemas import (
    ExtractionOptions,
    ExtractionResult,
    ExtractionStatus,
    Invoice,
    InvoiceHeader,
    InvoiceTotals,
    LineItem,
)
from .pipeline import (
    extract_rows_from_pages,
    extract_rows_from_pdf,
    extract_rows_from_source,
    extract_rows_from_text,
)

__all__ = [
    "ExtractionOptions",
    "ExtractionResult",
    "ExtractionStatus",
    "Invoice",
    "InvoiceHeader",
    "InvoiceTotals",
    "LineItem",
    "extract_rows_from_pages",
    "extract_rows_from_pdf",
    "extract_rows_from_source",
    "extract_rows_from_text",
]
