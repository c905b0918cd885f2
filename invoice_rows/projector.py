"""
Flattening of finalized invoices into export rows.

One row is produced per line item. Header and totals cells are repeated on
every row of the same invoice, so an invoice without line items produces no
rows at all.
"""

from collections.abc import Iterable
from typing import Any, Optional

from .coercion import parse_number, to_calendar_date
from .config import DRAFT_STATUS
from .layouts import Layout
from .schemas import ExtractionOptions, Invoice, InvoiceHeader, LineItem

ExportRow = list[Any]


def column_headers(layout: Layout) -> list[str]:
    """Column headers of the export schema for a layout."""
    return list(layout.columns)


def is_draft(header: InvoiceHeader, draft_status: str = DRAFT_STATUS) -> bool:
    """Case-insensitive exact match of the invoice status against the draft status."""
    status = (header.invoice_status or "").strip().lower()
    return bool(status) and status == draft_status.strip().lower()


def resolve_tax_rate(item: LineItem, invoice: Invoice, layout: Layout) -> Optional[float]:
    """Item rate, else the invoice-level GST rate, else the layout's blank value."""
    if item.tax_rate_percent is not None:
        return item.tax_rate_percent
    if invoice.gst_rate is not None:
        return invoice.gst_rate
    return layout.blank_tax_rate


def project_invoice(
    invoice: Invoice,
    layout: Layout,
    currency_code: Optional[str] = None,
) -> list[ExportRow]:
    """
    Build the export rows of a single invoice.

    Args:
        invoice: Finalized invoice
        layout: Layout deciding the column set
        currency_code: If set, replaces any non-empty currency

    Returns:
        One row per line item, in extraction order
    """
    header = invoice.header
    totals = invoice.totals

    currency = totals.currency or ""
    if currency_code and currency:
        currency = currency_code

    header_cells = [
        header.vendor_id or "",
        header.attention_to or "",
        to_calendar_date(header.invoice_date),
        header.credit_term or "",
        header.invoice_no or invoice.invoice_no,
        header.related_invoice_no or "",
        header.invoice_status or "",
        header.instruction_id or "",
        header.header_description or "",
    ]

    totals_cells = [
        currency,
        parse_number(totals.subtotal),
        parse_number(totals.tax),
    ]
    if layout.itemised_tax:
        totals_cells += [
            parse_number(totals.freight),
            parse_number(totals.grand_total),
        ]

    rows = []
    for item in invoice.line_items:
        item_cells = [
            item.line_no,
            item.description,
            parse_number(item.quantity),
            parse_number(item.unit_price),
            parse_number(item.gross_excluding_tax),
            parse_number(resolve_tax_rate(item, invoice, layout)),
            parse_number(item.gross_including_tax),
        ]
        rows.append(header_cells + item_cells + totals_cells)

    return rows


def project_rows(
    invoices: Iterable[Invoice],
    layout: Layout,
    options: Optional[ExtractionOptions] = None,
) -> list[ExportRow]:
    """
    Flatten invoices into export rows, applying draft exclusion.

    Args:
        invoices: Finalized invoices in output order
        layout: Layout deciding the column set
        options: Run options (draft exclusion, currency code)

    Returns:
        Export rows of every invoice that survives the draft filter
    """
    if options is None:
        options = ExtractionOptions(layout=layout.variant)

    rows: list[ExportRow] = []
    for invoice in invoices:
        if options.exclude_draft_invoices and is_draft(invoice.header, options.draft_status):
            continue
        rows.extend(project_invoice(invoice, layout, options.normalize_currency_to))
    return rows
