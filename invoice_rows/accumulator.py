"""
Accumulation of per-invoice records across pages and text chunks.

An InvoiceAccumulator is owned by a single conversion run. Chunks are fed to
it strictly in document order: a chunk without its own "Invoice No" belongs
to the most recently seen invoice number, so feeding pages out of order
would attribute continuation pages to the wrong invoice.
"""

from typing import Optional

from .config import DEFAULT_CURRENCY, logger
from .extractor import (
    extract_header_fields,
    extract_line_items,
    extract_totals,
    find_gst_rate,
    find_invoice_no,
)
from .layouts import STANDARD_LAYOUT, Layout
from .reconciler import reconcile_totals
from .schemas import Invoice, merge_if_absent


class InvoiceAccumulator:
    """
    Keyed store of in-progress invoices for one run.

    Attributes:
        layout: Layout whose grammars are used for line items and totals
        invoices: Invoices keyed by invoice number, in order of first sighting
        current_invoice_no: Most recently detected invoice number
    """

    def __init__(self, layout: Layout = STANDARD_LAYOUT):
        self.layout = layout
        self.invoices: dict[str, Invoice] = {}
        self.current_invoice_no: Optional[str] = None
        self._finalized = False

    @property
    def line_item_count(self) -> int:
        return sum(len(invoice.line_items) for invoice in self.invoices.values())

    @property
    def finalized(self) -> bool:
        return self._finalized

    def get_or_create(self, invoice_no: str) -> Invoice:
        invoice = self.invoices.get(invoice_no)
        if invoice is None:
            invoice = Invoice(invoice_no=invoice_no)
            invoice.header.invoice_no = invoice_no
            self.invoices[invoice_no] = invoice
            logger.debug(f"Started invoice {invoice_no}")
        return invoice

    def add_chunk(self, text: str) -> Optional[Invoice]:
        """
        Extract every field group from one normalized chunk and merge it in.

        Args:
            text: Normalized text of one page or one pasted-text segment

        Returns:
            The invoice the chunk was attributed to, or None if no invoice
            number has been seen yet and the chunk was skipped
        """
        if self._finalized:
            raise RuntimeError("Cannot add text to an accumulator that has been finalized")

        invoice_no = find_invoice_no(text)
        if invoice_no:
            self.current_invoice_no = invoice_no
        if not self.current_invoice_no:
            logger.debug("Skipping chunk with no invoice number in context")
            return None

        invoice = self.get_or_create(self.current_invoice_no)

        merge_if_absent(invoice.header, extract_header_fields(text))

        gst_rate = find_gst_rate(text)
        if gst_rate is not None and invoice.gst_rate is None:
            invoice.gst_rate = gst_rate

        invoice.line_items.extend(extract_line_items(text, self.layout))

        merge_if_absent(invoice.totals, extract_totals(text))

        return invoice

    def finalize(self, default_currency: str = DEFAULT_CURRENCY) -> list[Invoice]:
        """
        Reconcile totals of every invoice; only the first call does any work.

        Returns:
            All accumulated invoices in order of first sighting
        """
        if not self._finalized:
            for invoice in self.invoices.values():
                reconcile_totals(invoice, self.layout, default_currency)
                invoice.finalized = True
            self._finalized = True
        return list(self.invoices.values())
