"""
Tests for per-invoice accumulation across chunks.
"""

import pytest

from invoice_rows.accumulator import InvoiceAccumulator
from invoice_rows.layouts import ITEMISED_LAYOUT
from invoice_rows.normalizer import normalize_text
from invoice_rows.schemas import InvoiceHeader, InvoiceTotals, merge_if_absent


DESK_LAMP = "1 Desk lamp 12.0000 0 1.00000 12.00 13.08"
FILING_CABINET = "2 Filing cabinet 90.0000 0 1.00000 90.00 98.10"


@pytest.fixture
def accumulator() -> InvoiceAccumulator:
    return InvoiceAccumulator()


class TestAttribution:
    """Tests for the sticky invoice-number rule."""

    def test_continuation_page_uses_last_invoice(self, accumulator, header_page, items_page):
        accumulator.add_chunk(normalize_text(header_page))
        invoice = accumulator.add_chunk(normalize_text(items_page))

        assert invoice is not None
        assert invoice.invoice_no == "INV-001"
        assert list(accumulator.invoices) == ["INV-001"]
        assert len(accumulator.invoices["INV-001"].line_items) == 3

    def test_chunk_before_any_invoice_number_is_skipped(self, accumulator, items_page):
        assert accumulator.add_chunk(normalize_text(items_page)) is None
        assert accumulator.invoices == {}
        assert accumulator.line_item_count == 0

    def test_new_invoice_number_switches_context(self, accumulator):
        accumulator.add_chunk(f"Invoice No : A-1 {DESK_LAMP}")
        accumulator.add_chunk(f"Invoice No : B-2 {FILING_CABINET}")

        assert [item.description for item in accumulator.invoices["A-1"].line_items] == ["Desk lamp"]
        assert [item.description for item in accumulator.invoices["B-2"].line_items] == [
            "Filing cabinet"
        ]
        assert accumulator.current_invoice_no == "B-2"

    def test_non_contiguous_pages_merge(self, accumulator):
        accumulator.add_chunk(f"Invoice No : A-1 {DESK_LAMP}")
        accumulator.add_chunk("Invoice No : B-2 Vendor ID : V2")
        accumulator.add_chunk(f"Invoice No : A-1 {FILING_CABINET}")

        assert list(accumulator.invoices) == ["A-1", "B-2"]
        assert [item.line_no for item in accumulator.invoices["A-1"].line_items] == [1, 2]

    def test_header_invoice_no_is_set_on_creation(self, accumulator):
        invoice = accumulator.get_or_create("X-9")
        assert invoice.header.invoice_no == "X-9"
        assert accumulator.get_or_create("X-9") is invoice


class TestMerging:
    """Tests for first-writer-wins merging within one invoice."""

    def test_header_first_value_wins(self, accumulator):
        accumulator.add_chunk("Invoice No : A-1 Vendor ID : V1")
        accumulator.add_chunk("Invoice No : A-1 Vendor ID : V2 Credit Term : 60 Days")

        header = accumulator.invoices["A-1"].header
        assert header.vendor_id == "V1"
        assert header.credit_term == "60 Days"

    def test_totals_first_value_wins(self, accumulator):
        accumulator.add_chunk("Invoice No : A-1 Sub Total : 100.00")
        accumulator.add_chunk("Sub Total : 999.00 Total GST : 9.00")

        totals = accumulator.invoices["A-1"].totals
        assert totals.subtotal == "100.00"
        assert totals.tax == "9.00"

    def test_gst_rate_first_value_wins(self, accumulator):
        accumulator.add_chunk("Invoice No : A-1 GST @ 9%")
        accumulator.add_chunk("Invoice No : A-1 GST @ 7%")
        assert accumulator.invoices["A-1"].gst_rate == 9.0

    def test_line_items_are_not_deduplicated(self, accumulator, header_page, items_page):
        accumulator.add_chunk(normalize_text(header_page))
        accumulator.add_chunk(normalize_text(items_page))
        accumulator.add_chunk(normalize_text(items_page))
        assert accumulator.line_item_count == 6

    def test_layout_grammar_is_used(self, itemised_page):
        accumulator = InvoiceAccumulator(ITEMISED_LAYOUT)
        accumulator.add_chunk(normalize_text(itemised_page))
        items = accumulator.invoices["INV-100"].line_items
        assert [item.tax_amount for item in items] == ["135.00", "18.00"]


class TestFinalize:
    """Tests for the one-shot finalize step."""

    def test_finalize_reconciles_and_marks(self, accumulator):
        accumulator.add_chunk(f"Invoice No : A-1 {DESK_LAMP}")
        invoices = accumulator.finalize()

        assert len(invoices) == 1
        assert invoices[0].finalized is True
        assert invoices[0].totals.subtotal == "12.00"
        assert accumulator.finalized is True

    def test_finalize_is_idempotent(self, accumulator):
        accumulator.add_chunk(f"Invoice No : A-1 {DESK_LAMP}")
        first = accumulator.finalize()
        first[0].totals.subtotal = "50.00"

        second = accumulator.finalize()
        assert second[0].totals.subtotal == "50.00"

    def test_add_after_finalize_raises(self, accumulator):
        accumulator.finalize()
        with pytest.raises(RuntimeError):
            accumulator.add_chunk("Invoice No : A-1")

    def test_finalize_empty(self, accumulator):
        assert accumulator.finalize() == []


class TestMergeIfAbsent:
    """Tests for the generic record merge."""

    def test_fills_only_empty_fields(self):
        target = InvoiceTotals(subtotal="100.00", tax="")
        source = InvoiceTotals(subtotal="200.00", tax="9.00", currency="SGD")

        filled = merge_if_absent(target, source)

        assert filled == ["currency", "tax"]
        assert target.subtotal == "100.00"
        assert target.tax == "9.00"
        assert target.currency == "SGD"

    def test_empty_source_values_are_ignored(self):
        target = InvoiceHeader(vendor_id=None)
        assert merge_if_absent(target, InvoiceHeader(vendor_id="")) == []
        assert target.vendor_id is None
