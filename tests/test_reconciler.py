"""
Tests for totals reconciliation.
"""

from typing import Optional

from invoice_rows.layouts import ITEMISED_LAYOUT, STANDARD_LAYOUT
from invoice_rows.reconciler import compute_totals, reconcile_totals, totals_complete
from invoice_rows.schemas import Invoice, InvoiceTotals, LineItem


def make_item(
    excluding: str,
    including: str,
    tax: Optional[str] = None,
    line_no: int = 1,
) -> LineItem:
    return LineItem(
        line_no=line_no,
        description="Test item",
        quantity="1.00000",
        unit_price=excluding,
        gross_excluding_tax=excluding,
        tax_amount=tax,
        gross_including_tax=including,
    )


def make_invoice(*items: LineItem, totals: Optional[InvoiceTotals] = None) -> Invoice:
    return Invoice(
        invoice_no="INV-1",
        line_items=list(items),
        totals=totals or InvoiceTotals(),
    )


class TestTotalsComplete:
    """Tests for the per-layout completeness check."""

    def test_standard_needs_three_fields(self):
        totals = InvoiceTotals(currency="SGD", subtotal="1.00", tax="0.09")
        assert totals_complete(totals, STANDARD_LAYOUT)
        assert not totals_complete(totals, ITEMISED_LAYOUT)

    def test_empty_string_is_missing(self):
        totals = InvoiceTotals(currency="SGD", subtotal="1.00", tax="")
        assert not totals_complete(totals, STANDARD_LAYOUT)


class TestStandardReconcile:
    """Tests for reconciliation with the standard layout."""

    def test_complete_totals_untouched(self):
        totals = InvoiceTotals(currency="US Dollar", subtotal="1.00", tax="2.00")
        invoice = make_invoice(make_item("100.00", "109.00"), totals=totals)

        assert reconcile_totals(invoice, STANDARD_LAYOUT) == []
        assert invoice.totals.subtotal == "1.00"
        assert invoice.totals.tax == "2.00"

    def test_subtotal_rounds_half_up(self):
        invoice = make_invoice(
            make_item("1,200.00", "1,308.00"),
            make_item("80.50", "87.75"),
            make_item("0.125", "0.125"),
        )
        computed = compute_totals(invoice, STANDARD_LAYOUT)
        assert computed.subtotal == "1280.63"

    def test_tax_skips_lines_below_excluding(self):
        invoice = make_invoice(
            make_item("100.00", "109.00"),
            make_item("50.00", "40.00"),
        )
        computed = compute_totals(invoice, STANDARD_LAYOUT)
        assert computed.tax == "9.00"
        assert computed.freight is None
        assert computed.grand_total is None

    def test_default_currency_fills_missing(self):
        invoice = make_invoice(make_item("10.00", "10.90"))
        reconcile_totals(invoice, STANDARD_LAYOUT)
        assert invoice.totals.currency == "Singapore Dollar"

    def test_printed_currency_kept(self):
        invoice = make_invoice(
            make_item("10.00", "10.90"),
            totals=InvoiceTotals(currency="US Dollar"),
        )
        reconcile_totals(invoice, STANDARD_LAYOUT, default_currency="Euro")
        assert invoice.totals.currency == "US Dollar"

    def test_empty_default_currency_leaves_blank(self):
        invoice = make_invoice(make_item("10.00", "10.90"))
        reconcile_totals(invoice, STANDARD_LAYOUT, default_currency="")
        assert invoice.totals.currency is None

    def test_partial_totals_filled(self):
        invoice = make_invoice(
            make_item("100.00", "109.00"),
            totals=InvoiceTotals(subtotal="500.00"),
        )
        filled = reconcile_totals(invoice, STANDARD_LAYOUT)

        assert filled == ["currency", "tax"]
        assert invoice.totals.subtotal == "500.00"
        assert invoice.totals.tax == "9.00"

    def test_no_items_gives_zero_totals(self):
        invoice = make_invoice()
        reconcile_totals(invoice, STANDARD_LAYOUT)
        assert invoice.totals.subtotal == "0.00"
        assert invoice.totals.tax == "0.00"


class TestItemisedReconcile:
    """Tests for reconciliation with per-line GST amounts."""

    def test_sums_line_amounts(self):
        invoice = make_invoice(
            make_item("1,500.00", "1,635.00", tax="135.00"),
            make_item("200.00", "218.00", tax="18.00", line_no=2),
        )
        reconcile_totals(invoice, ITEMISED_LAYOUT)

        totals = invoice.totals
        assert totals.currency == "Singapore Dollar"
        assert totals.subtotal == "1700.00"
        assert totals.tax == "153.00"
        assert totals.freight == "0.00"
        assert totals.grand_total == "1853.00"

    def test_grand_total_falls_back_to_components(self):
        invoice = make_invoice(
            make_item("100.00", "0.00", tax="9.00"),
            totals=InvoiceTotals(freight="5.00"),
        )
        reconcile_totals(invoice, ITEMISED_LAYOUT)

        assert invoice.totals.freight == "5.00"
        assert invoice.totals.grand_total == "114.00"

    def test_printed_grand_total_wins(self):
        invoice = make_invoice(
            make_item("100.00", "109.00", tax="9.00"),
            totals=InvoiceTotals(grand_total="120.00"),
        )
        reconcile_totals(invoice, ITEMISED_LAYOUT)
        assert invoice.totals.grand_total == "120.00"
        assert invoice.totals.freight == "0.00"
