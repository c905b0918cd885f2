"""
Computation of invoice totals that could not be read from the text.

Totals printed on the invoice always win; computed figures only fill
fields that are still empty. All computed amounts are rounded half-up to two
decimal places.
"""

from decimal import Decimal

from .coercion import format_amount, parse_amount
from .config import DEFAULT_CURRENCY, logger
from .layouts import Layout
from .schemas import Invoice, InvoiceTotals, merge_if_absent

_ZERO = Decimal("0")


def totals_complete(totals: InvoiceTotals, layout: Layout) -> bool:
    """True if every totals field the layout requires is set."""
    return all(getattr(totals, name) for name in layout.required_totals)


def compute_totals(
    invoice: Invoice,
    layout: Layout,
    default_currency: str = DEFAULT_CURRENCY,
) -> InvoiceTotals:
    """
    Compute invoice totals from the accumulated line items.

    Sub total is the sum of gross amounts excluding GST. For itemised layouts
    GST is the sum of per-line tax amounts and the grand total the sum of
    gross amounts including GST (or sub total + GST + freight when that sum
    is not positive). For the standard layout GST is the sum of
    (including - excluding) over lines where including >= excluding, and
    freight and grand total are not tracked.

    Figures already read from text (currently in invoice.totals) are used in
    place of computed ones when deriving the grand total.
    """
    subtotal = _ZERO
    tax = _ZERO
    gross_including = _ZERO

    for item in invoice.line_items:
        excluding = parse_amount(item.gross_excluding_tax)
        including = parse_amount(item.gross_including_tax)
        if excluding is not None:
            subtotal += excluding
        if including is not None:
            gross_including += including

        if layout.itemised_tax:
            item_tax = parse_amount(item.tax_amount)
            if item_tax is not None:
                tax += item_tax
        elif excluding is not None and including is not None and including >= excluding:
            tax += including - excluding

    computed = InvoiceTotals(
        currency=default_currency or None,
        subtotal=format_amount(subtotal),
        tax=format_amount(tax),
    )

    if layout.itemised_tax:
        computed.freight = "0.00"
        grand_total = gross_including
        if grand_total <= 0:
            effective = invoice.totals.model_copy()
            merge_if_absent(effective, computed)
            grand_total = sum(
                (parse_amount(value) or _ZERO
                 for value in (effective.subtotal, effective.tax, effective.freight)),
                _ZERO,
            )
        computed.grand_total = format_amount(grand_total)

    return computed


def reconcile_totals(
    invoice: Invoice,
    layout: Layout,
    default_currency: str = DEFAULT_CURRENCY,
) -> list[str]:
    """
    Fill in missing totals on the invoice, leaving text-read values untouched.

    Does nothing if the totals are already complete for the layout.

    Returns:
        Names of the totals fields that were filled
    """
    if totals_complete(invoice.totals, layout):
        return []

    filled = merge_if_absent(invoice.totals, compute_totals(invoice, layout, default_currency))
    if filled:
        logger.debug(f"Invoice {invoice.invoice_no}: computed {', '.join(filled)} from line items")
    return filled
