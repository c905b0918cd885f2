"""
Layout variants for invoice line items and totals.

Invoices seen in the wild follow a few closely related grammars that differ
in whether each line carries its own GST amount and in how many decimals the
quantity and unit price are printed with. Each grammar is a LineItemPattern;
a Layout lists the patterns to try, in order, plus the export columns and the
totals it expects.

Patterns run over normalized text, where a whole page is one run-on line, so
decimal-place counts are the only reliable cue separating quantity, price and
amount columns.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .coercion import derive_tax_rate
from .config import MIN_DESCRIPTION_LENGTH, LayoutVariant, logger
from .schemas import LineItem


# ============================================================================
# Pattern Fragments
# ============================================================================

_LINE_NO = r"(?:^|\s)(?P<line_no>\d{1,3})\s+"
# A description never runs across a "Label : value" field
_DESCRIPTION = r"(?P<description>(?:(?! : ).)+?)\s+"
_AMOUNT = r"[0-9][0-9,]*\.\d{2}"
# Some layouts print a lone 0 between the unit price and the quantity
_STRAY_ZERO = r"(?:0(?:\.0+)?\s+)?"
# A row ends where its run of amounts ends
_END = r"(?=\s|$)(?!\s+[0-9][0-9,]*\.\d{2}(?:\s|$))"


@dataclass(frozen=True)
class LineItemPattern:
    """
    One line-item grammar.

    Attributes:
        name: Short identifier used in logs
        description: Human-readable summary of the column order
        regex: Compiled pattern with named groups
        has_tax_amount: True if the pattern captures a per-line GST amount
    """
    name: str
    description: str
    regex: re.Pattern
    has_tax_amount: bool = False

    def find(self, text: str) -> list[LineItem]:
        """Return every line item this grammar recognizes in the text."""
        items: list[LineItem] = []

        for match in self.regex.finditer(text):
            fields = match.groupdict()
            description = fields["description"].strip()
            if len(description) < MIN_DESCRIPTION_LENGTH:
                logger.debug(f"Rejected line item with short description: {description!r}")
                continue

            line_no = int(fields["line_no"])
            if line_no < 1:
                logger.debug(f"Rejected line item with line number {line_no}")
                continue

            tax_amount = fields.get("tax_amount")
            items.append(LineItem(
                line_no=line_no,
                description=description,
                quantity=fields["quantity"],
                unit_price=fields["unit_price"],
                gross_excluding_tax=fields["gross_excluding_tax"],
                tax_amount=tax_amount,
                gross_including_tax=fields["gross_including_tax"],
                tax_rate_percent=(
                    derive_tax_rate(tax_amount, fields["gross_excluding_tax"])
                    if tax_amount is not None else None
                ),
            ))

        return items


UNIT_PRICE_QUANTITY = LineItemPattern(
    name="unit_price_quantity",
    description="No. | Description | Unit Price (3-4 dp) | [0] | Quantity (5 dp) | Ex. GST | Inc. GST",
    regex=re.compile(
        _LINE_NO + _DESCRIPTION
        + r"(?P<unit_price>[0-9][0-9,]*\.\d{3,4})\s+"
        + _STRAY_ZERO
        + r"(?P<quantity>[0-9]+\.\d{5})\s+"
        + rf"(?P<gross_excluding_tax>{_AMOUNT})\s+"
        + rf"(?P<gross_including_tax>{_AMOUNT})"
        + _END,
        re.IGNORECASE,
    ),
)

ITEMISED_TAX = LineItemPattern(
    name="itemised_tax",
    description="No. | Description | Unit Price | [0] | Quantity (5 dp) | Ex. GST | GST | Inc. GST",
    regex=re.compile(
        _LINE_NO + _DESCRIPTION
        + r"(?P<unit_price>[0-9][0-9,]*\.\d{2,4})\s+"
        + _STRAY_ZERO
        + r"(?P<quantity>[0-9]+\.\d{5})\s+"
        + rf"(?P<gross_excluding_tax>{_AMOUNT})\s+"
        + rf"(?P<tax_amount>{_AMOUNT})\s+"
        + rf"(?P<gross_including_tax>{_AMOUNT})"
        + _END,
        re.IGNORECASE,
    ),
    has_tax_amount=True,
)

LOOSE_QUANTITY = LineItemPattern(
    name="loose_quantity",
    description="No. | Description | Unit Price | [0] | Quantity (any) | Ex. GST | Inc. GST",
    regex=re.compile(
        _LINE_NO + _DESCRIPTION
        + r"(?P<unit_price>[0-9][0-9,]*\.\d{2,4})\s+"
        + _STRAY_ZERO
        + r"(?P<quantity>[0-9]+(?:\.\d+)?)\s+"
        + rf"(?P<gross_excluding_tax>{_AMOUNT})\s+"
        + rf"(?P<gross_including_tax>{_AMOUNT})"
        + _END,
        re.IGNORECASE,
    ),
)


# ============================================================================
# Layouts
# ============================================================================

_HEADER_COLUMNS = (
    "Vendor ID", "Attention To", "Invoice Date", "Credit Term", "Invoice No",
    "Related Invoice No", "Invoice Status", "Invoicing Instruction ID", "Description",
)
_ITEM_COLUMNS = (
    "No.", "Description", "Quantity", "Unit Price", "Gross Amt (EX. GST)",
    "GST %", "Gross Amt (inc. GST)",
)
_TOTALS_COLUMNS = ("Currency", "Sub Total (Excluding GST)", "Total GST Payable")

_BASE_WIDTHS = (12, 18, 12, 10, 18, 18, 12, 20, 70, 6, 70, 10, 12, 16, 8, 18, 16, 20, 18)


@dataclass(frozen=True)
class Layout:
    """
    Attributes:
        variant: Layout identifier
        columns: Export column headers, in row order
        column_widths: Spreadsheet column widths, one per column
        line_item_patterns: Grammars to try, first match wins
        required_totals: InvoiceTotals fields that must be set for totals to count as complete
        itemised_tax: True if GST is reconciled from per-line tax amounts
        blank_tax_rate: Value written to the GST % cell when no rate is known
    """
    variant: LayoutVariant
    columns: tuple[str, ...]
    column_widths: tuple[int, ...]
    line_item_patterns: tuple[LineItemPattern, ...]
    required_totals: tuple[str, ...]
    itemised_tax: bool
    blank_tax_rate: Optional[float]


STANDARD_LAYOUT = Layout(
    variant=LayoutVariant.STANDARD,
    columns=_HEADER_COLUMNS + _ITEM_COLUMNS + _TOTALS_COLUMNS,
    column_widths=_BASE_WIDTHS,
    line_item_patterns=(UNIT_PRICE_QUANTITY, ITEMISED_TAX, LOOSE_QUANTITY),
    required_totals=("currency", "subtotal", "tax"),
    itemised_tax=False,
    blank_tax_rate=0,
)

ITEMISED_LAYOUT = Layout(
    variant=LayoutVariant.ITEMISED,
    columns=(
        _HEADER_COLUMNS + _ITEM_COLUMNS + _TOTALS_COLUMNS
        + ("Freight Amount", "Total Invoice Amount")
    ),
    column_widths=_BASE_WIDTHS + (16, 20),
    line_item_patterns=(ITEMISED_TAX, UNIT_PRICE_QUANTITY, LOOSE_QUANTITY),
    required_totals=("currency", "subtotal", "tax", "freight", "grand_total"),
    itemised_tax=True,
    blank_tax_rate=None,
)

LAYOUTS: dict[LayoutVariant, Layout] = {
    LayoutVariant.STANDARD: STANDARD_LAYOUT,
    LayoutVariant.ITEMISED: ITEMISED_LAYOUT,
}


def get_layout(variant) -> Layout:
    """Look up a layout by variant or its string value."""
    return LAYOUTS[LayoutVariant(variant)]
