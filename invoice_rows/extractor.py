"""
Field extraction from normalized invoice text.

This module provides one extractor per semantic field group:
- Invoice number (decides which invoice a chunk of text belongs to)
- Header block (vendor, dates, status, description, ...)
- Invoice-level GST rate
- Line items, via the ordered grammars of a Layout
- Totals block (currency, sub total, GST, freight, grand total)

Every extractor takes text that has already been through normalize_text(),
so labels always read "Label : value". Extractors are independent of each
other, never raise on a missed field, and return numbers as the raw strings
that were printed.
"""

import re
from typing import Optional

from .config import logger
from .layouts import STANDARD_LAYOUT, Layout
from .schemas import InvoiceHeader, InvoiceTotals, LineItem


# ============================================================================
# Label Patterns
# ============================================================================

_TOKEN = r"([A-Z0-9-]+)"
_AMOUNT = r"([0-9][0-9,]*\.\d{2})(?!\d)"

# "Related Invoice No" must not be read as the invoice's own number
_INVOICE_NO = re.compile(r"(?<!Related\s)Invoice\s*No\s*:\s*" + _TOKEN, re.IGNORECASE)

_FIELD_LABELS = (
    r"Vendor\s*ID",
    r"Attention\s*To",
    r"Invoice\s*Date",
    r"Credit\s*Term",
    r"(?:Related\s*)?Invoice\s*No",
    r"Invoice\s*Status",
    r"Invoicing\s*Instruction\s*ID",
    r"Description",
    r"Currency",
)

_SECTION_LABELS = (
    r"No\.\s",
    r"Invoice\s*Amount\s*Summary",
    r"Sub\s*Total",
    r"Total\s*GST",
    r"Freight\s*Amount",
    r"Total\s*Invoice\s*Amount",
    r"GST\s*@",
)

# Free-text values end at the next "Label :" or section heading
_LABEL_AHEAD = (
    r"\s+(?:" + "|".join(_FIELD_LABELS) + r")\s*:"
    + r"|\s+(?:" + "|".join(_SECTION_LABELS) + r")"
    + r"|$"
)
_NEXT_LABEL = r"(?=" + _LABEL_AHEAD + r")"

_HEADER_PATTERNS: dict[str, re.Pattern] = {
    "vendor_id": re.compile(r"Vendor\s*ID\s*:\s*([A-Z0-9]+)", re.IGNORECASE),
    "attention_to": re.compile(r"Attention\s*To\s*:\s*(.+?)" + _NEXT_LABEL, re.IGNORECASE),
    "invoice_date": re.compile(
        r"Invoice\s*Date\s*:\s*(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})(?!\d)",
        re.IGNORECASE,
    ),
    "credit_term": re.compile(r"Credit\s*Term\s*:\s*(.+?)" + _NEXT_LABEL, re.IGNORECASE),
    "invoice_no": _INVOICE_NO,
    "related_invoice_no": re.compile(r"Related\s*Invoice\s*No\s*:\s*" + _TOKEN, re.IGNORECASE),
    "invoice_status": re.compile(r"Invoice\s*Status\s*:\s*([A-Za-z]+)", re.IGNORECASE),
    "instruction_id": re.compile(
        r"Invoicing\s*Instruction\s*ID\s*:\s*" + _TOKEN,
        re.IGNORECASE,
    ),
    "header_description": re.compile(
        r"Description\s*:\s*(.+?)"
        r"(?=\s(?:No\.\s|Currency\s*:|Invoice\s*Amount\s*Summary|Sub\s*Total"
        r"|Total\s*GST|Freight\s*Amount|Total\s*Invoice\s*Amount)|$)",
        re.IGNORECASE,
    ),
}

_GST_RATE = re.compile(r"GST\s*@\s*(\d{1,2}(?:\.\d+)?)\s*%", re.IGNORECASE)

_TOTALS_PATTERNS: dict[str, re.Pattern] = {
    # Currency names are letters only; stop at the next label or any non-letter
    "currency": re.compile(
        r"Currency\s*:\s*([A-Za-z][A-Za-z ]*?)(?=\s*[^A-Za-z\s]|" + _LABEL_AHEAD + r")",
        re.IGNORECASE,
    ),
    "subtotal": re.compile(
        r"Sub\s*Total(?:\s*\([^)]*\))?\s*:\s*" + _AMOUNT,
        re.IGNORECASE,
    ),
    "tax": re.compile(
        r"Total\s*GST(?:\s*Payable)?(?:\s*\([^)]*\))?\s*:\s*" + _AMOUNT,
        re.IGNORECASE,
    ),
    "freight": re.compile(r"Freight\s*Amount\s*:\s*" + _AMOUNT, re.IGNORECASE),
    "grand_total": re.compile(
        r"Total\s*Invoice\s*Amount(?:\s*\([^)]*\))?\s*:\s*" + _AMOUNT,
        re.IGNORECASE,
    ),
}


# ============================================================================
# Field Extractors
# ============================================================================

def find_invoice_no(text: str) -> Optional[str]:
    """
    Find the invoice number that a chunk of text belongs to.

    Returns None if the chunk carries no "Invoice No" label.
    """
    match = _INVOICE_NO.search(text)
    return match.group(1) if match else None


def extract_header_fields(text: str) -> InvoiceHeader:
    """
    Extract every header field present in the text.

    Fields that are not found are left as None.
    """
    fields: dict[str, str] = {}
    for name, pattern in _HEADER_PATTERNS.items():
        match = pattern.search(text)
        if match:
            value = match.group(1).strip()
            if value:
                fields[name] = value
    return InvoiceHeader(**fields)


def find_gst_rate(text: str) -> Optional[float]:
    """Find an invoice-level "GST @ N%" rate."""
    match = _GST_RATE.search(text)
    return float(match.group(1)) if match else None


def extract_line_items(text: str, layout: Layout = STANDARD_LAYOUT) -> list[LineItem]:
    """
    Extract line items using the layout's grammars in order.

    The first grammar that yields at least one item wins; later grammars are
    only tried when every earlier one found nothing.
    """
    for pattern in layout.line_item_patterns:
        items = pattern.find(text)
        if items:
            if pattern is not layout.line_item_patterns[0]:
                logger.debug(f"Line items matched by fallback grammar '{pattern.name}'")
            return items
    return []


def extract_totals(text: str) -> InvoiceTotals:
    """
    Extract the invoice totals block.

    Amounts keep their thousands separators, e.g. "1,331.00".
    """
    fields: dict[str, str] = {}
    for name, pattern in _TOTALS_PATTERNS.items():
        match = pattern.search(text)
        if match:
            value = match.group(1).strip()
            if value:
                fields[name] = value
    return InvoiceTotals(**fields)
